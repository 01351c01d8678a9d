"""Command-line interface for pixmill."""

import argparse
import sys
from pathlib import Path

from pixmill import __version__
from pixmill.logging_config import get_logger

logger = get_logger(__name__)


def show_version() -> None:
    """Show version information including the Pillow build in use."""
    import PIL

    logger.info("pixmill %s", __version__)
    logger.info("Pillow %s", PIL.__version__)


def cmd_info(image: Path | None) -> int:
    """Print the container and dimensions of an image file."""
    from pixmill.exceptions import DecodeError
    from pixmill.source import EncodedSource

    if image is None:
        logger.error("'info' requires an image path")
        return 1

    try:
        source = EncodedSource.from_bytes(image.read_bytes())
    except FileNotFoundError:
        logger.error("File not found: %s", image)
        return 1
    except DecodeError as e:
        logger.error("%s: %s", image, e)
        return 1

    logger.info("%s: %s %dx%d", image, source.container, source.width, source.height)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pixm",
        description="Configurable image processing pipeline for scaling, cropping, compositing and re-encoding images.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pixm -c pipeline.yaml -i ./input -o ./output  Process images with config
  pixm -c pipeline.yaml -i photo.jpg            Process a single file
  pixm -c pipeline.yaml --validate              Validate config only
  pixm -c pipeline.yaml -i ./input --dry-run    Show what would happen
  pixm info photo.jpg                           Show format and size of an image
""",
    )

    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Show version information and exit",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to YAML configuration file",
    )

    parser.add_argument(
        "-i",
        "--input",
        type=Path,
        help="Input image file or directory containing images",
    )

    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output directory (overrides config)",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration file and exit",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without rendering anything",
    )

    parser.add_argument(
        "command",
        nargs="?",
        choices=["info"],
        help="Subcommand: info (show format and dimensions of an image)",
    )

    parser.add_argument(
        "image",
        nargs="?",
        type=Path,
        help="Image path (used with 'info')",
    )

    # Logging options
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for verbose, -vv for debug)",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all output except errors",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        help="Write logs to file (includes all levels)",
    )

    return parser


def main(args: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    from pixmill.logging_config import setup_logging

    setup_logging(
        verbosity=parsed.verbose,
        quiet=parsed.quiet,
        log_file=parsed.log_file,
    )

    if parsed.version:
        show_version()
        return 0

    if parsed.command == "info":
        return cmd_info(parsed.image)

    # Require config for other operations
    if not parsed.config:
        parser.print_help()
        return 1

    from pixmill.config import load_config
    from pixmill.exceptions import ConfigError, PixMillError

    if parsed.validate:
        try:
            config = load_config(parsed.config)
        except ConfigError as e:
            logger.error("Configuration error: %s", e)
            return 1
        except FileNotFoundError:
            logger.error("Configuration file not found: %s", parsed.config)
            return 1

        logger.info("Configuration is valid: %s", parsed.config)
        logger.info("  Outputs defined: %s", ", ".join(config.outputs.keys()))
        return 0

    if not parsed.input:
        logger.error("--input is required for processing")
        return 1

    from pixmill.processor import process

    try:
        config = load_config(parsed.config)
        summary = process(
            config=config,
            input_path=parsed.input,
            output_dir=parsed.output,
            dry_run=parsed.dry_run,
        )
        return 1 if summary.failed else 0
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 1
    except FileNotFoundError as e:
        logger.error("File not found: %s", e)
        return 1
    except (PixMillError, OSError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
