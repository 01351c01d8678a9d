"""Main processing pipeline for pixmill."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from pixmill.config import Config, ErrorHandling, OutputProfile
from pixmill.constants import IMAGE_SUFFIXES, RAW_EXTENSIONS, ImageFormat, PixelFormat
from pixmill.encoding import EncodingOptions, OutputTarget
from pixmill.exceptions import PixMillError, ProcessingError
from pixmill.executor import ComputedImage, apply_copy_policy, render, render_async
from pixmill.logging_config import get_logger
from pixmill.pipeline import TransformExecutor, load_image_file
from pixmill.transformer import ImageTransformer

logger = get_logger(__name__)


@dataclass
class ProcessingSummary:
    """Outcome of a batch run."""

    succeeded: int = 0
    failed: int = 0
    outputs: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed


@dataclass
class _Job:
    image_path: Path
    profile_name: str
    transformer: ImageTransformer
    output_path: Path


def get_input_files(input_path: Path, pattern: str = "*") -> list[Path]:
    """
    Get list of image files to process.

    Args:
        input_path: File or directory path
        pattern: Glob pattern for finding files in directory

    Returns:
        Sorted list of image file paths (directory matches are filtered to
        known image suffixes)
    """
    if input_path.is_file():
        return [input_path]
    elif input_path.is_dir():
        return sorted(
            p for p in input_path.glob(pattern)
            if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES
        )
    else:
        raise ProcessingError(f"Input path does not exist: {input_path}")


def generate_output_filename(
    source_name: str,
    profile_name: str,
    prefix: str = "",
    suffix: str = "",
    target: OutputTarget = ImageFormat.PNG,
    size: tuple[int, int] | None = None,
) -> str:
    """Generate output filename based on source and profile settings.

    Raw pixel outputs carry no header, so their size goes into the name.
    """
    stem = Path(source_name).stem
    if isinstance(target, PixelFormat):
        dims = f"_{size[0]}x{size[1]}" if size else ""
        return f"{prefix}{stem}{suffix}_{profile_name}{dims}{RAW_EXTENSIONS[target]}"
    return f"{prefix}{stem}{suffix}_{profile_name}{target.extension}"


def _prepare(
    image_path: Path,
    profile_name: str,
    profile: OutputProfile,
    output_dir: Path,
    dry_run: bool,
) -> _Job:
    """Load the source and append the profile's transforms without rendering."""
    transformer = TransformExecutor().apply(
        load_image_file(image_path),
        profile.transforms,
        dry_run=dry_run,
        debug=profile.debug,
        debug_output_dir=output_dir,
        debug_source_name=image_path.name,
        debug_profile_name=profile_name,
    )
    output_filename = generate_output_filename(
        image_path.name,
        profile_name,
        profile.filename_prefix,
        profile.filename_suffix,
        profile.format,
        tuple(transformer.get_current_dimensions()),
    )
    return _Job(image_path, profile_name, transformer, output_dir / output_filename)


def _write_output(result: ComputedImage, output_path: Path) -> Path:
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(result.buffer)
    except OSError as e:
        raise ProcessingError(f"Cannot write output: {e}", context={"path": str(output_path)}) from e
    logger.info("  Created: %s (%dx%d)", output_path, result.width, result.height)
    return output_path


def process_single_image(
    image_path: Path,
    profile_name: str,
    profile: OutputProfile,
    output_dir: Path,
    dry_run: bool = False,
    copy_output: bool | None = None,
) -> Path | None:
    """
    Process a single image according to an output profile, on this thread.

    Args:
        image_path: Path to source image
        profile_name: Name of the profile (for output filename)
        profile: Output profile configuration
        output_dir: Directory for output files
        dry_run: If True, only describe what would be done
        copy_output: Output isolation override passed to the renderer

    Returns:
        Path to output file, or None if dry run
    """
    job = _prepare(image_path, profile_name, profile, output_dir, dry_run)

    if dry_run:
        logger.info("    [dry-run] Write to: %s", job.output_path)
        return None

    result = render(
        job.transformer.spec,
        profile.format,
        EncodingOptions(quality=profile.quality),
        copy_output=copy_output,
    )
    return _write_output(result, job.output_path)


def _record_failure(
    summary: ProcessingSummary,
    config: Config,
    image_path: Path,
    profile_name: str,
    error: Exception,
) -> None:
    logger.error("  Error in profile '%s' for %s: %s", profile_name, image_path.name, error)
    summary.failed += 1
    summary.errors.append(f"{image_path.name} [{profile_name}]: {error}")
    if config.settings.on_error == ErrorHandling.STOP:
        raise error


def process(
    config: Config,
    input_path: Path,
    output_dir: Path | None = None,
    dry_run: bool = False,
) -> ProcessingSummary:
    """
    Process images according to configuration.

    With more than one worker, every (image, profile) pair is validated on
    this thread and then rendered on a thread pool; results are written in
    input order. With `settings.workers == 1` everything runs serially.

    Args:
        config: Pipeline configuration
        input_path: Path to input file or directory
        output_dir: Override output directory (uses profile dirs if None)
        dry_run: If True, only describe what would be done

    Returns:
        ProcessingSummary with counts and written paths
    """
    summary = ProcessingSummary()

    input_files = get_input_files(input_path, config.input.pattern)
    if not input_files:
        logger.info("No image files found in: %s", input_path)
        return summary

    logger.info("Found %d image file(s) to process", len(input_files))

    profiles = [(name, p) for name, p in config.outputs.items() if p.enabled]
    copy_output = config.settings.copy_output.as_flag()

    if dry_run or config.settings.workers == 1:
        for image_path in input_files:
            logger.info("Processing: %s", image_path.name)
            for profile_name, profile in profiles:
                profile_output_dir = output_dir if output_dir else profile.output_dir
                try:
                    path = process_single_image(
                        image_path, profile_name, profile, profile_output_dir, dry_run, copy_output
                    )
                    if path:
                        summary.outputs.append(path)
                    summary.succeeded += 1
                except PixMillError as e:
                    _record_failure(summary, config, image_path, profile_name, e)
        logger.info("Processing complete: %d succeeded, %d failed", summary.succeeded, summary.failed)
        return summary

    with ThreadPoolExecutor(max_workers=config.settings.workers, thread_name_prefix="pixmill") as pool:
        pending: list[tuple[_Job, OutputProfile, Future[ComputedImage]]] = []

        try:
            for image_path in input_files:
                logger.info("Processing: %s", image_path.name)
                for profile_name, profile in profiles:
                    profile_output_dir = output_dir if output_dir else profile.output_dir
                    try:
                        job = _prepare(image_path, profile_name, profile, profile_output_dir, dry_run)
                    except PixMillError as e:
                        _record_failure(summary, config, image_path, profile_name, e)
                        continue
                    future = render_async(
                        job.transformer.spec,
                        profile.format,
                        EncodingOptions(quality=profile.quality),
                        executor=pool,
                    )
                    pending.append((job, profile, future))

            for job, profile, future in pending:
                try:
                    result = apply_copy_policy(future.result(), copy_output)
                    summary.outputs.append(_write_output(result, job.output_path))
                    summary.succeeded += 1
                except PixMillError as e:
                    _record_failure(summary, config, job.image_path, job.profile_name, e)
        except PixMillError:
            for _, _, future in pending:
                future.cancel()
            raise

    logger.info("Processing complete: %d succeeded, %d failed", summary.succeeded, summary.failed)
    return summary
