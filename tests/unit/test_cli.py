"""Tests for pixmill.cli module."""

from pathlib import Path

import yaml

from pixels import png_header_only
from pixmill import __version__
from pixmill.cli import cmd_info, create_parser, main


class TestCreateParser:
    """Test argument parser creation."""

    def test_parser_creation(self):
        parser = create_parser()
        assert parser.prog == "pixm"

    def test_version_flag(self):
        assert create_parser().parse_args(["-V"]).version is True

    def test_paths(self):
        args = create_parser().parse_args(["-c", "p.yaml", "-i", "./in", "-o", "./out"])
        assert args.config == Path("p.yaml")
        assert args.input == Path("./in")
        assert args.output == Path("./out")

    def test_flags(self):
        args = create_parser().parse_args(["--validate", "--dry-run", "-q"])
        assert args.validate is True
        assert args.dry_run is True
        assert args.quiet is True

    def test_verbosity_counts(self):
        assert create_parser().parse_args(["-vv"]).verbose == 2

    def test_info_command(self):
        args = create_parser().parse_args(["info", "photo.png"])
        assert args.command == "info"
        assert args.image == Path("photo.png")

    def test_log_file(self):
        assert create_parser().parse_args(["--log-file", "run.log"]).log_file == Path("run.log")


class TestMain:
    """Test CLI entry point behavior."""

    def test_version(self, capsys):
        assert main(["--version"]) == 0
        assert f"pixmill {__version__}" in capsys.readouterr().out

    def test_no_config_shows_help(self, capsys):
        assert main([]) == 1
        assert "usage: pixm" in capsys.readouterr().out

    def test_validate_ok(self, temp_config_file, capsys):
        assert main(["-c", str(temp_config_file), "--validate"]) == 0
        out = capsys.readouterr().out
        assert "Configuration is valid" in out
        assert "default" in out

    def test_validate_invalid(self, write_config, capsys):
        path = write_config({"outputs": {"p": {"format": "gif"}}})
        assert main(["-c", str(path), "--validate"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_validate_missing_file(self, temp_dir, capsys):
        assert main(["-c", str(temp_dir / "nope.yaml"), "--validate"]) == 1
        assert "not found" in capsys.readouterr().err

    def test_input_required(self, temp_config_file, capsys):
        assert main(["-c", str(temp_config_file)]) == 1
        assert "--input is required" in capsys.readouterr().err

    def test_process(self, write_config, input_dir, temp_dir):
        path = write_config({"outputs": {"thumb": {"transforms": [{"scale": {"width": 4, "height": 4}}]}}})
        out_dir = temp_dir / "out"
        assert main(["-c", str(path), "-i", str(input_dir), "-o", str(out_dir), "-q"]) == 0
        assert sorted(p.name for p in out_dir.iterdir()) == ["a_thumb.png", "b_thumb.png"]

    def test_process_failure_exit_code(self, write_config, input_dir, temp_dir):
        path = write_config({"outputs": {"wide": {"transforms": [{"crop": {"width": 15, "height": 5}}]}}})
        assert main(["-c", str(path), "-i", str(input_dir), "-o", str(temp_dir / "out"), "-q"]) == 1

    def test_process_missing_input(self, temp_config_file, temp_dir, capsys):
        assert main(["-c", str(temp_config_file), "-i", str(temp_dir / "missing")]) == 1
        assert "does not exist" in capsys.readouterr().err

    def test_dry_run(self, temp_dir, input_dir):
        config_path = temp_dir / "config.yaml"
        out_dir = temp_dir / "out"
        config_path.write_text(yaml.dump({"outputs": {"p": {"output_dir": str(out_dir)}}}))
        assert main(["-c", str(config_path), "-i", str(input_dir), "--dry-run"]) == 0
        assert not out_dir.exists()

    def test_log_file_written(self, temp_config_file, temp_dir, temp_png):
        log_file = temp_dir / "run.log"
        assert main(["-c", str(temp_config_file), "-i", str(temp_png), "-o", str(temp_dir / "out"),
                     "--log-file", str(log_file), "-q"]) == 0
        assert "Processing complete" in log_file.read_text()


class TestInfo:
    """Test the info subcommand."""

    def test_info(self, temp_png, capsys):
        assert main(["info", str(temp_png)]) == 0
        assert "PNG 40x20" in capsys.readouterr().out

    def test_info_not_an_image(self, temp_dir, capsys):
        path = temp_dir / "notes.txt"
        path.write_text("hello")
        assert main(["info", str(path)]) == 1
        assert "Unrecognized image format" in capsys.readouterr().err

    def test_info_oversized_image(self, temp_dir, capsys):
        path = temp_dir / "huge.png"
        path.write_bytes(png_header_only(100_000, 100_000))
        assert main(["info", str(path)]) == 1
        assert "too large" in capsys.readouterr().err

    def test_info_missing_file(self, temp_dir):
        assert cmd_info(temp_dir / "missing.png") == 1

    def test_info_requires_path(self):
        assert cmd_info(None) == 1
