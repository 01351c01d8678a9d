"""Shared fixtures for pixmill tests."""

import logging
import shutil
import tempfile
from pathlib import Path

import pytest
import yaml

from pixels import BLUE, GREEN, RED, encode_png, gradient_rgba, quadrant_rgba, solid_rgba


# === Logging ===

@pytest.fixture(autouse=True)
def reset_pixmill_logging():
    """Drop handlers installed by setup_logging so streams do not leak between tests."""
    yield
    logger = logging.getLogger("pixmill")
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(logging.NOTSET)


# === Path/Directory Fixtures ===

@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


# === Image Fixtures ===

@pytest.fixture
def quadrant_png():
    """4x4 PNG with red/green/blue/white quadrants."""
    return encode_png(quadrant_rgba(), 4, 4)


@pytest.fixture
def temp_png(temp_dir):
    """A 40x20 gradient PNG written to disk."""
    path = temp_dir / "photo.png"
    path.write_bytes(encode_png(gradient_rgba(40, 20), 40, 20))
    return path


@pytest.fixture
def temp_logo(temp_dir):
    """A 4x4 opaque blue PNG written to disk."""
    path = temp_dir / "logo.png"
    path.write_bytes(encode_png(solid_rgba(4, 4, BLUE), 4, 4))
    return path


@pytest.fixture
def input_dir(temp_dir):
    """Input directory with two PNGs and a non-image file."""
    directory = temp_dir / "input"
    directory.mkdir()
    (directory / "a.png").write_bytes(encode_png(solid_rgba(10, 10, RED), 10, 10))
    (directory / "b.png").write_bytes(encode_png(solid_rgba(20, 10, GREEN), 20, 10))
    (directory / "notes.txt").write_text("not an image")
    return directory


# === Config Fixtures ===

@pytest.fixture
def minimal_config_dict():
    """Minimal valid configuration dictionary."""
    return {
        "version": 1,
        "outputs": {
            "default": {},
        },
    }


@pytest.fixture
def full_config_dict():
    """Full configuration dictionary with all options."""
    return {
        "version": 1,
        "settings": {
            "on_error": "continue",
            "workers": 2,
            "copy_output": "never",
        },
        "input": {
            "path": "./input",
            "pattern": "*.png",
        },
        "outputs": {
            "thumb": {
                "format": "jpeg",
                "quality": 0.8,
                "output_dir": "./output",
                "filename_prefix": "pre_",
                "filename_suffix": "_suf",
                "debug": False,
                "transforms": [
                    {"scale": {"width": 8, "height": 8, "mode": "fill"}},
                    {"crop": {"x": 1, "y": 1, "width": 6, "height": 6}},
                    {"crop_center": {"width": 4, "height": 4}},
                    {"pad": {"left": 1, "right": 1, "top": 1, "bottom": 1, "color": "#000000ff"}},
                    {"flip": "horizontal"},
                    {"rotate": 90},
                    {"overlay": {"image": "logo.png", "x": 1, "y": 1}},
                ],
            },
            "raw": {
                "format": "rgba",
                "enabled": False,
            },
        },
    }


@pytest.fixture
def temp_config_file(temp_dir, minimal_config_dict):
    """Write the minimal config to a YAML file."""
    config_path = temp_dir / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(minimal_config_dict, f)
    return config_path


@pytest.fixture
def write_config(temp_dir):
    """Factory writing a config dict to temp_dir/config.yaml."""
    def _write(data: dict) -> Path:
        config_path = temp_dir / "config.yaml"
        with open(config_path, "w") as f:
            yaml.dump(data, f)
        return config_path
    return _write
