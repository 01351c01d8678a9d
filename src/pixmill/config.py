"""Configuration loading and validation for pixmill batch pipelines."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from pixmill.constants import TRANSFORM_TYPES, ImageFormat, PixelFormat, ResizeMode, Rotation
from pixmill.encoding import OutputTarget, parse_target
from pixmill.exceptions import ConfigError, PixMillError
from pixmill.operations import TRANSPARENT, RgbaColor
from pixmill.transforms import parse_color, parse_rotation


# ============================================================================
# Enums for constrained string values
# ============================================================================


class ErrorHandling(str, Enum):
    """Error handling modes."""

    CONTINUE = "continue"  # Skip failed items, continue processing
    STOP = "stop"  # Stop on first error


class CopyOutputPolicy(str, Enum):
    """Whether rendered buffers are copied before being handed back."""

    AUTO = "auto"  # Ask the environment probe
    ALWAYS = "always"
    NEVER = "never"

    def as_flag(self) -> bool | None:
        if self is CopyOutputPolicy.ALWAYS:
            return True
        if self is CopyOutputPolicy.NEVER:
            return False
        return None


class FlipDirection(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


def _parse_enum(
    enum_class: type[Enum],
    value: Any,
    profile: str | None = None,
    transform_idx: int | None = None,
    field: str | None = None,
) -> Enum:
    """Parse a string value into an enum with validation.

    Args:
        enum_class: The enum class to parse into.
        value: The raw value from YAML.
        profile: Profile name for error context.
        transform_idx: Transform index for error context.
        field: Field name for error context.

    Returns:
        The parsed enum value.

    Raises:
        ConfigError: If the value is not a valid enum member.
    """
    try:
        return enum_class(str(value).lower())
    except ValueError:
        valid = ", ".join(e.value for e in enum_class)
        raise ConfigError(
            f"Invalid value '{value}'",
            profile=profile,
            transform_idx=transform_idx,
            field=field,
            suggestion=f"Valid values are: {valid}",
        )


def _get_int(
    data: dict[str, Any],
    key: str,
    default: int | None = None,
    profile: str | None = None,
    transform_idx: int | None = None,
) -> int:
    """Fetch an integer field, rejecting floats, strings and booleans."""
    value = data.get(key, default)
    if value is None:
        raise ConfigError(
            f"Missing required field '{key}'",
            profile=profile,
            transform_idx=transform_idx,
            field=key,
        )
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(
            f"Expected an integer, got {value!r}",
            profile=profile,
            transform_idx=transform_idx,
            field=key,
        )
    return value


def _get_mapping(
    data: dict[str, Any],
    key: str,
    profile: str | None = None,
    transform_idx: int | None = None,
) -> dict[str, Any]:
    """Fetch a nested mapping field; an empty value counts as an empty mapping."""
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(
            f"Expected a mapping for '{key}', got {value!r}",
            profile=profile,
            transform_idx=transform_idx,
            field=key,
            suggestion=f"Write it as '{key}: {{...}}' with named fields",
        )
    return value


@dataclass
class ScaleTransform:
    """Scale configuration."""
    width: int
    height: int
    mode: ResizeMode = ResizeMode.EXACT


@dataclass
class CropTransform:
    """Crop with an explicit top-left offset (pixels)."""
    x: int
    y: int
    width: int
    height: int


@dataclass
class CropCenterTransform:
    width: int
    height: int


@dataclass
class PadTransform:
    """Margins in pixels plus the fill colour."""
    left: int = 0
    right: int = 0
    top: int = 0
    bottom: int = 0
    color: RgbaColor = TRANSPARENT


@dataclass
class FlipTransform:
    direction: FlipDirection = FlipDirection.HORIZONTAL


@dataclass
class RotateTransform:
    angle: Rotation = Rotation.CW90


@dataclass
class OverlayTransform:
    """Overlay configuration.

    The overlay image gets its own transform list, applied before it is
    composited at (x, y) onto the current image.
    """
    image: Path
    x: int = 0
    y: int = 0
    transforms: list["Transform"] = field(default_factory=list)


@dataclass
class Transform:
    """A single transformation step."""
    type: str  # one of TRANSFORM_TYPES
    scale: ScaleTransform | None = None
    crop: CropTransform | None = None
    crop_center: CropCenterTransform | None = None
    pad: PadTransform | None = None
    flip: FlipTransform | None = None
    rotate: RotateTransform | None = None
    overlay: OverlayTransform | None = None
    enabled: bool = True  # Set to False to skip this transform


@dataclass
class OutputProfile:
    """Configuration for a single output profile."""
    format: OutputTarget = ImageFormat.PNG
    quality: float | None = None
    enabled: bool = True  # Set to False to skip this profile
    output_dir: Path = Path("./output")
    filename_prefix: str = ""
    filename_suffix: str = ""
    transforms: list[Transform] = field(default_factory=list)
    debug: bool = False  # Write a PNG snapshot after each transform


@dataclass
class Settings:
    """Global settings for the pipeline."""
    on_error: ErrorHandling = ErrorHandling.CONTINUE
    workers: int | None = None  # None lets the thread pool pick
    copy_output: CopyOutputPolicy = CopyOutputPolicy.AUTO


@dataclass
class InputConfig:
    """Input configuration."""
    path: Path = Path("./input")
    pattern: str = "*"


@dataclass
class Config:
    """Root configuration object."""
    version: int = 1
    settings: Settings = field(default_factory=Settings)
    input: InputConfig = field(default_factory=InputConfig)
    outputs: dict[str, OutputProfile] = field(default_factory=dict)


def _parse_color(value: Any, profile: str | None, transform_idx: int | None) -> RgbaColor:
    try:
        return parse_color(value)
    except PixMillError as e:
        raise ConfigError(
            e.message,
            profile=profile,
            transform_idx=transform_idx,
            field="color",
            suggestion="Use a name, '#rrggbbaa', or a list of 3-4 integers",
        ) from e


def parse_transform(
    transform_data: dict[str, Any],
    profile: str | None = None,
    transform_idx: int | None = None,
    base_dir: Path | None = None,
) -> Transform:
    """Parse a single transform from config data.

    Args:
        transform_data: One entry of a `transforms` list
        profile: Profile name for error context
        transform_idx: Position in the list for error context
        base_dir: Directory that relative overlay image paths resolve against

    Raises:
        ConfigError: If the transform is unknown or malformed
    """
    if not isinstance(transform_data, dict):
        raise ConfigError(
            f"Transform must be a mapping, got {transform_data!r}",
            profile=profile,
            transform_idx=transform_idx,
        )

    enabled = transform_data.get("enabled", True)
    ctx = {"profile": profile, "transform_idx": transform_idx}

    if "scale" in transform_data:
        scale_val = _get_mapping(transform_data, "scale", **ctx)
        mode = _parse_enum(ResizeMode, scale_val.get("mode", "exact"), field="mode", **ctx)
        return Transform(
            type="scale",
            scale=ScaleTransform(
                width=_get_int(scale_val, "width", **ctx),
                height=_get_int(scale_val, "height", **ctx),
                mode=mode,
            ),
            enabled=enabled,
        )
    elif "crop" in transform_data:
        crop_val = _get_mapping(transform_data, "crop", **ctx)
        return Transform(
            type="crop",
            crop=CropTransform(
                x=_get_int(crop_val, "x", 0, **ctx),
                y=_get_int(crop_val, "y", 0, **ctx),
                width=_get_int(crop_val, "width", **ctx),
                height=_get_int(crop_val, "height", **ctx),
            ),
            enabled=enabled,
        )
    elif "crop_center" in transform_data:
        crop_val = _get_mapping(transform_data, "crop_center", **ctx)
        return Transform(
            type="crop_center",
            crop_center=CropCenterTransform(
                width=_get_int(crop_val, "width", **ctx),
                height=_get_int(crop_val, "height", **ctx),
            ),
            enabled=enabled,
        )
    elif "pad" in transform_data:
        pad_val = transform_data["pad"]
        if isinstance(pad_val, int) and not isinstance(pad_val, bool):
            # Simple pad: same margin on every side (e.g., pad: 10)
            pad = PadTransform(left=pad_val, right=pad_val, top=pad_val, bottom=pad_val)
        elif isinstance(pad_val, dict):
            pad = PadTransform(
                left=_get_int(pad_val, "left", 0, **ctx),
                right=_get_int(pad_val, "right", 0, **ctx),
                top=_get_int(pad_val, "top", 0, **ctx),
                bottom=_get_int(pad_val, "bottom", 0, **ctx),
                color=_parse_color(pad_val.get("color", TRANSPARENT), profile, transform_idx),
            )
        else:
            raise ConfigError(
                f"Invalid pad value: {pad_val!r}",
                field="pad",
                suggestion="Use an integer margin or a mapping of left/right/top/bottom",
                **ctx,
            )
        return Transform(type="pad", pad=pad, enabled=enabled)
    elif "flip" in transform_data:
        flip_val = transform_data["flip"]
        if isinstance(flip_val, dict):
            flip_val = flip_val.get("direction", "horizontal")
        direction = _parse_enum(FlipDirection, flip_val, field="flip", **ctx)
        return Transform(type="flip", flip=FlipTransform(direction=direction), enabled=enabled)
    elif "rotate" in transform_data:
        rotate_val = transform_data["rotate"]
        if isinstance(rotate_val, dict):
            rotate_val = rotate_val.get("angle")
        try:
            angle = parse_rotation(rotate_val)
        except PixMillError as e:
            raise ConfigError(
                e.message,
                field="rotate",
                suggestion="Valid values are: 90, 180, 270",
                **ctx,
            ) from e
        return Transform(type="rotate", rotate=RotateTransform(angle=angle), enabled=enabled)
    elif "overlay" in transform_data:
        overlay_val = _get_mapping(transform_data, "overlay", **ctx)
        if "image" not in overlay_val:
            raise ConfigError("Overlay requires an 'image' path", field="image", **ctx)
        image_path = Path(overlay_val["image"])
        if base_dir is not None and not image_path.is_absolute():
            image_path = base_dir / image_path
        nested = [
            parse_transform(t, profile=profile, transform_idx=transform_idx, base_dir=base_dir)
            for t in overlay_val.get("transforms", [])
        ]
        return Transform(
            type="overlay",
            overlay=OverlayTransform(
                image=image_path,
                x=_get_int(overlay_val, "x", 0, **ctx),
                y=_get_int(overlay_val, "y", 0, **ctx),
                transforms=nested,
            ),
            enabled=enabled,
        )

    raise ConfigError(
        f"Unknown transform type: {transform_data}",
        suggestion=f"Valid types are: {', '.join(TRANSFORM_TYPES)}",
        **ctx,
    )


def _parse_format(value: Any, profile: str) -> OutputTarget:
    try:
        return parse_target(value)
    except PixMillError:
        valid = ", ".join([f.value for f in ImageFormat] + [f.value for f in PixelFormat])
        raise ConfigError(
            f"Invalid value '{value}'",
            profile=profile,
            field="format",
            suggestion=f"Valid values are: {valid}",
        )


def _parse_quality(value: Any, profile: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(
            f"Expected a number between 0.0 and 1.0, got {value!r}",
            profile=profile,
            field="quality",
        )
    return float(value)


def parse_output_profile(
    name: str,
    data: dict[str, Any],
    base_dir: Path | None = None,
) -> OutputProfile:
    """Parse an output profile from config data."""
    if not isinstance(data, dict):
        raise ConfigError(f"Output profile '{name}' must be a mapping")

    transforms = []
    for idx, t in enumerate(data.get("transforms") or []):
        transforms.append(parse_transform(t, profile=name, transform_idx=idx, base_dir=base_dir))

    return OutputProfile(
        format=_parse_format(data.get("format", "png"), name),
        quality=_parse_quality(data.get("quality"), name),
        enabled=data.get("enabled", True),
        output_dir=Path(data.get("output_dir", "./output")),
        filename_prefix=data.get("filename_prefix", ""),
        filename_suffix=data.get("filename_suffix", ""),
        transforms=transforms,
        debug=data.get("debug", False),
    )


def load_config(config_path: Path) -> Config:
    """Load and validate a configuration file.

    Relative overlay image paths are resolved against the directory the
    configuration file lives in.

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigError: If the YAML is malformed or fails validation
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a YAML dictionary")

    base_dir = config_path.parent

    # Parse settings
    settings = Settings()
    if "settings" in data:
        s = data["settings"] or {}
        on_error = _parse_enum(ErrorHandling, s.get("on_error", "continue"), field="settings.on_error")
        copy_output = _parse_enum(CopyOutputPolicy, s.get("copy_output", "auto"), field="settings.copy_output")
        workers = s.get("workers")
        if workers is not None and (isinstance(workers, bool) or not isinstance(workers, int) or workers < 1):
            raise ConfigError(
                f"Expected a positive integer, got {workers!r}",
                field="settings.workers",
            )
        settings = Settings(on_error=on_error, workers=workers, copy_output=copy_output)

    # Parse input
    input_config = InputConfig()
    if "input" in data:
        i = data["input"] or {}
        input_config = InputConfig(
            path=Path(i.get("path", "./input")),
            pattern=i.get("pattern", "*"),
        )

    # Parse outputs
    if "outputs" not in data or not isinstance(data["outputs"], dict):
        raise ConfigError("Configuration must contain 'outputs' section")

    outputs = {}
    for name, output_data in data["outputs"].items():
        outputs[name] = parse_output_profile(name, output_data, base_dir=base_dir)

    return Config(
        version=data.get("version", 1),
        settings=settings,
        input=input_config,
        outputs=outputs,
    )
