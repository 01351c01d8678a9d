"""Transform execution pipeline for pixmill."""

from pathlib import Path

from pixmill.config import FlipDirection, Transform
from pixmill.constants import ImageFormat
from pixmill.exceptions import ProcessingError
from pixmill.logging_config import get_logger
from pixmill.transformer import ImageTransformer

logger = get_logger(__name__)


def load_image_file(path: Path) -> ImageTransformer:
    """Read an encoded image from disk into a fresh transformer."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ProcessingError(f"Cannot read image: {e}", context={"path": str(path)}) from e
    return ImageTransformer.from_encoded_image(data)


class TransformExecutor:
    """Appends configured transforms to a transformer, with debug support."""

    def apply(
        self,
        transformer: ImageTransformer,
        transforms: list[Transform],
        dry_run: bool = False,
        debug: bool = False,
        debug_output_dir: Path | None = None,
        debug_source_name: str = "",
        debug_profile_name: str = "",
    ) -> ImageTransformer:
        """
        Apply configured transforms to a transformer.

        Every step goes through the builder, so dimension validation runs
        even in dry-run mode; only rendering is skipped.

        Args:
            transformer: Transformer holding the source image
            transforms: List of transforms to apply
            dry_run: If True, only describe what would be done
            debug: If True, save a PNG snapshot after each transform
            debug_output_dir: Directory for debug output files
            debug_source_name: Source filename for debug output naming
            debug_profile_name: Profile name for debug output naming

        Returns:
            The same transformer, with the operations appended
        """
        if debug and not dry_run and debug_output_dir:
            self._save_debug_image(
                transformer, debug_output_dir, debug_source_name, debug_profile_name, 0, "source"
            )

        for step_num, transform in enumerate(transforms, start=1):
            if not transform.enabled:
                continue

            self._append(transformer, transform)
            step_desc = transformer.spec.operations[-1].describe()
            width, height = transformer.get_current_dimensions()

            if dry_run:
                logger.info("    [dry-run] %s -> %dx%d", step_desc, width, height)
            else:
                logger.debug("    %s -> %dx%d", step_desc, width, height)

            if debug and not dry_run and debug_output_dir:
                self._save_debug_image(
                    transformer, debug_output_dir, debug_source_name, debug_profile_name, step_num, step_desc
                )

        return transformer

    def _append(self, transformer: ImageTransformer, transform: Transform) -> None:
        if transform.type == "scale" and transform.scale:
            scale = transform.scale
            transformer.scale(scale.width, scale.height, scale.mode)
        elif transform.type == "crop" and transform.crop:
            crop = transform.crop
            transformer.crop(crop.x, crop.y, crop.width, crop.height)
        elif transform.type == "crop_center" and transform.crop_center:
            crop = transform.crop_center
            transformer.crop_center(crop.width, crop.height)
        elif transform.type == "pad" and transform.pad:
            pad = transform.pad
            transformer.pad(pad.left, pad.right, pad.top, pad.bottom, pad.color)
        elif transform.type == "flip" and transform.flip:
            if transform.flip.direction == FlipDirection.HORIZONTAL:
                transformer.flip_horizontal()
            else:
                transformer.flip_vertical()
        elif transform.type == "rotate" and transform.rotate:
            transformer.rotate(transform.rotate.angle)
        elif transform.type == "overlay" and transform.overlay:
            overlay = transform.overlay
            top = self.apply(load_image_file(overlay.image), overlay.transforms)
            transformer.overlay(top, overlay.x, overlay.y)
        else:
            raise ValueError(f"Unknown transform type: {transform.type}")

    def _save_debug_image(
        self,
        transformer: ImageTransformer,
        output_dir: Path,
        source_name: str,
        profile_name: str,
        step_num: int,
        step_desc: str,
    ) -> None:
        """Render the operations so far and save them as a PNG."""
        debug_filename = f"{Path(source_name).stem}_{profile_name}_step{step_num}_{step_desc}.png"
        debug_path = output_dir / debug_filename

        result = transformer.to_encoded_image_sync(ImageFormat.PNG)

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            debug_path.write_bytes(result.buffer)
        except OSError as e:
            raise ProcessingError(f"Cannot write debug image: {e}", context={"path": str(debug_path)}) from e

        logger.debug("Saved: %s", debug_path)
