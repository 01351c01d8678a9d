"""Pipeline package for pixmill.

This package turns configuration transforms into builder calls on an
ImageTransformer.

Usage:
    from pixmill.pipeline import TransformExecutor, load_image_file

    executor = TransformExecutor()
    transformer = executor.apply(load_image_file(path), profile.transforms)
"""

from pixmill.pipeline.transforms import TransformExecutor, load_image_file

__all__ = [
    "TransformExecutor",
    "load_image_file",
]
