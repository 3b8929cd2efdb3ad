"""Preview module for output of rendered images.

Components:
    export: 8-bit quantization and PNG/PPM export via Pillow

Example:
    >>> from rtweekend.preview import save_image
    >>> save_image(image, "output.png")
"""

from .export import compute_rmse, save_image, to_uint8

__all__ = [
    "to_uint8",
    "save_image",
    "compute_rmse",
]
