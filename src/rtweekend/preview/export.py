"""Image export utilities for rendered images.

Rendered images are already gamma corrected, so export only quantizes and
encodes them.

Supported formats (chosen by file extension, encoded by Pillow):
    - PNG
    - PPM (binary P6)

Example:
    >>> from rtweekend.preview.export import save_image
    >>> image = render(scene, camera, params)
    >>> save_image(image, "output.png")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

SUPPORTED_SUFFIXES = {".png": "PNG", ".ppm": "PPM"}


def to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Quantize a gamma-corrected image to 8 bits per channel.

    Each channel maps to int(256 * clamp(c, 0, 0.999)), so 1.0 becomes 255
    and every 8-bit bucket is equally wide.

    Args:
        image: Array of shape (H, W, 3) with values nominally in [0, 1].

    Returns:
        Array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If image does not have shape (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")

    clean = np.nan_to_num(image.astype(np.float64), nan=0.0, posinf=0.999, neginf=0.0)
    return (256.0 * np.clip(clean, 0.0, 0.999)).astype(np.uint8)


def save_image(image: npt.NDArray[np.floating], filepath: str | Path) -> Path:
    """Save a gamma-corrected float image as PNG or PPM.

    Args:
        image: Array of shape (H, W, 3), row 0 at the top.
        filepath: Output path ending in .png or .ppm.

    Returns:
        The path written.

    Raises:
        ValueError: If the extension is not supported or the shape is wrong.
    """
    path = Path(filepath)
    fmt = SUPPORTED_SUFFIXES.get(path.suffix.lower())
    if fmt is None:
        raise ValueError(
            f"Unsupported image format {path.suffix!r}; expected one of {sorted(SUPPORTED_SUFFIXES)}"
        )

    pil_image = PILImage.fromarray(to_uint8(image))
    pil_image.save(path, format=fmt)
    return path


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
