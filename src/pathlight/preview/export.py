"""Image export utilities for rendered pictures.

Supported formats:
    - PPM (ASCII "P3", written directly)
    - PNG, JPEG, BMP, TIFF (8-bit via Pillow)

All writers expect a picture that has already been tone mapped and gamma
corrected; they only clamp to [0, 1], scale by 255 and truncate.

Example:
    >>> from pathlight.preview.export import write_picture
    >>> write_picture(picture, "out.ppm")
    >>> write_picture(picture, "out.png")
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathlight.preview.picture import Picture

logger = logging.getLogger(__name__)

# Output suffixes handled by Pillow
RASTER_SUFFIXES = {".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff"}

PathLike = str | os.PathLike


def format_ppm(picture: Picture) -> str:
    """Encode a picture as ASCII PPM text.

    The header is "P3", "<width> <height>" and "255", followed by one
    "R G B" line per pixel, row-major from the top-left pixel.
    """
    rgb = picture.as_rgb().reshape(-1, 3)
    lines = [f"P3\n{picture.width} {picture.height}\n255\n"]
    lines.extend(f"{r} {g} {b}\n" for r, g, b in rgb.tolist())
    return "".join(lines)


def write_ppm(picture: Picture, filepath: PathLike) -> None:
    """Write a picture as ASCII PPM.

    Raises:
        OSError: If the file cannot be written.
    """
    with open(filepath, "w", encoding="ascii") as f:
        f.write(format_ppm(picture))


def save_png(picture: Picture, filepath: PathLike) -> None:
    """Write a picture through Pillow; the format follows the file suffix.

    Raises:
        OSError: If the file cannot be written.
    """
    pil_image = PILImage.fromarray(picture.as_rgb(), mode="RGB")
    pil_image.save(filepath)


def check_output_path(filepath: PathLike) -> Path:
    """Make sure a picture can be written to ``filepath`` before rendering it.

    The file is created if it does not exist yet; an existing file is left
    untouched until the picture is written.

    Returns:
        The path as a Path.

    Raises:
        ValueError: If the suffix is not supported.
        OSError: If the file cannot be opened for writing.
    """
    path = Path(filepath)
    suffix = path.suffix.lower()
    if suffix != ".ppm" and suffix not in RASTER_SUFFIXES:
        raise ValueError(f"Unsupported output format: {path.suffix!r}")
    with open(path, "ab"):
        pass
    return path


def write_picture(picture: Picture, filepath: PathLike) -> Path:
    """Write a picture, choosing the encoder from the file suffix.

    Returns:
        The path written to.

    Raises:
        ValueError: If the suffix is not supported.
        OSError: If the file cannot be written.
    """
    path = Path(filepath)
    suffix = path.suffix.lower()
    if suffix == ".ppm":
        write_ppm(picture, path)
    elif suffix in RASTER_SUFFIXES:
        save_png(picture, path)
    else:
        raise ValueError(f"Unsupported output format: {path.suffix!r}")
    logger.info(f"Wrote {picture.width}x{picture.height} picture to {path}")
    return path


def compute_rmse(
    image_a: Picture | npt.NDArray[np.floating],
    image_b: Picture | npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First picture or array.
        image_b: Second picture or array (same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    a = image_a.pixels if isinstance(image_a, Picture) else np.asarray(image_a)
    b = image_b.pixels if isinstance(image_b, Picture) else np.asarray(image_b)
    if a.shape != b.shape:
        raise ValueError(f"Image shapes must match: {a.shape} vs {b.shape}")

    diff = a.astype(np.float64) - b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
