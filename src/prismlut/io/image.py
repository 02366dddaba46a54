"""Raster image reading and writing for LUT application.

Pixels travel through the package as float32 in [0, 1], shaped (H, W, 3),
or (H, W, 4) when the caller asks to keep alpha.  Files on disk are 8- or
16-bit integer images handled by imageio's v3 API.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import imageio.v3 as iio
import numpy as np

from prismlut.config import (
    IMAGE_EXTENSIONS,
    JPEG_QUALITY,
    MAX_IMAGE_DIMENSION,
    MAX_IMAGE_PIXELS,
)
from prismlut.errors import ImageDimensionError, ImageFormatError

logger = logging.getLogger(__name__)

_JPEG_EXTENSIONS = frozenset({".jpg", ".jpeg"})
_NO_ALPHA_EXTENSIONS = _JPEG_EXTENSIONS | {".bmp"}
_QUANTIZE = {8: (255, np.uint8), 16: (65535, np.uint16)}


def _check_extension(path: Path, role: str) -> None:
    suffix = path.suffix.lower()
    if suffix not in IMAGE_EXTENSIONS:
        raise ImageFormatError(
            f"Unsupported image format for {role}: {suffix or '(none)'}; "
            f"expected one of {', '.join(sorted(IMAGE_EXTENSIONS))}"
        )


def validate_input_path(filepath: str | Path) -> Path:
    """Resolve an image path that is about to be read.

    Raises:
        FileNotFoundError: If nothing exists at the path.
        ImageFormatError: If the path is not a regular file or has an
            extension outside ``IMAGE_EXTENSIONS``.
    """
    path = Path(filepath).resolve()
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    if not path.is_file():
        raise ImageFormatError(f"Not a regular file: {path}")
    _check_extension(path, "input")
    return path


def validate_output_path(filepath: str | Path) -> Path:
    """Resolve an image path that is about to be written.

    Raises:
        FileNotFoundError: If the target directory is missing.
        PermissionError: If the target directory is read-only.
        ImageFormatError: If the extension is not a writable image type.
    """
    path = Path(filepath).resolve()
    folder = path.parent
    if not folder.is_dir():
        raise FileNotFoundError(f"Output directory not found: {folder}")
    if not os.access(folder, os.W_OK):
        raise PermissionError(f"Output directory is not writable: {folder}")
    _check_extension(path, "output")
    return path


def _validate_dimensions(width: int, height: int) -> None:
    """Reject empty or oversized images before converting any pixels."""
    if min(width, height) <= 0:
        raise ImageDimensionError(f"Image has no pixels: {width}x{height}")
    longest = max(width, height)
    if longest > MAX_IMAGE_DIMENSION:
        raise ImageDimensionError(
            f"Image side {longest} exceeds the {MAX_IMAGE_DIMENSION} pixel limit"
        )
    if width * height > MAX_IMAGE_PIXELS:
        raise ImageDimensionError(
            f"{width}x{height} image holds {width * height:,} pixels, "
            f"over the {MAX_IMAGE_PIXELS:,} limit"
        )


def _normalize(raw: np.ndarray) -> np.ndarray:
    """Scale stored pixel values to float32 in [0, 1]."""
    if np.issubdtype(raw.dtype, np.floating) or raw.dtype == np.bool_:
        return raw.astype(np.float32)
    if np.issubdtype(raw.dtype, np.unsignedinteger):
        return raw.astype(np.float32) / np.float32(np.iinfo(raw.dtype).max)
    raise ImageFormatError(f"Unsupported pixel type: {raw.dtype}")


def _to_rgb(data: np.ndarray, keep_alpha: bool) -> np.ndarray:
    """Expand grey to RGB and keep or drop the alpha plane."""
    if data.ndim == 2:
        data = data[..., np.newaxis]
    if data.ndim != 3 or data.shape[2] not in (1, 2, 3, 4):
        raise ImageFormatError(f"Unsupported image shape: {data.shape}")

    channels = data.shape[2]
    has_alpha = channels in (2, 4)
    colour = data[..., : channels - 1] if has_alpha else data
    if colour.shape[2] == 1:
        colour = np.repeat(colour, 3, axis=2)

    if keep_alpha and has_alpha:
        return np.concatenate([colour, data[..., -1:]], axis=2)
    return np.ascontiguousarray(colour)


def load_image(filepath: str | Path, keep_alpha: bool = False) -> tuple[np.ndarray, dict]:
    """Read an image into a float32 array.

    Args:
        filepath: Image file to read.
        keep_alpha: Return (H, W, 4) when the file carries alpha.

    Returns:
        (pixels, info) where ``info`` holds width, height, channels, the
        stored dtype and the lower-cased extension.
    """
    path = validate_input_path(filepath)
    logger.debug("Reading image %s", path)

    try:
        raw = iio.imread(path)
    except (ValueError, RuntimeError) as e:
        raise ImageFormatError(f"Cannot decode image {path}: {e}") from e

    if raw.ndim < 2:
        raise ImageFormatError(f"Unsupported image shape: {raw.shape}")
    height, width = raw.shape[:2]
    _validate_dimensions(width, height)

    pixels = _to_rgb(_normalize(raw), keep_alpha)
    info = {
        "width": width,
        "height": height,
        "channels": pixels.shape[2],
        "format": str(raw.dtype),
        "extension": path.suffix.lower(),
    }
    return pixels, info


def save_image(
    array: np.ndarray,
    filepath: str | Path,
    bit_depth: int = 8,
) -> Path:
    """Write a float image in [0, 1] to disk.

    Values are clipped and truncated to integers.  Alpha is dropped for
    formats that cannot store it.

    Args:
        array: (H, W, 3) or (H, W, 4) pixels.
        filepath: Destination file.
        bit_depth: 8 or 16.

    Returns:
        The resolved destination.
    """
    path = validate_output_path(filepath)
    if bit_depth not in _QUANTIZE:
        raise ValueError(f"Unsupported bit depth: {bit_depth}")

    peak, dtype = _QUANTIZE[bit_depth]
    out = (np.clip(array, 0.0, 1.0) * peak).astype(dtype)

    suffix = path.suffix.lower()
    if out.ndim == 3 and out.shape[2] == 4 and suffix in _NO_ALPHA_EXTENSIONS:
        out = out[..., :3]

    if suffix in _JPEG_EXTENSIONS:
        iio.imwrite(path, out, quality=JPEG_QUALITY)
    else:
        iio.imwrite(path, out)

    logger.info("Wrote %s (%d-bit, %dx%d)", path, bit_depth, out.shape[1], out.shape[0])
    return path
