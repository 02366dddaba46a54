"""Apply a LUT lattice to raster images.

The image is split into bands of scanlines and each band is handed to a
worker thread.  Workers read the shared lattice and source image and
write only their own output rows, so no locking is needed.  numpy
releases the GIL inside the gather/lerp kernels, which is where the
time goes.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Optional

import numpy as np

from prismlut.config import DEFAULT_ROWS_PER_TASK, MAX_APPLY_WORKERS
from prismlut.core.interpolation import interpolate_colors
from prismlut.errors import EmptyInputError, ImageFormatError, ValidationError

if TYPE_CHECKING:
    from prismlut.core.lattice import Lattice

logger = logging.getLogger(__name__)


def _check_image(image: Optional[np.ndarray]) -> np.ndarray:
    if image is None:
        raise EmptyInputError("No image supplied")
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ImageFormatError(
            f"Expected (H, W, 3) or (H, W, 4) image, got {image.shape}"
        )
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise EmptyInputError(f"Image has no pixels: {image.shape}")
    return image


def _process_rows(
    lut: Lattice,
    src: np.ndarray,
    out: np.ndarray,
    y0: int,
    y1: int,
    intensity: float,
) -> None:
    """Transform scanlines [y0, y1) of ``src`` into the same rows of ``out``."""
    dmin = lut.domain_min.as_array()
    span = lut.domain_max.as_array() - dmin
    width = src.shape[1]

    rgb = src[y0:y1, :, :3].reshape(-1, 3).astype(np.float64)

    # Into the LUT domain, through the lattice, blend with identity, and back out.
    in_domain = dmin + rgb * span
    graded = interpolate_colors(
        lut.samples, lut.level, in_domain, lut.domain_min, lut.domain_max
    )
    blended = in_domain * (1.0 - intensity) + graded * intensity
    mapped = np.clip((blended - dmin) / span, 0.0, 1.0)

    out[y0:y1, :, :3] = mapped.reshape(y1 - y0, width, 3)
    if src.shape[2] == 4:
        out[y0:y1, :, 3] = src[y0:y1, :, 3]


def _row_bands(height: int, rows_per_task: int) -> list[tuple[int, int]]:
    step = max(1, rows_per_task)
    return [(y, min(y + step, height)) for y in range(0, height, step)]


def apply_lut(
    lut: Lattice,
    image: np.ndarray,
    intensity: float = 1.0,
    max_workers: Optional[int] = None,
    rows_per_task: int = DEFAULT_ROWS_PER_TASK,
) -> np.ndarray:
    """Apply a LUT to an image, blended with the identity by ``intensity``.

    Each output pixel is ``original * (1 - t) + lut(original) * t``,
    computed in the LUT domain and mapped back to [0, 1].  Alpha passes
    through unchanged.

    Args:
        lut: Lattice to apply.  It is only read.
        image: (H, W, 3) or (H, W, 4) array with values in [0, 1].
        intensity: Blend factor, clamped to [0, 1].
        max_workers: Thread pool size (default: CPU count, capped).
        rows_per_task: Scanlines per worker task.

    Returns:
        float32 array with the same shape as ``image``, values in [0, 1].

    Raises:
        ValidationError: If ``intensity`` is NaN or infinite.
    """
    src = _check_image(image)
    if not np.isfinite(intensity):
        raise ValidationError(f"Intensity must be finite, got {intensity}")
    intensity = float(np.clip(intensity, 0.0, 1.0))
    height = src.shape[0]

    out = np.empty(src.shape, dtype=np.float32)
    bands = _row_bands(height, rows_per_task)

    if max_workers is None:
        max_workers = min(os.cpu_count() or 1, MAX_APPLY_WORKERS)
    workers = max(1, min(max_workers, len(bands)))

    logger.debug(
        "Applying %d^3 LUT to %dx%d image (intensity=%.3f, %d bands, %d workers)",
        lut.level, src.shape[1], height, intensity, len(bands), workers,
    )

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [
            pool.submit(_process_rows, lut, src, out, y0, y1, intensity)
            for y0, y1 in bands
        ]
        for future in futures:
            # Re-raise any worker exception
            future.result()

    return out


def apply_lut_scaled(lut: Lattice, image: np.ndarray, intensity: float) -> np.ndarray:
    """Apply a LUT at partial strength; see :func:`apply_lut`."""
    return apply_lut(lut, image, intensity=intensity)
