"""Hald CLUT geometry and the identity image.

A Hald CLUT of level L is a square image, L^3 pixels per side, that
stores a lattice of level N = L^2 one node per pixel.  Level 8 is a
512x512 image holding 64^3 nodes; level 12 is 1728x1728 holding 144^3.

Nodes are laid out in the lattice's own R-fastest order, row by row:
pixel (x, y) holds flat node y * L^3 + x.  Reading the pixels in raster
order therefore gives the samples in lattice order.
"""

from __future__ import annotations

import numpy as np

from prismlut.config import DEFAULT_HALD_LEVEL, MAX_HALD_LEVEL
from prismlut.core.lattice import Lattice
from prismlut.errors import ImageDimensionError, ValidationError


def hald_image_size(level: int) -> int:
    """Pixels per side of a level-``level`` Hald image."""
    return level ** 3


def hald_lut_size(level: int) -> int:
    """Lattice level stored by a level-``level`` Hald image."""
    return level ** 2


def check_hald_level(level: int) -> int:
    if not 2 <= level <= MAX_HALD_LEVEL:
        raise ValidationError(f"Hald level must be 2-{MAX_HALD_LEVEL}, got {level}")
    return level


def hald_level_for_size(width: int, height: int) -> int:
    """Hald level of a ``width`` x ``height`` image.

    This is the one place that decides whether an image can be a Hald
    CLUT: it must be square with a side of L^3 for a supported L.

    Raises:
        ImageDimensionError: If no Hald level produces these dimensions.
    """
    if width != height:
        raise ImageDimensionError(f"Hald image must be square, got {width}x{height}")
    level = round(width ** (1.0 / 3.0))
    if hald_image_size(level) != width or not 2 <= level <= MAX_HALD_LEVEL:
        raise ImageDimensionError(
            f"{width}x{height} is not a Hald size; the side must be L^3 "
            f"with L in 2-{MAX_HALD_LEVEL}"
        )
    return level


def generate_hald_identity(level: int = DEFAULT_HALD_LEVEL) -> np.ndarray:
    """Identity Hald CLUT as a float32 (L^3, L^3, 3) image in [0, 1]."""
    check_hald_level(level)
    side = hald_image_size(level)
    neutral = Lattice.identity(hald_lut_size(level))
    return neutral.samples.reshape(side, side, 3).astype(np.float32)
