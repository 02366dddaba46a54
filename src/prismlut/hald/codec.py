"""Hald CLUT image <-> lattice conversion.

Each pixel in a Hald image maps directly to a lattice node, so decoding
is a direct readout.  Images are 8-bit on disk; values are reconstructed
as stored / 255 with no gamma handling.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Optional

import numpy as np

from prismlut.config import HALD_BIT_DEPTH, MAX_HALD_LEVEL
from prismlut.core.apply import apply_lut
from prismlut.core.lattice import Lattice
from prismlut.errors import EmptyInputError, ImageDimensionError, ImageFormatError
from prismlut.hald.identity import (
    check_hald_level,
    generate_hald_identity,
    hald_image_size,
    hald_level_for_size,
    hald_lut_size,
)
from prismlut.io.image import load_image, save_image

logger = logging.getLogger(__name__)


def decode_hald(image: np.ndarray, title: str = "") -> Lattice:
    """Build a lattice from a Hald CLUT image.

    Args:
        image: (L^3, L^3, C) float array in [0, 1]; C is 1, 3 or 4.
            Alpha is ignored.
        title: Title for the resulting lattice.

    Returns:
        Lattice of level L^2 over the unit domain.
    """
    if image is None:
        raise EmptyInputError("No Hald image supplied")
    image = np.asarray(image)

    if image.ndim == 2:
        image = np.repeat(image[:, :, np.newaxis], 3, axis=2)
    elif image.ndim != 3 or image.shape[2] not in (1, 3, 4):
        raise ImageFormatError(f"Unsupported Hald image shape: {image.shape}")
    elif image.shape[2] == 1:
        image = np.repeat(image, 3, axis=2)

    level = hald_level_for_size(image.shape[1], image.shape[0])
    samples = image[:, :, :3].reshape(-1, 3)

    logger.debug(
        "Decoded %d^3 LUT from Hald level %d (%dx%d image)",
        hald_lut_size(level), level, image.shape[1], image.shape[0],
    )
    return Lattice(hald_lut_size(level), samples, title=title)


def native_hald_level(lut_level: int) -> Optional[int]:
    """Hald level whose lattice level is exactly ``lut_level``, if any."""
    level = math.isqrt(lut_level)
    if level * level == lut_level and 2 <= level <= MAX_HALD_LEVEL:
        return level
    return None


def encode_hald(lut: Lattice, level: Optional[int] = None) -> np.ndarray:
    """Render a lattice as a Hald CLUT image.

    A lattice whose level is L^2 over the unit domain is written node for
    node.  Anything else (another level, or a non-unit domain) is baked by
    applying the lattice to a Hald identity of the requested level.

    Args:
        lut: Lattice to encode.
        level: Hald level.  Defaults to sqrt(lut.level) when that is an
            integer.

    Returns:
        (L^3, L^3, 3) float32 array clipped to [0, 1].

    Raises:
        ImageDimensionError: If no level is given and the lattice level
            is not a perfect square.
    """
    native = native_hald_level(lut.level)
    if level is None:
        if native is None:
            raise ImageDimensionError(
                f"LUT level {lut.level} is not a square Hald size; "
                f"pass an explicit Hald level"
            )
        level = native
    check_hald_level(level)

    if level == native and lut.has_unit_domain:
        side = hald_image_size(level)
        image = lut.samples.reshape(side, side, 3)
    else:
        logger.info(
            "Baking %d^3 LUT into Hald level %d (%d^3)",
            lut.level, level, hald_lut_size(level),
        )
        image = apply_lut(lut, generate_hald_identity(level))

    return np.clip(image, 0.0, 1.0).astype(np.float32)


def read_hald(filepath: str | Path, title: str = "") -> Lattice:
    """Load a Hald CLUT image file as a lattice."""
    image, _ = load_image(filepath)
    lut = decode_hald(image, title=title)
    logger.info("Loaded Hald LUT %s (%d^3)", filepath, lut.level)
    return lut


def write_hald(
    filepath: str | Path,
    lut: Lattice,
    level: Optional[int] = None,
) -> Path:
    """Write a lattice as an 8-bit Hald CLUT image."""
    image = encode_hald(lut, level)
    return save_image(image, filepath, bit_depth=HALD_BIT_DEPTH)
