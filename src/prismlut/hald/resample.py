"""Move a lattice to another level.

Hald images fix the level to L^2 (16, 64, 144, ...), while grading tools
usually expect 17, 33 or 65 points per axis, so conversions go through here.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.ndimage import map_coordinates

from prismlut.core.lattice import Lattice
from prismlut.errors import ValidationError

logger = logging.getLogger(__name__)


def resample_lattice(lut: Lattice, target_level: int, order: int = 1) -> Lattice:
    """Resample ``lut`` onto a ``target_level`` grid spanning the same domain.

    Args:
        lut: Source lattice.  It is not modified.
        target_level: Points per axis of the result.
        order: Spline order for ``map_coordinates`` (1 = trilinear, 3 = cubic).

    Returns:
        New lattice carrying the source domain, title and meta.
    """
    if target_level < 2:
        raise ValidationError(f"Target level must be >= 2, got {target_level}")
    if target_level == lut.level:
        return lut.copy()

    grid = lut.as_array()
    # Node k of the target grid sits at k * (N_src - 1) / (N_tgt - 1) in source units.
    axis = np.linspace(0.0, lut.level - 1, target_level)
    points = np.stack(np.meshgrid(axis, axis, axis, indexing="ij")).reshape(3, -1)

    channels = [
        map_coordinates(grid[..., ch], points, order=order, mode="nearest")
        for ch in range(3)
    ]
    resampled = np.stack(channels, axis=-1).reshape(
        target_level, target_level, target_level, 3
    )
    logger.debug("Resampled %d^3 LUT to %d^3 (order=%d)", lut.level, target_level, order)

    return Lattice.from_array(
        resampled,
        domain_min=lut.domain_min,
        domain_max=lut.domain_max,
        title=lut.title,
        meta=lut.meta,
    )
