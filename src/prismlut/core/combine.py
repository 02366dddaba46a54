"""Operators that combine and rescale LUT lattices.

Every operator mutates the first lattice in place and returns it, so
calls can be chained::

    lut.blend(other, 0.7, 0.3).rescale()

Callers that need the original must ``copy()`` first.  Validation happens
before any sample is touched, so a failed call leaves both inputs intact.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from prismlut.errors import EmptyInputError, LUTMismatchError, ValidationError

if TYPE_CHECKING:
    from prismlut.core.lattice import Lattice

logger = logging.getLogger(__name__)


def _require_compatible(lut: Lattice, other: Lattice) -> None:
    if len(lut) == 0 or len(other) == 0:
        raise EmptyInputError("Cannot combine an empty LUT")
    if lut.level != other.level or len(lut) != len(other):
        raise LUTMismatchError(
            f"Cannot combine LUTs of different sizes: "
            f"{lut.level}^3 ({len(lut)} samples) vs "
            f"{other.level}^3 ({len(other)} samples)"
        )


def scale_lut(lut: Lattice, factor: float) -> Lattice:
    """Multiply every sample by ``factor``.

    Raises:
        ValidationError: If ``factor`` is outside (0, 1].
    """
    if not 0.0 < factor <= 1.0:
        raise ValidationError(f"Scale factor must be in (0, 1], got {factor}")
    lut.samples[:] *= factor
    return lut


def clamp_lut(lut: Lattice) -> Lattice:
    """Remap every channel from the LUT domain to [0, 1].

    This is a domain normalization, not a saturating clip: values outside
    the domain land outside [0, 1].
    """
    dmin = lut.domain_min.as_array()
    dmax = lut.domain_max.as_array()
    lut.samples[:] = (lut.samples - dmin) / (dmax - dmin)
    return lut


def sum_luts(lut: Lattice, other: Lattice) -> Lattice:
    """Add ``other`` to ``lut`` sample by sample.

    Raises:
        EmptyInputError: If either LUT has no samples.
        LUTMismatchError: If the levels differ.
    """
    _require_compatible(lut, other)
    lut.samples[:] += other.samples
    return lut


def blend_luts(lut: Lattice, other: Lattice, w1: float, w2: float) -> Lattice:
    """Weighted per-sample average of two LUTs.

    The weights are normalized to sum to 1, so blending a LUT with itself
    leaves it unchanged whatever the weights.

    Raises:
        EmptyInputError: If either LUT has no samples.
        LUTMismatchError: If the levels differ.
        ValidationError: If a weight is negative or both are zero.
    """
    _require_compatible(lut, other)
    if w1 < 0 or w2 < 0 or w1 + w2 <= 0:
        raise ValidationError(
            f"Blend weights must be non-negative with a positive sum, got {w1}, {w2}"
        )

    total = w1 + w2
    a = w1 / total
    b = w2 / total
    logger.debug("Blending %d^3 LUTs with weights %.4f / %.4f", lut.level, a, b)
    lut.samples[:] = lut.samples * a + other.samples * b
    return lut


def rescale_lut(lut: Lattice) -> Lattice:
    """Stretch the global sample range onto the LUT domain.

    The smallest channel value across all samples maps to ``domain_min``
    and the largest to ``domain_max``.  A flat LUT (min == max) collapses
    to the domain midpoint.
    """
    if len(lut) == 0:
        raise EmptyInputError("Cannot rescale an empty LUT")

    dmin = lut.domain_min.as_array()
    dmax = lut.domain_max.as_array()
    lo = float(lut.samples.min())
    hi = float(lut.samples.max())

    if hi == lo:
        logger.debug("Flat LUT (all channels = %g); collapsing to domain midpoint", lo)
        lut.samples[:] = dmin + (dmax - dmin) / 2.0
        return lut

    t = (lut.samples - lo) / (hi - lo)
    # Endpoint-exact form: t == 0 gives dmin, t == 1 gives dmax.
    lut.samples[:] = dmin * (1.0 - t) + dmax * t
    return lut
