"""Trilinear interpolation for 3D LUT lattices.

Both scalar (single point) and vectorized (batch) variants are provided.
All functions use the flat indexing convention: flat = b*N*N + g*N + r
(R varies fastest, matching .cube files).

Interpolation always runs along R first, then G, then B, so the scalar
and batch paths produce identical results.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from prismlut.core.types import Sample, flat_index_array


def lattice_coordinates(
    colors: np.ndarray,
    N: int,
    domain_min: Sequence[float] = (0.0, 0.0, 0.0),
    domain_max: Sequence[float] = (1.0, 1.0, 1.0),
) -> np.ndarray:
    """Normalize domain-space colors to continuous lattice coordinates.

    Args:
        colors: (M, 3) array of colors in the LUT domain.
        N: Lattice level.
        domain_min: Per-channel lower domain bound.
        domain_max: Per-channel upper domain bound.

    Returns:
        (M, 3) float64 array clamped to [0, N-1].  Colors outside the
        domain are clamped, never extrapolated.
    """
    dmin = np.asarray(tuple(domain_min), dtype=np.float64)
    dmax = np.asarray(tuple(domain_max), dtype=np.float64)
    scaled = (np.asarray(colors, dtype=np.float64) - dmin) / (dmax - dmin) * (N - 1)
    return np.clip(scaled, 0.0, N - 1)


def _lerp(a: np.ndarray, b: np.ndarray, t: np.ndarray) -> np.ndarray:
    return a + t * (b - a)


def trilinear_interpolate(
    samples: np.ndarray,
    N: int,
    coords: np.ndarray,
) -> np.ndarray:
    """Evaluate a lattice at M continuous lattice coordinates.

    Args:
        samples: (N^3, 3) flat sample array.
        N: Lattice level.
        coords: (M, 3) lattice coordinates in [0, N-1].

    Returns:
        (M, 3) float64 array of interpolated samples.
    """
    floor = np.clip(np.floor(coords).astype(np.int64), 0, N - 1)
    upper = np.minimum(floor + 1, N - 1)
    frac = coords - floor  # (M, 3)

    r0, g0, b0 = floor[:, 0], floor[:, 1], floor[:, 2]
    r1, g1, b1 = upper[:, 0], upper[:, 1], upper[:, 2]
    fr, fg, fb = frac[:, 0:1], frac[:, 1:2], frac[:, 2:3]

    def corner(r, g, b):
        return samples[flat_index_array(r, g, b, N)]

    # Along R
    c00 = _lerp(corner(r0, g0, b0), corner(r1, g0, b0), fr)
    c01 = _lerp(corner(r0, g0, b1), corner(r1, g0, b1), fr)
    c10 = _lerp(corner(r0, g1, b0), corner(r1, g1, b0), fr)
    c11 = _lerp(corner(r0, g1, b1), corner(r1, g1, b1), fr)

    # Along G
    c0 = _lerp(c00, c10, fg)
    c1 = _lerp(c01, c11, fg)

    # Along B
    return _lerp(c0, c1, fb)


def interpolate_colors(
    samples: np.ndarray,
    N: int,
    colors: np.ndarray,
    domain_min: Sequence[float] = (0.0, 0.0, 0.0),
    domain_max: Sequence[float] = (1.0, 1.0, 1.0),
) -> np.ndarray:
    """Evaluate a lattice at an (M, 3) array of domain-space colors."""
    coords = lattice_coordinates(colors, N, domain_min, domain_max)
    return trilinear_interpolate(samples, N, coords)


def interpolate_point(
    samples: np.ndarray,
    N: int,
    rgb: Sequence[float],
    domain_min: Sequence[float] = (0.0, 0.0, 0.0),
    domain_max: Sequence[float] = (1.0, 1.0, 1.0),
) -> Sample:
    """Evaluate a lattice at a single domain-space color."""
    point = np.asarray(rgb, dtype=np.float64).reshape(1, 3)
    result = interpolate_colors(samples, N, point, domain_min, domain_max)
    return Sample.from_iterable(result[0])
