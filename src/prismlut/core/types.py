"""Core data types, enums, and indexing helpers for Prism.

CRITICAL CONVENTION:
    Lattice samples are stored flat, shape (N^3, 3).
    Flat index: flat = b * N * N + g * N + r  (R varies fastest, matching .cube files).
    The (N, N, N, 3) array view is indexed as lut[r, g, b, channel].
    This convention MUST be used consistently in ALL modules.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

import numpy as np


# ---------------------------------------------------------------------------
# Indexing helpers -- single source of truth for the flat <-> 3D mapping
# ---------------------------------------------------------------------------

def flat_index(r: int, g: int, b: int, N: int) -> int:
    """Convert 3D grid indices to flat index. R varies fastest."""
    return b * N * N + g * N + r


def flat_index_array(r: np.ndarray, g: np.ndarray, b: np.ndarray, N: int) -> np.ndarray:
    """Vectorized flat index computation for arrays of indices."""
    return b * N * N + g * N + r


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class LUTFormat(str, Enum):
    """On-disk LUT representation."""
    CUBE = "cube"
    HALD = "hald"


# ---------------------------------------------------------------------------
# Sample
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Sample:
    """A single RGB triple.

    Channels are unconstrained; combined LUTs may leave [0, 1] until
    they are clamped or rescaled.
    """
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0

    @classmethod
    def from_iterable(cls, values) -> "Sample":
        r, g, b = (float(v) for v in values)
        return cls(r, g, b)

    def __iter__(self) -> Iterator[float]:
        yield self.r
        yield self.g
        yield self.b

    def __add__(self, other: "Sample") -> "Sample":
        return Sample(self.r + other.r, self.g + other.g, self.b + other.b)

    def __sub__(self, other: "Sample") -> "Sample":
        return Sample(self.r - other.r, self.g - other.g, self.b - other.b)

    def __mul__(self, factor: float) -> "Sample":
        return Sample(self.r * factor, self.g * factor, self.b * factor)

    __rmul__ = __mul__

    def lerp(self, other: "Sample", t: float) -> "Sample":
        """Linear interpolation toward ``other`` by fraction ``t``."""
        return Sample(
            self.r + t * (other.r - self.r),
            self.g + t * (other.g - self.g),
            self.b + t * (other.b - self.b),
        )

    def as_array(self) -> np.ndarray:
        return np.array([self.r, self.g, self.b], dtype=np.float64)

    def __str__(self) -> str:
        return f"{self.r:f} {self.g:f} {self.b:f}"
