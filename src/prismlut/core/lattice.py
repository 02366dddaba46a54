"""LUT lattice data structure, identity generation, and utilities.

A lattice stores N^3 samples flat, shape (N^3, 3), in R-fastest order
(flat = b*N*N + g*N + r).  ``as_array()`` gives the (N, N, N, 3) view
indexed as lut[r, g, b, ch].
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from prismlut.config import DEFAULT_DOMAIN_MAX, DEFAULT_DOMAIN_MIN
from prismlut.core import combine
from prismlut.core.apply import apply_lut
from prismlut.core.interpolation import interpolate_colors, interpolate_point
from prismlut.core.types import Sample, flat_index
from prismlut.errors import EmptyInputError, ValidationError


def _as_domain(values: Sequence[float], name: str) -> Sample:
    try:
        sample = Sample.from_iterable(values)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be three numbers, got {values!r}") from exc
    if not np.all(np.isfinite(sample.as_array())):
        raise ValidationError(f"{name} must be finite, got {values!r}")
    return sample


class Lattice:
    """A 3D LUT: an N x N x N grid of RGB samples over an input domain.

    Combinator methods (``scale``, ``clamp``, ``sum``, ``blend``,
    ``rescale``) mutate the lattice and return it for chaining.
    """

    def __init__(
        self,
        level: int,
        samples,
        domain_min: Sequence[float] = DEFAULT_DOMAIN_MIN,
        domain_max: Sequence[float] = DEFAULT_DOMAIN_MAX,
        title: str = "",
        meta: str = "",
    ):
        if isinstance(level, bool) or not isinstance(level, (int, np.integer)):
            raise ValidationError(f"LUT level must be an integer, got {level!r}")
        if level < 2:
            raise ValidationError(f"LUT level must be >= 2, got {level}")

        array = np.array(samples, dtype=np.float64)
        if array.size == 0:
            raise EmptyInputError("LUT has no samples")
        expected = (level ** 3, 3)
        if array.shape != expected:
            raise ValidationError(
                f"LUT of level {level} needs {expected[0]} samples of 3 channels, "
                f"got array of shape {array.shape}"
            )
        if not np.all(np.isfinite(array)):
            raise ValidationError("LUT samples must be finite")

        dmin = _as_domain(domain_min, "domain_min")
        dmax = _as_domain(domain_max, "domain_max")
        if np.any(dmax.as_array() <= dmin.as_array()):
            raise ValidationError(
                f"domain_max {tuple(dmax)} must exceed domain_min {tuple(dmin)} "
                f"in every channel"
            )

        self._level = int(level)
        self._samples = array
        self._domain_min = dmin
        self._domain_max = dmax
        self.title = title
        self.meta = meta

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def identity(cls, level: int, title: str = "") -> "Lattice":
        """Neutral lattice: node (r, g, b) holds (r, g, b) / (N-1)."""
        if level < 2:
            raise ValidationError(f"LUT level must be >= 2, got {level}")
        coords = np.linspace(0.0, 1.0, level)
        # meshgrid "ij" over (b, g, r) ravels with r fastest.
        bb, gg, rr = np.meshgrid(coords, coords, coords, indexing="ij")
        samples = np.stack([rr.ravel(), gg.ravel(), bb.ravel()], axis=-1)
        return cls(level, samples, title=title)

    @classmethod
    def from_array(
        cls,
        array: np.ndarray,
        domain_min: Sequence[float] = DEFAULT_DOMAIN_MIN,
        domain_max: Sequence[float] = DEFAULT_DOMAIN_MAX,
        title: str = "",
        meta: str = "",
    ) -> "Lattice":
        """Build a lattice from an (N, N, N, 3) array indexed [r, g, b, ch]."""
        array = np.asarray(array)
        N = array.shape[0]
        if array.shape != (N, N, N, 3):
            raise ValidationError(f"Expected (N, N, N, 3) array, got {array.shape}")
        # Transpose to (b, g, r, ch) so the flattened order is R-fastest.
        flat = np.transpose(array, (2, 1, 0, 3)).reshape(-1, 3)
        return cls(N, flat, domain_min, domain_max, title=title, meta=meta)

    def copy(self) -> "Lattice":
        return Lattice(
            self._level,
            self._samples,
            self._domain_min,
            self._domain_max,
            title=self.title,
            meta=self.meta,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def level(self) -> int:
        return self._level

    @property
    def samples(self) -> np.ndarray:
        """(N^3, 3) float64 sample array, R-fastest."""
        return self._samples

    @property
    def domain_min(self) -> Sample:
        return self._domain_min

    @property
    def domain_max(self) -> Sample:
        return self._domain_max

    @property
    def has_unit_domain(self) -> bool:
        return (
            tuple(self._domain_min) == (0.0, 0.0, 0.0)
            and tuple(self._domain_max) == (1.0, 1.0, 1.0)
        )

    def __len__(self) -> int:
        return self._samples.shape[0]

    def __repr__(self) -> str:
        return (
            f"Lattice(level={self._level}, title={self.title!r}, "
            f"domain_min={tuple(self._domain_min)}, domain_max={tuple(self._domain_max)})"
        )

    def get(self, r: int, g: int, b: int) -> Sample:
        """Sample at lattice node (r, g, b).

        Raises:
            IndexError: If any index is outside [0, N-1].  Callers clamp.
        """
        N = self._level
        for name, idx in (("r", r), ("g", g), ("b", b)):
            if not 0 <= idx < N:
                raise IndexError(f"{name} index {idx} out of range for level {N}")
        return Sample.from_iterable(self._samples[flat_index(r, g, b, N)])

    def as_array(self) -> np.ndarray:
        """(N, N, N, 3) copy indexed as [r, g, b, ch]."""
        N = self._level
        return np.transpose(self._samples.reshape(N, N, N, 3), (2, 1, 0, 3)).copy()

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def interpolate(self, r: float, g: float, b: float) -> Sample:
        """Trilinear evaluation at a domain-space color."""
        return interpolate_point(
            self._samples, self._level, (r, g, b), self._domain_min, self._domain_max
        )

    def interpolate_colors(self, colors: np.ndarray) -> np.ndarray:
        """Trilinear evaluation at an (M, 3) array of domain-space colors."""
        return interpolate_colors(
            self._samples, self._level, colors, self._domain_min, self._domain_max
        )

    def apply(self, image: np.ndarray, intensity: float = 1.0) -> np.ndarray:
        """Apply this LUT to an (H, W, 3|4) image in [0, 1]."""
        return apply_lut(self, image, intensity=intensity)

    def apply_scaled(self, image: np.ndarray, intensity: float) -> np.ndarray:
        """Apply this LUT blended toward the original image by ``intensity``."""
        return self.apply(image, intensity=intensity)

    # ------------------------------------------------------------------
    # Combinators (in place)
    # ------------------------------------------------------------------

    def scale(self, factor: float) -> "Lattice":
        return combine.scale_lut(self, factor)

    def clamp(self) -> "Lattice":
        return combine.clamp_lut(self)

    def sum(self, other: "Lattice") -> "Lattice":
        return combine.sum_luts(self, other)

    def blend(self, other: "Lattice", w1: float, w2: float) -> "Lattice":
        return combine.blend_luts(self, other, w1, w2)

    def rescale(self) -> "Lattice":
        return combine.rescale_lut(self)

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------

    def resample(self, level: int) -> "Lattice":
        """New lattice of a different level; see :func:`resample_lattice`."""
        from prismlut.hald.resample import resample_lattice
        return resample_lattice(self, level)

    def stats(self) -> dict:
        """Compute basic statistics of the samples.

        Returns:
            Dict with min, max, mean per channel and overall.
        """
        return {
            "min_per_channel": self._samples.min(axis=0).tolist(),
            "max_per_channel": self._samples.max(axis=0).tolist(),
            "mean_per_channel": self._samples.mean(axis=0).tolist(),
            "global_min": float(self._samples.min()),
            "global_max": float(self._samples.max()),
        }


def identity_lut(level: int, title: str = "") -> Lattice:
    """Generate an identity lattice of the given level."""
    return Lattice.identity(level, title=title)

