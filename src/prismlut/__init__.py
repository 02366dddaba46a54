"""Prism: 3D LUT parsing, combination and application."""

__version__ = "0.1.0"

from prismlut.core.lattice import Lattice, identity_lut  # noqa: E402
from prismlut.core.types import Sample  # noqa: E402

__all__ = ["Lattice", "Sample", "identity_lut", "__version__"]
