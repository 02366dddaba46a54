"""Format dispatch: load and save lattices by file extension."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from prismlut.config import CUBE_EXTENSIONS, HALD_EXTENSIONS
from prismlut.core.lattice import Lattice
from prismlut.core.types import LUTFormat
from prismlut.errors import LUTFormatError
from prismlut.hald.codec import read_hald, write_hald
from prismlut.io.cube import read_cube, write_cube


def detect_format(filepath: str | Path) -> LUTFormat:
    """Map a LUT path to its on-disk representation.

    Raises:
        LUTFormatError: For unsupported extensions.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix in CUBE_EXTENSIONS:
        return LUTFormat.CUBE
    if suffix in HALD_EXTENSIONS:
        return LUTFormat.HALD
    raise LUTFormatError(f"Unsupported LUT type: {suffix or '(none)'}")


def load_lut(filepath: str | Path) -> Lattice:
    """Load a .cube or Hald .png LUT."""
    fmt = detect_format(filepath)
    if fmt is LUTFormat.CUBE:
        return read_cube(filepath)
    return read_hald(filepath)


def save_lut(
    filepath: str | Path,
    lut: Lattice,
    hald_level: Optional[int] = None,
) -> Path:
    """Save a lattice as .cube or Hald .png according to the extension.

    Args:
        filepath: Output path.
        lut: Lattice to save.
        hald_level: Hald level for .png output; see ``encode_hald``.
    """
    fmt = detect_format(filepath)
    if fmt is LUTFormat.CUBE:
        return write_cube(filepath, lut)
    return write_hald(filepath, lut, level=hald_level)
