"""Read and write .cube 3D LUT files.

Layout written::

    TITLE "name"            (optional)
    # free-form comments    (optional, kept verbatim)
    LUT_3D_SIZE N
    DOMAIN_MIN r g b
    DOMAIN_MAX r g b

    r g b                   (N^3 sample rows, R varies fastest)

Keywords may appear in any order on input; sample rows are appended in
file order.  Any other non-blank line is rejected.
"""

from __future__ import annotations

import io
import logging
import math
from pathlib import Path
from typing import Iterable, Optional, TextIO

import numpy as np

from prismlut.config import (
    CUBE_DECIMALS,
    DEFAULT_DOMAIN_MAX,
    DEFAULT_DOMAIN_MIN,
    MAX_CUBE_SIZE,
)
from prismlut.core.lattice import Lattice
from prismlut.errors import (
    LUTFormatError,
    MalformedFieldError,
    UnrecognizedLineError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _parse_floats(tokens: list[str], line_no: int) -> tuple[float, float, float]:
    try:
        values = tuple(float(t) for t in tokens)
    except ValueError as exc:
        raise MalformedFieldError(line_no, f"expected three numbers, got {tokens!r}") from exc
    if not all(math.isfinite(v) for v in values):
        raise MalformedFieldError(line_no, f"Non-finite value in {tokens!r}")
    return values


def _parse_title(line: str, line_no: int) -> str:
    start = line.find('"')
    end = line.rfind('"')
    if start == -1 or end <= start:
        raise MalformedFieldError(line_no, f"TITLE must be quoted: {line!r}")
    return line[start + 1:end]


def _parse_size(fields: list[str], line_no: int) -> int:
    if len(fields) != 2:
        raise MalformedFieldError(line_no, f"LUT_3D_SIZE takes one value, got {fields[1:]!r}")
    try:
        size = int(fields[1])
    except ValueError as exc:
        raise MalformedFieldError(line_no, f"Invalid LUT_3D_SIZE {fields[1]!r}") from exc
    if not 2 <= size <= MAX_CUBE_SIZE:
        raise MalformedFieldError(
            line_no, f"LUT_3D_SIZE {size} out of range [2, {MAX_CUBE_SIZE}]"
        )
    return size


def parse_cube(lines: Iterable[str]) -> Lattice:
    """Parse .cube text into a lattice.

    Args:
        lines: Iterable of text lines (a file object works).

    Returns:
        Parsed lattice.

    Raises:
        UnrecognizedLineError: For lines that are neither keyword nor sample.
        MalformedFieldError: For keywords or samples with bad values.
        LUTFormatError: If LUT_3D_SIZE is missing or the sample count
            does not match it.
    """
    title = ""
    meta_lines: list[str] = []
    size: Optional[int] = None
    domain_min = DEFAULT_DOMAIN_MIN
    domain_max = DEFAULT_DOMAIN_MAX
    rows: list[tuple[float, float, float]] = []

    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue

        if line.startswith("#"):
            meta_lines.append(line)
            continue

        fields = line.split()
        keyword = fields[0]

        if keyword == "TITLE":
            title = _parse_title(line, line_no)
        elif keyword == "LUT_3D_SIZE":
            size = _parse_size(fields, line_no)
        elif keyword in ("DOMAIN_MIN", "DOMAIN_MAX"):
            if len(fields) != 4:
                raise MalformedFieldError(line_no, f"{keyword} takes three values")
            values = _parse_floats(fields[1:], line_no)
            if keyword == "DOMAIN_MIN":
                domain_min = values
            else:
                domain_max = values
        elif len(fields) == 3:
            rows.append(_parse_floats(fields, line_no))
        else:
            raise UnrecognizedLineError(line_no, line)

    if size is None:
        raise LUTFormatError("No LUT_3D_SIZE found in .cube data")

    expected = size ** 3
    if len(rows) != expected:
        raise LUTFormatError(
            f"Expected {expected} samples for LUT_3D_SIZE {size}, got {len(rows)}"
        )

    try:
        return Lattice(
            size,
            np.array(rows, dtype=np.float64),
            domain_min=domain_min,
            domain_max=domain_max,
            title=title,
            meta="\n".join(meta_lines),
        )
    except ValidationError as exc:
        raise LUTFormatError(str(exc)) from exc


def read_cube(filepath: str | Path) -> Lattice:
    """Read a .cube file.

    Raises:
        FileNotFoundError: If the file does not exist.
        LUTFormatError: If the contents are malformed or not UTF-8.
    """
    path = Path(filepath)
    with path.open("r", encoding="utf-8") as f:
        try:
            lut = parse_cube(f)
        except UnicodeDecodeError as exc:
            raise LUTFormatError(f"{path} is not UTF-8 text: {exc.reason}") from exc
    logger.info("Loaded .cube LUT %s (%d^3, title=%r)", path, lut.level, lut.title)
    return lut


def _format_triple(values, decimals: int) -> str:
    return " ".join(f"{float(v):.{decimals}f}" for v in values)


def dump_cube(lut: Lattice, stream: TextIO, decimals: int = CUBE_DECIMALS) -> None:
    """Write a lattice in .cube format to a text stream."""
    if lut.title:
        stream.write(f'TITLE "{lut.title}"\n')
    if lut.meta:
        stream.write(f"{lut.meta}\n")
    stream.write(f"LUT_3D_SIZE {lut.level}\n")
    stream.write(f"DOMAIN_MIN {_format_triple(lut.domain_min, decimals)}\n")
    stream.write(f"DOMAIN_MAX {_format_triple(lut.domain_max, decimals)}\n")
    stream.write("\n")
    np.savetxt(stream, lut.samples, fmt=f"%.{decimals}f", delimiter=" ")


def format_cube(lut: Lattice, decimals: int = CUBE_DECIMALS) -> str:
    """Render a lattice as .cube text."""
    buf = io.StringIO()
    dump_cube(lut, buf, decimals)
    return buf.getvalue()


def write_cube(
    filepath: str | Path,
    lut: Lattice,
    decimals: int = CUBE_DECIMALS,
) -> Path:
    """Write a lattice to a .cube file.

    Returns:
        The output path.
    """
    path = Path(filepath)
    with path.open("w", encoding="utf-8", newline="\n") as f:
        dump_cube(lut, f, decimals)
    logger.info("Saved .cube LUT %s (%d^3)", path, lut.level)
    return path
