"""Shared fixtures for Prism tests."""

from __future__ import annotations

import imageio.v3 as iio
import numpy as np
import pytest

from prismlut.core.lattice import Lattice


@pytest.fixture
def small_N():
    """Lattice level used by most tests."""
    return 5


@pytest.fixture
def identity_5():
    """5x5x5 identity lattice."""
    return Lattice.identity(5)


@pytest.fixture
def random_lut():
    """5x5x5 lattice with random samples in [0, 1]."""
    rng = np.random.default_rng(42)
    return Lattice(5, rng.random((125, 3)), title="Random LUT")


@pytest.fixture
def random_colors():
    """Random (M, 3) float64 colors in [0, 1]."""
    rng = np.random.default_rng(7)
    return rng.random((500, 3))


@pytest.fixture
def corner_cube_text():
    """Level-2 .cube text whose samples are the 8 unit-cube corners."""
    lines = ['TITLE "Corners"', "LUT_3D_SIZE 2", "DOMAIN_MIN 0 0 0", "DOMAIN_MAX 1 1 1", ""]
    for b in (0, 1):
        for g in (0, 1):
            for r in (0, 1):
                lines.append(f"{r} {g} {b}")
    return "\n".join(lines) + "\n"


@pytest.fixture
def tmp_image_dir(tmp_path):
    """Scratch directory for image files."""
    d = tmp_path / "images"
    d.mkdir()
    return d


@pytest.fixture
def random_rgb8():
    """Random 12x16 uint8 RGB image."""
    rng = np.random.default_rng(99)
    return rng.integers(0, 256, size=(12, 16, 3), dtype=np.uint8)


@pytest.fixture
def sample_image_path(tmp_image_dir, random_rgb8):
    """The random uint8 image written as PNG."""
    path = tmp_image_dir / "photo.png"
    iio.imwrite(path, random_rgb8)
    return path


@pytest.fixture
def tmp_cube_path(tmp_path):
    """Where a test writes its .cube file."""
    return tmp_path / "look.cube"
