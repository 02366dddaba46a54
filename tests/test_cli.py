"""Tests for the prism command line."""

from __future__ import annotations

from pathlib import Path

import imageio.v3 as iio
import numpy as np
import pytest
from typer.testing import CliRunner

from prismlut import __version__
from prismlut.cli.app import app, default_output_path, parse_lut_spec
from prismlut.core.lattice import Lattice
from prismlut.io.cube import parse_cube, read_cube, write_cube

runner = CliRunner()


@pytest.fixture
def identity_cube(tmp_path):
    path = tmp_path / "identity.cube"
    write_cube(path, Lattice.identity(4, title="Identity"))
    return path


@pytest.fixture
def invert_cube(tmp_path):
    path = tmp_path / "invert.cube"
    write_cube(path, Lattice(4, 1.0 - Lattice.identity(4).samples, title="Invert"))
    return path


class TestHelpers:
    def test_lut_spec_with_intensity(self):
        assert parse_lut_spec("look.cube:0.4") == (Path("look.cube"), 0.4)

    def test_lut_spec_without_intensity(self):
        assert parse_lut_spec("look.cube") == (Path("look.cube"), 1.0)

    def test_lut_spec_colon_in_path(self):
        assert parse_lut_spec("C:/luts/look.cube") == (Path("C:/luts/look.cube"), 1.0)

    def test_default_output_path(self):
        assert default_output_path(Path("shots/photo.jpg")) == Path("shots/photo.prism.jpg")


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestBlend:
    def test_blend_to_stdout(self, identity_cube, invert_cube):
        result = runner.invoke(app, ["blend", str(identity_cube), str(invert_cube)])
        assert result.exit_code == 0
        lut = parse_cube(result.stdout.splitlines())
        assert lut.level == 4
        np.testing.assert_allclose(lut.samples, 0.5, atol=1e-6)

    def test_blend_weights_and_title(self, identity_cube, invert_cube, tmp_path):
        out = tmp_path / "blend.cube"
        result = runner.invoke(app, [
            "blend", f"{identity_cube}:3", f"{invert_cube}:1", "-o", str(out), "-t", "Mostly Neutral",
        ])
        assert result.exit_code == 0
        lut = read_cube(out)
        assert lut.title == "Mostly Neutral"
        expected = Lattice.identity(4).samples * 0.75 + (1.0 - Lattice.identity(4).samples) * 0.25
        np.testing.assert_allclose(lut.samples, expected, atol=1e-6)

    def test_blend_rescale(self, identity_cube, invert_cube, tmp_path):
        out = tmp_path / "blend.cube"
        result = runner.invoke(app, [
            "blend", f"{identity_cube}:3", f"{invert_cube}:1", "-o", str(out), "--rescale",
        ])
        assert result.exit_code == 0
        lut = read_cube(out)
        assert lut.samples.min() == 0.0
        assert lut.samples.max() == 1.0

    def test_blend_size_mismatch(self, identity_cube, tmp_path):
        other = tmp_path / "small.cube"
        write_cube(other, Lattice.identity(2))
        result = runner.invoke(app, ["blend", str(identity_cube), str(other)])
        assert result.exit_code == 1
        assert "Error" in result.stdout


class TestApply:
    def test_apply_identity(self, identity_cube, sample_image_path, random_rgb8, tmp_path):
        out = tmp_path / "graded.png"
        result = runner.invoke(app, ["apply", str(identity_cube), str(sample_image_path), "-o", str(out)])
        assert result.exit_code == 0
        graded = iio.imread(out).astype(np.int16)
        assert graded.shape == random_rgb8.shape
        assert np.abs(graded - random_rgb8.astype(np.int16)).max() <= 1

    def test_apply_default_output(self, invert_cube, sample_image_path, random_rgb8):
        result = runner.invoke(app, ["apply", f"{invert_cube}:0", str(sample_image_path)])
        assert result.exit_code == 0
        out = sample_image_path.with_name("photo.prism.png")
        assert out.exists()
        graded = iio.imread(out).astype(np.int16)
        assert np.abs(graded - random_rgb8.astype(np.int16)).max() <= 1

    def test_apply_missing_lut(self, sample_image_path, tmp_path):
        result = runner.invoke(app, ["apply", str(tmp_path / "missing.cube"), str(sample_image_path)])
        assert result.exit_code == 1

    def test_apply_unsupported_lut(self, sample_image_path, tmp_path):
        bogus = tmp_path / "look.3dl"
        bogus.write_text("nothing")
        result = runner.invoke(app, ["apply", str(bogus), str(sample_image_path)])
        assert result.exit_code == 1


class TestConvert:
    def test_cube_to_hald_and_back(self, identity_cube, tmp_path):
        hald = tmp_path / "identity.png"
        result = runner.invoke(app, ["convert", str(identity_cube), str(hald)])
        assert result.exit_code == 0
        assert iio.imread(hald).shape == (8, 8, 3)

        back = tmp_path / "back.cube"
        result = runner.invoke(app, ["convert", str(hald), str(back), "-t", "Round Trip"])
        assert result.exit_code == 0
        lut = read_cube(back)
        assert lut.level == 4
        assert lut.title == "Round Trip"
        np.testing.assert_allclose(lut.samples, Lattice.identity(4).samples, atol=1.5 / 255.0)

    def test_convert_with_level(self, identity_cube, tmp_path):
        hald = tmp_path / "baked.png"
        result = runner.invoke(app, ["convert", str(identity_cube), str(hald), "-l", "3"])
        assert result.exit_code == 0
        assert iio.imread(hald).shape == (27, 27, 3)

    def test_convert_resample(self, identity_cube, tmp_path):
        out = tmp_path / "big.cube"
        result = runner.invoke(app, ["convert", str(identity_cube), str(out), "-s", "7"])
        assert result.exit_code == 0
        lut = read_cube(out)
        assert lut.level == 7
        np.testing.assert_allclose(lut.samples, Lattice.identity(7).samples, atol=1e-6)

    def test_convert_bad_output_type(self, identity_cube, tmp_path):
        result = runner.invoke(app, ["convert", str(identity_cube), str(tmp_path / "out.txt")])
        assert result.exit_code == 1


class TestHaldGen:
    def test_hald_gen(self, tmp_path):
        out = tmp_path / "hald.png"
        result = runner.invoke(app, ["hald-gen", "-o", str(out), "-l", "2"])
        assert result.exit_code == 0
        img = iio.imread(out)
        assert img.shape == (8, 8, 3)
        np.testing.assert_array_equal(img[7, 7], [255, 255, 255])
        np.testing.assert_array_equal(img[0, 0], [0, 0, 0])

    def test_hald_gen_bad_level(self, tmp_path):
        result = runner.invoke(app, ["hald-gen", "-o", str(tmp_path / "h.png"), "-l", "40"])
        assert result.exit_code == 1


class TestInfo:
    def test_info(self, identity_cube):
        result = runner.invoke(app, ["info", str(identity_cube)])
        assert result.exit_code == 0
        assert "Identity" in result.stdout
        assert "64 nodes" in result.stdout

    def test_info_malformed(self, tmp_path):
        bad = tmp_path / "bad.cube"
        bad.write_text("LUT_3D_SIZE 2\nhello world\n")
        result = runner.invoke(app, ["info", str(bad)])
        assert result.exit_code == 1

    def test_info_not_utf8(self, tmp_path):
        bad = tmp_path / "binary.cube"
        bad.write_bytes(b"LUT_3D_SIZE 2\n\xff\xfe 0 0\n")
        result = runner.invoke(app, ["info", str(bad)])
        assert result.exit_code == 1
        assert not isinstance(result.exception, UnicodeDecodeError)
        assert "Error" in result.stdout
