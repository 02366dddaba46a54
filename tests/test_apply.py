"""Tests for applying a lattice to images."""

from __future__ import annotations

import numpy as np
import pytest

from prismlut.core.apply import apply_lut, apply_lut_scaled
from prismlut.core.lattice import Lattice
from prismlut.errors import EmptyInputError, ImageFormatError, ValidationError


@pytest.fixture
def image(random_rgb8):
    return random_rgb8.astype(np.float32) / 255.0


@pytest.fixture
def invert_lut():
    identity = Lattice.identity(5)
    return Lattice(5, 1.0 - identity.samples, title="Invert")


class TestApply:
    def test_identity_preserves_image(self, identity_5, image):
        result = apply_lut(identity_5, image)
        assert result.shape == image.shape
        assert result.dtype == np.float32
        np.testing.assert_allclose(result, image, atol=1e-6)

    def test_identity_preserves_8bit_values(self, identity_5, random_rgb8, image):
        result = apply_lut(identity_5, image)
        quantized = np.round(result * 255).astype(np.int16)
        assert np.abs(quantized - random_rgb8.astype(np.int16)).max() <= 1

    def test_single_red_pixel(self):
        pixel = np.array([[[1.0, 0.0, 0.0]]], dtype=np.float32)
        result = apply_lut(Lattice.identity(2), pixel)
        np.testing.assert_allclose(result, pixel, atol=1e-7)

    def test_invert(self, invert_lut, image):
        result = apply_lut(invert_lut, image)
        np.testing.assert_allclose(result, 1.0 - image, atol=1e-6)

    def test_output_is_clipped(self, image):
        lut = Lattice(2, np.full((8, 3), 2.0))
        result = apply_lut(lut, image)
        np.testing.assert_array_equal(result, 1.0)

    def test_alpha_passes_through(self, invert_lut, image):
        alpha = np.linspace(0, 1, image.shape[0] * image.shape[1], dtype=np.float32)
        rgba = np.concatenate([image, alpha.reshape(image.shape[:2] + (1,))], axis=2)
        result = apply_lut(invert_lut, rgba)
        assert result.shape == rgba.shape
        np.testing.assert_array_equal(result[:, :, 3], rgba[:, :, 3])
        np.testing.assert_allclose(result[:, :, :3], 1.0 - image, atol=1e-6)

    def test_source_is_untouched(self, invert_lut, image):
        before = image.copy()
        apply_lut(invert_lut, image)
        np.testing.assert_array_equal(image, before)

    def test_custom_domain(self, image):
        """Samples are read in domain units and mapped back to [0, 1]."""
        lut = Lattice(3, Lattice.identity(3).samples, domain_min=(0, 0, 0), domain_max=(2, 2, 2))
        result = apply_lut(lut, image)
        np.testing.assert_allclose(result, image / 2.0, atol=1e-6)

    def test_method_matches_function(self, random_lut, image):
        np.testing.assert_array_equal(random_lut.apply(image), apply_lut(random_lut, image))


class TestIntensity:
    def test_zero_intensity_is_noop(self, invert_lut, image):
        result = apply_lut(invert_lut, image, intensity=0.0)
        np.testing.assert_allclose(result, image, atol=1e-7)

    def test_half_intensity(self, invert_lut, image):
        result = apply_lut_scaled(invert_lut, image, 0.5)
        np.testing.assert_allclose(result, 0.5, atol=1e-6)

    def test_intensity_is_clamped(self, invert_lut, image):
        np.testing.assert_array_equal(
            apply_lut(invert_lut, image, intensity=3.0),
            apply_lut(invert_lut, image, intensity=1.0),
        )
        np.testing.assert_array_equal(
            apply_lut(invert_lut, image, intensity=-1.0),
            apply_lut(invert_lut, image, intensity=0.0),
        )

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), -float("inf")])
    def test_non_finite_intensity(self, invert_lut, image, bad):
        with pytest.raises(ValidationError, match="finite"):
            apply_lut(invert_lut, image, intensity=bad)

    def test_scaled_method(self, invert_lut, image):
        np.testing.assert_array_equal(
            invert_lut.apply_scaled(image, 0.25),
            apply_lut(invert_lut, image, intensity=0.25),
        )


class TestConcurrency:
    @pytest.mark.parametrize("workers, rows", [(1, 64), (4, 1), (3, 5), (16, 2)])
    def test_result_independent_of_partitioning(self, random_lut, image, workers, rows):
        reference = apply_lut(random_lut, image, max_workers=1, rows_per_task=image.shape[0])
        result = apply_lut(random_lut, image, max_workers=workers, rows_per_task=rows)
        np.testing.assert_array_equal(result, reference)

    def test_lattice_is_read_only(self, random_lut, image):
        before = random_lut.samples.copy()
        apply_lut(random_lut, image, max_workers=4, rows_per_task=1)
        np.testing.assert_array_equal(random_lut.samples, before)


class TestInvalidImages:
    def test_none(self, identity_5):
        with pytest.raises(EmptyInputError):
            apply_lut(identity_5, None)

    def test_zero_height(self, identity_5):
        with pytest.raises(EmptyInputError):
            apply_lut(identity_5, np.zeros((0, 4, 3), dtype=np.float32))

    @pytest.mark.parametrize("shape", [(4, 4), (4, 4, 2), (2, 4, 4, 3)])
    def test_bad_shape(self, identity_5, shape):
        with pytest.raises(ImageFormatError):
            apply_lut(identity_5, np.zeros(shape, dtype=np.float32))
