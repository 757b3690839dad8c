"""
Tests for algorithms.convolution module.
"""

import numpy as np
import pytest

from imagelab.algorithms.convolution import (
    as_kernel,
    box_blur,
    box_kernel,
    convolve,
    correlate,
    gaussian_blur,
    gaussian_kernel,
    laplacian,
    normalize_kernel_size,
    sharpen,
)
from imagelab.exceptions import InvalidKernelError
from imagelab.image.buffer import PixelBuffer

IDENTITY = [[0, 0, 0], [0, 1, 0], [0, 0, 0]]


# =============================================================================
# Kernel synthesis
# =============================================================================


class TestKernels:
    """Tests for kernel synthesis and validation."""

    @pytest.mark.parametrize("size", [3, 5, 7])
    def test_box_kernel_sums_to_one(self, size):
        """Test box kernel weights sum to 1."""
        kernel = box_kernel(size)

        assert kernel.shape == (size, size)
        assert kernel.sum() == pytest.approx(1.0, abs=1e-5)

    @pytest.mark.parametrize("size,sigma", [(3, 1.0), (5, 1.4), (7, 2.0)])
    def test_gaussian_kernel_symmetric(self, size, sigma):
        """Test corners equal, center strictly largest, sum ~ 1."""
        kernel = gaussian_kernel(size, sigma)
        corners = [kernel[0, 0], kernel[0, -1], kernel[-1, 0], kernel[-1, -1]]
        center = kernel[size // 2, size // 2]

        assert corners == pytest.approx([corners[0]] * 4)
        assert center > corners[0]
        assert kernel.sum() == pytest.approx(1.0, abs=1e-2)
        assert np.allclose(kernel, np.rot90(kernel))

    def test_sizes_normalized(self):
        """Test even sizes bump to odd and sizes are clamped."""
        assert normalize_kernel_size(4) == 5
        assert normalize_kernel_size(0) == 1
        assert normalize_kernel_size(99) == 31
        assert box_kernel(4).shape == (5, 5)

    def test_sigma_floor(self):
        """Test a tiny sigma behaves like sigma = 0.1."""
        assert np.allclose(gaussian_kernel(3, 0.0), gaussian_kernel(3, 0.1))

    @pytest.mark.parametrize(
        "kernel",
        [
            [],
            [[1, 2, 3]],
            [[1, 2], [3]],
            [[1, np.nan], [0, 1]],
            [1, 2, 3],
        ],
    )
    def test_malformed_kernels_rejected(self, kernel):
        """Test malformed kernels raise InvalidKernelError."""
        with pytest.raises(InvalidKernelError):
            as_kernel(kernel)


# =============================================================================
# Engine
# =============================================================================


class TestConvolve:
    """Tests for the generic convolution engine."""

    def test_identity_kernel(self, random_buffer):
        """Test the identity kernel reproduces the input exactly."""
        assert convolve(random_buffer, IDENTITY) == random_buffer

    def test_no_kernel_flip(self):
        """Test the kernel is applied as correlation."""
        gray = np.zeros((1, 3), dtype=np.uint8)
        gray[0, 2] = 100
        shift_left = [[0, 0, 0], [0, 0, 1], [0, 0, 0]]

        result = convolve(PixelBuffer.from_array(gray), shift_left)

        # output[x] = input[x + 1]
        assert result.pixels[0, :, 0].tolist() == [0, 100, 100]

    def test_clamp_to_edge(self):
        """Test borders replicate the nearest pixel instead of zero padding."""
        buffer = PixelBuffer.filled(4, 3, (200, 100, 50, 255))
        assert box_blur(buffer, 3) == buffer

    def test_alpha_copied(self, random_buffer):
        """Test alpha is copied from the source."""
        result = convolve(random_buffer, box_kernel(3))
        assert np.array_equal(result.alpha, random_buffer.alpha)

    def test_even_kernel_accepted(self):
        """Test even-sized custom kernels anchor at k // 2."""
        buffer = PixelBuffer.filled(3, 3, (10, 20, 30, 255))
        result = convolve(buffer, [[0.25, 0.25], [0.25, 0.25]])
        assert result == buffer

    def test_correlate_matches_manual_sum(self):
        """Test a pixel against a hand-computed neighborhood sum."""
        plane = np.arange(9, dtype=np.float64).reshape(3, 3)
        kernel = np.array([[1, 2, 3], [4, 5, 6], [7, 8, 9]], dtype=np.float64)

        assert correlate(plane, kernel)[1, 1] == pytest.approx((plane * kernel).sum())

    def test_input_not_modified(self, random_buffer):
        """Test the input buffer is untouched."""
        before = random_buffer.copy()
        gaussian_blur(random_buffer, 5, 1.5)
        assert random_buffer == before


# =============================================================================
# Filters
# =============================================================================


class TestFilters:
    """Tests for derived spatial filters."""

    def test_box_blur_smooths(self, random_buffer):
        """Test blur reduces the spread of noise."""
        result = box_blur(random_buffer, 5)

        assert result.rgb.std() < random_buffer.rgb.std() / 2

    def test_box_blur_uniform_center(self):
        """Test a uniform 3x3 image keeps its center value."""
        buffer = PixelBuffer.filled(3, 3, (128, 128, 128, 255))
        result = box_blur(buffer, 3)

        assert result.pixels[1, 1].tolist() == [128, 128, 128, 255]

    def test_gaussian_blur_softens_step_edge(self):
        """Test the boundary of a black/white split lands strictly between."""
        gray = np.zeros((5, 5), dtype=np.uint8)
        gray[:, 3:] = 255
        result = gaussian_blur(PixelBuffer.from_array(gray), 3, 1.0)
        boundary = result.pixels[:, 2, :3]

        assert np.all(boundary > 0)
        assert np.all(boundary < 255)
        assert np.all(result.pixels[:, 0, :3] == 0)

    def test_sharpen_uniform_unchanged(self):
        """Test sharpen kernel sums to 1, so flat areas are unchanged."""
        buffer = PixelBuffer.filled(5, 5, (90, 90, 90, 255))
        assert sharpen(buffer) == buffer

    def test_sharpen_increases_contrast(self):
        """Test a step edge overshoots after sharpening."""
        gray = np.zeros((3, 4), dtype=np.uint8)
        gray[:, 2:] = 100
        result = sharpen(PixelBuffer.from_array(gray))

        assert result.pixels[1, :, 0].tolist() == [0, 0, 200, 100]

    def test_laplacian_absolute_value(self):
        """Test negative responses become positive edge magnitudes."""
        gray = np.zeros((3, 3), dtype=np.uint8)
        gray[1, 1] = 50
        result = laplacian(PixelBuffer.from_array(gray))

        assert result.pixels[1, 1, 0] == 200  # |-4 * 50|
        assert result.pixels[0, 1, 0] == 50

    def test_laplacian_flat_is_black(self):
        """Test a flat image has no edges."""
        buffer = PixelBuffer.filled(4, 4, (70, 70, 70, 255))
        assert np.all(laplacian(buffer).pixels[:, :, :3] == 0)
