"""
Tests for algorithms.custom_filters module.
"""

import numpy as np
import pytest

from imagelab.algorithms.convolution import sharpen
from imagelab.algorithms.custom_filters import (
    PRESET_KERNELS,
    apply_custom_kernel,
    create_empty_kernel,
)
from imagelab.exceptions import InvalidKernelError


class TestCustomKernel:
    """Tests for user-supplied kernels."""

    def test_identity_preset(self, random_buffer):
        """Test the identity preset leaves the image unchanged."""
        assert apply_custom_kernel(random_buffer, PRESET_KERNELS["identity"]) == random_buffer

    def test_sharpen_preset_matches_filter(self, color_buffer):
        """Test the sharpen preset equals the built-in filter."""
        assert apply_custom_kernel(color_buffer, PRESET_KERNELS["sharpen"]) == sharpen(color_buffer)

    def test_all_presets_are_valid(self, color_buffer):
        """Test every preset is a square 3x3 kernel that can be applied."""
        for name, kernel in PRESET_KERNELS.items():
            assert np.asarray(kernel).shape == (3, 3), name
            assert apply_custom_kernel(color_buffer, kernel).shape == color_buffer.shape

    def test_empty_kernel_blackens(self, random_buffer):
        """Test an all-zero kernel yields black with alpha kept."""
        result = apply_custom_kernel(random_buffer, create_empty_kernel(5))

        assert np.all(result.pixels[:, :, :3] == 0)
        assert np.array_equal(result.alpha, random_buffer.alpha)

    def test_create_empty_kernel(self):
        """Test the empty kernel shape."""
        kernel = create_empty_kernel(7)

        assert len(kernel) == 7
        assert all(len(row) == 7 and not any(row) for row in kernel)

    def test_non_square_rejected(self, random_buffer):
        """Test a malformed kernel raises InvalidKernelError."""
        with pytest.raises(InvalidKernelError):
            apply_custom_kernel(random_buffer, [[1, 0, 0], [0, 1, 0]])
