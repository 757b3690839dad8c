"""
Tests for algorithms.edge_detection module.
"""

import cv2
import numpy as np
import pytest

from imagelab.algorithms.edge_detection import sobel, sobel_magnitude, sobel_x, sobel_y
from imagelab.domain_types import SobelDirection
from imagelab.image.buffer import PixelBuffer


class TestSobel:
    """Tests for Sobel edge detection."""

    @pytest.fixture
    def vertical_edge(self):
        """Left half black, right half white."""
        gray = np.zeros((8, 8), dtype=np.uint8)
        gray[:, 4:] = 255
        return PixelBuffer.from_array(gray)

    @pytest.fixture
    def square(self):
        """White square on black."""
        image = np.zeros((40, 40), dtype=np.uint8)
        cv2.rectangle(image, (10, 10), (29, 29), 255, -1)
        return PixelBuffer.from_array(image)

    def test_sobel_x_detects_vertical_edge(self, vertical_edge):
        """Test |Gx| responds at the vertical edge only."""
        result = sobel_x(vertical_edge).pixels[:, :, 0]

        assert np.all(result[:, 3:5] == 255)
        assert np.all(result[:, :2] == 0)
        assert np.all(result[:, 6:] == 0)

    def test_sobel_y_ignores_vertical_edge(self, vertical_edge):
        """Test |Gy| is zero for a purely vertical edge."""
        assert np.all(sobel_y(vertical_edge).pixels[:, :, :3] == 0)

    def test_magnitude_combines(self, square):
        """Test the magnitude responds on every side of the square."""
        result = sobel_magnitude(square).pixels[:, :, 0]

        assert result[20, 9] > 0
        assert result[9, 20] > 0
        assert result[20, 20] == 0
        assert result[0, 0] == 0

    def test_broadcast_and_alpha(self, random_buffer):
        """Test gray output in every channel with alpha retained."""
        result = sobel(random_buffer, SobelDirection.MAGNITUDE)
        pixels = result.pixels

        assert np.array_equal(pixels[:, :, 0], pixels[:, :, 1])
        assert np.array_equal(pixels[:, :, 1], pixels[:, :, 2])
        assert np.array_equal(result.alpha, random_buffer.alpha)

    def test_small_response_exact(self):
        """Test a hand-computed Gx value on luminance."""
        gray = np.zeros((3, 3), dtype=np.uint8)
        gray[:, 2] = 10
        result = sobel_x(PixelBuffer.from_array(gray))

        assert result.pixels[1, 1, 0] == 40  # (1 + 2 + 1) * 10
