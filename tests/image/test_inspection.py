"""
Tests for image.inspection module.
"""

from imagelab.image.buffer import PixelBuffer
from imagelab.image.inspection import get_neighborhood, get_pixel_info


class TestPixelInfo:
    """Tests for get_pixel_info."""

    def test_in_bounds(self):
        """Test pixel details."""
        buffer = PixelBuffer(2, 1, [0, 0, 0, 0, 255, 128, 1, 200])
        info = get_pixel_info(buffer, 1, 0)

        assert (info.r, info.g, info.b, info.a) == (255, 128, 1, 200)
        assert info.gray == 151  # 76.245 + 75.136 + 0.114
        assert info.hex == "#ff8001"

    def test_out_of_bounds_returns_none(self):
        """Test out-of-bounds queries return no value."""
        buffer = PixelBuffer.filled(2, 2)

        assert get_pixel_info(buffer, 2, 0) is None
        assert get_pixel_info(buffer, 0, -1) is None


class TestNeighborhood:
    """Tests for get_neighborhood."""

    def test_full_window(self):
        """Test an interior window has (2r+1)^2 pixels."""
        buffer = PixelBuffer.filled(9, 9)
        assert len(get_neighborhood(buffer, 4, 4, radius=2)) == 25

    def test_clipped_at_corner(self):
        """Test only in-bounds pixels are returned."""
        buffer = PixelBuffer.filled(9, 9)
        neighborhood = get_neighborhood(buffer, 0, 0, radius=1)

        assert len(neighborhood) == 4
        assert [(p.x, p.y) for p in neighborhood] == [(0, 0), (1, 0), (0, 1), (1, 1)]
