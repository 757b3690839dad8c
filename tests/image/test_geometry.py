"""
Tests for image.geometry module.
"""

import pytest

from imagelab.domain_types import DistanceMetric, NeighborType
from imagelab.image.geometry import calculate_distance, get_neighbor_offsets, is_in_neighborhood


class TestDistance:
    """Tests for calculate_distance."""

    @pytest.mark.parametrize(
        "metric,expected",
        [
            (DistanceMetric.EUCLIDEAN, 5.0),
            (DistanceMetric.CITY_BLOCK, 7),
            (DistanceMetric.CHESSBOARD, 4),
        ],
    )
    def test_metrics(self, metric, expected):
        """Test each metric on a 3-4-5 triangle."""
        assert calculate_distance(0, 0, 3, 4, metric) == pytest.approx(expected)

    def test_default_is_euclidean(self):
        """Test the default metric."""
        assert calculate_distance(1, 1, 1, 3) == pytest.approx(2.0)


class TestNeighborhood:
    """Tests for neighborhood membership."""

    def test_center_excluded(self):
        """Test the center is never its own neighbor."""
        for neighbor_type in NeighborType:
            assert is_in_neighborhood(0, 0, neighbor_type) is False

    def test_distance_two_excluded(self):
        """Test offsets beyond distance one."""
        assert is_in_neighborhood(2, 0, NeighborType.N8) is False

    def test_offsets(self):
        """Test offset lists in row-major order."""
        assert get_neighbor_offsets(NeighborType.N4) == [(0, -1), (-1, 0), (1, 0), (0, 1)]
        assert get_neighbor_offsets(NeighborType.ND) == [(-1, -1), (1, -1), (-1, 1), (1, 1)]
        assert len(get_neighbor_offsets(NeighborType.N8)) == 8
