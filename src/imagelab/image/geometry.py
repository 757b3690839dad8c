"""
Neighborhood and distance geometry on the pixel grid.
"""

import math
from typing import List, Tuple

from imagelab.domain_types import DistanceMetric, NeighborType


def calculate_distance(
    x1: float, y1: float, x2: float, y2: float, metric: DistanceMetric = DistanceMetric.EUCLIDEAN
) -> float:
    """
    Distance between two points.

    - Euclidean: sqrt((x1-x2)^2 + (y1-y2)^2)
    - City-block (D4): |x1-x2| + |y1-y2|
    - Chessboard (D8): max(|x1-x2|, |y1-y2|)

    Args:
        x1, y1: First point
        x2, y2: Second point
        metric: Distance metric

    Returns:
        The distance
    """
    dx = abs(x1 - x2)
    dy = abs(y1 - y2)

    if metric == DistanceMetric.CITY_BLOCK:
        return dx + dy
    if metric == DistanceMetric.CHESSBOARD:
        return max(dx, dy)
    return math.sqrt(dx * dx + dy * dy)


def is_in_neighborhood(dx: int, dy: int, neighbor_type: NeighborType) -> bool:
    """
    Check whether a relative offset belongs to a neighborhood.

    The center itself is never part of its neighborhood, and only offsets at
    distance one are considered.
    """
    if dx == 0 and dy == 0:
        return False
    if abs(dx) > 1 or abs(dy) > 1:
        return False

    if neighbor_type == NeighborType.N4:
        return dx == 0 or dy == 0
    if neighbor_type == NeighborType.ND:
        return dx != 0 and dy != 0
    return neighbor_type == NeighborType.N8


def get_neighbor_offsets(neighbor_type: NeighborType) -> List[Tuple[int, int]]:
    """All (dx, dy) offsets of a neighborhood type, row-major."""
    return [
        (dx, dy)
        for dy in (-1, 0, 1)
        for dx in (-1, 0, 1)
        if is_in_neighborhood(dx, dy, neighbor_type)
    ]
