"""
Image Package

Pixel buffer representation and image-level helpers shared by all engines.
"""

from .buffer import PixelBuffer
from .converters import (
    buffer_from_bgr,
    buffer_from_pil,
    buffer_to_bgr,
    buffer_to_pil,
    gray_levels,
    luminance,
)
from .geometry import calculate_distance, get_neighbor_offsets, is_in_neighborhood
from .inspection import get_neighborhood, get_pixel_info
from .statistics import calculate_histogram, calculate_image_statistics

__all__ = [
    "PixelBuffer",
    "luminance",
    "gray_levels",
    "buffer_to_pil",
    "buffer_from_pil",
    "buffer_to_bgr",
    "buffer_from_bgr",
    "calculate_distance",
    "is_in_neighborhood",
    "get_neighbor_offsets",
    "get_pixel_info",
    "get_neighborhood",
    "calculate_histogram",
    "calculate_image_statistics",
]
