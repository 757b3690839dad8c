"""
Pixel inspection helpers shared with callers.

Out-of-bounds queries return an explicit "no value" result instead of
raising.
"""

from typing import List, Optional

from imagelab.domain_types import InspectionConstants, LuminanceWeights, NeighborPixel, PixelInfo
from imagelab.image.buffer import PixelBuffer


def _in_bounds(buffer: PixelBuffer, x: int, y: int) -> bool:
    return 0 <= x < buffer.width and 0 <= y < buffer.height


def get_pixel_info(buffer: PixelBuffer, x: int, y: int) -> Optional[PixelInfo]:
    """
    Get detailed information about a single pixel.

    Args:
        buffer: Source buffer
        x: Column
        y: Row

    Returns:
        PixelInfo, or None when (x, y) lies outside the image
    """
    if not _in_bounds(buffer, x, y):
        return None

    r, g, b, a = (int(v) for v in buffer.pixels[y, x])
    gray = int(
        LuminanceWeights.RED * r + LuminanceWeights.GREEN * g + LuminanceWeights.BLUE * b + 0.5
    )
    return PixelInfo(x=x, y=y, r=r, g=g, b=b, a=a, gray=gray, hex=f"#{r:02x}{g:02x}{b:02x}")


def get_neighborhood(
    buffer: PixelBuffer,
    center_x: int,
    center_y: int,
    radius: int = InspectionConstants.NEIGHBORHOOD_RADIUS_DEFAULT,
) -> List[NeighborPixel]:
    """
    Extract the in-bounds pixels of a (2 * radius + 1)^2 window.

    Args:
        buffer: Source buffer
        center_x: Center column
        center_y: Center row
        radius: Window radius (default 5, an 11x11 grid)

    Returns:
        Row-major list of NeighborPixel with coordinates relative to the center
    """
    pixels = buffer.pixels
    neighborhood = []
    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            x = center_x + dx
            y = center_y + dy
            if _in_bounds(buffer, x, y):
                r, g, b = (int(v) for v in pixels[y, x, :3])
                neighborhood.append(NeighborPixel(x=dx, y=dy, r=r, g=g, b=b))
    return neighborhood
