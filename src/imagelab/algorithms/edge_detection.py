"""
Sobel edge detection.

Both gradient kernels run on a real-valued luminance copy of the image using
the convolution engine's clamp-to-edge correlation. Each response is
broadcast to the color channels; alpha is retained.
"""

import logging

import numpy as np

from imagelab.algorithms.convolution import correlate
from imagelab.domain_types import SobelDirection
from imagelab.image.buffer import PixelBuffer
from imagelab.image.converters import broadcast_gray, luminance, to_uint8

logger = logging.getLogger(__name__)


def _frozen(rows) -> np.ndarray:
    array = np.array(rows, dtype=np.float64)
    array.setflags(write=False)
    return array


# Horizontal gradient (responds to vertical edges)
SOBEL_X = _frozen(
    [
        [-1, 0, 1],
        [-2, 0, 2],
        [-1, 0, 1],
    ]
)

# Vertical gradient (responds to horizontal edges)
SOBEL_Y = _frozen(
    [
        [-1, -2, -1],
        [0, 0, 0],
        [1, 2, 1],
    ]
)


def sobel_gradients(gray: np.ndarray):
    """Return the (Gx, Gy) responses of a luminance plane."""
    return correlate(gray, SOBEL_X), correlate(gray, SOBEL_Y)


def sobel(buffer: PixelBuffer, direction: SobelDirection = SobelDirection.MAGNITUDE) -> PixelBuffer:
    """
    Apply the Sobel operator.

    Args:
        buffer: Source buffer
        direction: X emits |Gx|, Y emits |Gy|, MAGNITUDE emits sqrt(Gx^2 + Gy^2)

    Returns:
        New PixelBuffer, gray edge map clamped to 255
    """
    gray = luminance(buffer)

    if direction == SobelDirection.X:
        response = np.abs(correlate(gray, SOBEL_X))
    elif direction == SobelDirection.Y:
        response = np.abs(correlate(gray, SOBEL_Y))
    else:
        gx, gy = sobel_gradients(gray)
        response = np.sqrt(gx * gx + gy * gy)

    logger.debug(f"Sobel {SobelDirection(direction).value}: max response {response.max():.1f}")
    return broadcast_gray(buffer, to_uint8(response))


def sobel_x(buffer: PixelBuffer) -> PixelBuffer:
    """|Gx| edge map (vertical edges)."""
    return sobel(buffer, SobelDirection.X)


def sobel_y(buffer: PixelBuffer) -> PixelBuffer:
    """|Gy| edge map (horizontal edges)."""
    return sobel(buffer, SobelDirection.Y)


def sobel_magnitude(buffer: PixelBuffer) -> PixelBuffer:
    """Gradient magnitude sqrt(Gx^2 + Gy^2)."""
    return sobel(buffer, SobelDirection.MAGNITUDE)
