"""
Color manipulation filters: grayscale, sepia and channel swapping.
"""

import numpy as np

from imagelab.image.buffer import PixelBuffer
from imagelab.image.converters import broadcast_gray, gray_levels, to_uint8

# Rows produce R', G', B' from (R, G, B)
SEPIA_MATRIX = np.array(
    [
        [0.393, 0.769, 0.189],
        [0.349, 0.686, 0.168],
        [0.272, 0.534, 0.131],
    ]
)
SEPIA_MATRIX.setflags(write=False)


def grayscale(buffer: PixelBuffer) -> PixelBuffer:
    """Replace every color channel with the rounded luminance."""
    return broadcast_gray(buffer, gray_levels(buffer))


def sepia(buffer: PixelBuffer) -> PixelBuffer:
    """Vintage brownish tone, capped at 255."""
    toned = buffer.rgb @ SEPIA_MATRIX.T
    return buffer.with_rgb(to_uint8(toned))


def swap_channels(buffer: PixelBuffer) -> PixelBuffer:
    """Rotate channels: new R = old B, new G = old R, new B = old G."""
    rgb = buffer.pixels[:, :, :3]
    return buffer.with_rgb(rgb[:, :, [2, 0, 1]])
