"""
Binary morphology.

Binarization plus erosion, dilation, opening and closing over a structuring
element. Footprint cells falling outside the image are treated as background
(0): they force erosion to 0 and never raise a dilation.

Each color channel is processed independently, so thresholded inputs (all
channels 0 or 255) stay binary. Alpha is preserved.
"""

import logging
from typing import Optional, Sequence, Union

import numpy as np

from imagelab.domain_types import MorphologyConstants
from imagelab.exceptions import InvalidKernelError
from imagelab.image.buffer import PixelBuffer
from imagelab.image.converters import broadcast_gray, luminance

logger = logging.getLogger(__name__)

ElementLike = Union[np.ndarray, Sequence[Sequence[int]]]


def _element(rows) -> np.ndarray:
    array = np.array(rows, dtype=bool)
    array.setflags(write=False)
    return array


# 3x3 cross (4-connected)
CROSS_ELEMENT = _element(
    [
        [0, 1, 0],
        [1, 1, 1],
        [0, 1, 0],
    ]
)

# 3x3 square (8-connected)
SQUARE_ELEMENT = _element(
    [
        [1, 1, 1],
        [1, 1, 1],
        [1, 1, 1],
    ]
)


def as_structuring_element(element: Optional[ElementLike]) -> np.ndarray:
    """
    Validate a structuring element.

    Args:
        element: Square 0/1 mask with odd side, or None for SQUARE_ELEMENT

    Returns:
        Boolean mask

    Raises:
        InvalidKernelError: If the mask is not square, has an even side or
            holds values other than 0 and 1
    """
    if element is None:
        return SQUARE_ELEMENT

    raw = np.asarray(element)
    if raw.ndim != 2 or raw.size == 0 or raw.shape[0] != raw.shape[1]:
        raise InvalidKernelError(f"structuring element must be square, got shape {raw.shape}")
    if raw.shape[0] % 2 == 0:
        raise InvalidKernelError(f"structuring element side must be odd, got {raw.shape[0]}")
    if not np.isin(raw, (0, 1)).all():
        raise InvalidKernelError("structuring element must contain only 0 and 1")
    return raw.astype(bool)


# ==============================================================================
# Binarization
# ==============================================================================


def threshold(buffer: PixelBuffer, value: float = MorphologyConstants.THRESHOLD_DEFAULT) -> PixelBuffer:
    """
    Binary thresholding on luminance.

    Args:
        buffer: Source buffer
        value: Threshold T; luminance >= T becomes 255, else 0

    Returns:
        Binary PixelBuffer (0 or 255 in every color channel)
    """
    binary = np.where(
        luminance(buffer) >= value, MorphologyConstants.FOREGROUND, MorphologyConstants.BACKGROUND
    ).astype(np.uint8)
    return broadcast_gray(buffer, binary)


# ==============================================================================
# Erosion / Dilation
# ==============================================================================


def _footprint_reduce(
    buffer: PixelBuffer, element: Optional[ElementLike], reducer, initial: int
) -> PixelBuffer:
    mask = as_structuring_element(element)
    size = mask.shape[0]
    center = size // 2
    height, width = buffer.shape

    padded = np.pad(
        buffer.pixels[:, :, :3],
        [(center, center), (center, center), (0, 0)],
        mode="constant",
        constant_values=MorphologyConstants.BACKGROUND,
    )

    result = np.full((height, width, 3), initial, dtype=np.uint8)
    for sy in range(size):
        for sx in range(size):
            if not mask[sy, sx]:
                continue
            result = reducer(result, padded[sy : sy + height, sx : sx + width])
    return buffer.with_rgb(result)


def erosion(buffer: PixelBuffer, element: Optional[ElementLike] = None) -> PixelBuffer:
    """
    Morphological erosion: minimum over the structuring element footprint.

    Shrinks white regions. Pixels whose footprint touches the border become
    background.

    Args:
        buffer: Binary buffer (assumed already thresholded)
        element: Structuring element (default 3x3 square)

    Returns:
        Eroded PixelBuffer
    """
    return _footprint_reduce(buffer, element, np.minimum, MorphologyConstants.FOREGROUND)


def dilation(buffer: PixelBuffer, element: Optional[ElementLike] = None) -> PixelBuffer:
    """
    Morphological dilation: maximum over the structuring element footprint.

    Expands white regions; out-of-bounds cells do not contribute.

    Args:
        buffer: Binary buffer
        element: Structuring element (default 3x3 square)

    Returns:
        Dilated PixelBuffer
    """
    return _footprint_reduce(buffer, element, np.maximum, MorphologyConstants.BACKGROUND)


def opening(buffer: PixelBuffer, element: Optional[ElementLike] = None) -> PixelBuffer:
    """
    Erosion followed by dilation.

    Removes small white noise and smooths object boundaries.
    """
    return dilation(erosion(buffer, element), element)


def closing(buffer: PixelBuffer, element: Optional[ElementLike] = None) -> PixelBuffer:
    """
    Dilation followed by erosion.

    Fills small black holes and connects nearby objects.
    """
    return erosion(dilation(buffer, element), element)
