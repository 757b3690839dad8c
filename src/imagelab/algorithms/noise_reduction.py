"""
Noise reduction filters.
"""

import logging

import cv2
import numpy as np

from imagelab.algorithms.convolution import normalize_kernel_size
from imagelab.domain_types import ConvolutionConstants
from imagelab.image.buffer import PixelBuffer

logger = logging.getLogger(__name__)


def median_filter(
    buffer: PixelBuffer, size: int = ConvolutionConstants.KERNEL_SIZE_DEFAULT
) -> PixelBuffer:
    """
    Median filter, effective against salt-and-pepper noise while preserving
    edges.

    For each pixel and color channel the size x size clamp-to-edge
    neighborhood is sorted and its middle element selected.

    Args:
        buffer: Source buffer
        size: Window size (normalized to odd)

    Returns:
        New PixelBuffer with alpha untouched
    """
    size = normalize_kernel_size(size)
    if size == 1:
        return buffer.copy()

    # medianBlur replicates the border, which is clamp-to-edge
    rgb = np.ascontiguousarray(buffer.pixels[:, :, :3])
    median = cv2.medianBlur(rgb, size)
    logger.debug(f"Median filter: size={size}")
    return buffer.with_rgb(median)
