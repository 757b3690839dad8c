"""
User-defined filters: ad-hoc kernels and formulas.
"""

import logging
from typing import Dict, List

import numpy as np

from imagelab.algorithms.convolution import KernelLike, as_kernel, convolve
from imagelab.algorithms.formula import apply_custom_formula
from imagelab.image.buffer import PixelBuffer

logger = logging.getLogger(__name__)

__all__ = ["PRESET_KERNELS", "apply_custom_formula", "apply_custom_kernel", "create_empty_kernel"]

# Common kernels offered as starting points for custom editing
PRESET_KERNELS: Dict[str, List[List[float]]] = {
    "identity": [
        [0, 0, 0],
        [0, 1, 0],
        [0, 0, 0],
    ],
    "sharpen": [
        [0, -1, 0],
        [-1, 5, -1],
        [0, -1, 0],
    ],
    "edge_detect": [
        [-1, -1, -1],
        [-1, 8, -1],
        [-1, -1, -1],
    ],
    "emboss": [
        [-2, -1, 0],
        [-1, 1, 1],
        [0, 1, 2],
    ],
    "blur": [
        [1 / 9, 1 / 9, 1 / 9],
        [1 / 9, 1 / 9, 1 / 9],
        [1 / 9, 1 / 9, 1 / 9],
    ],
}


def create_empty_kernel(size: int = 3) -> List[List[float]]:
    """Return a size x size kernel of zeros."""
    return [[0.0] * size for _ in range(size)]


def apply_custom_kernel(buffer: PixelBuffer, kernel: KernelLike) -> PixelBuffer:
    """
    Convolve an image with a caller-supplied kernel.

    Args:
        buffer: Source buffer
        kernel: Square kernel; even sizes are accepted and anchored at k // 2

    Returns:
        New PixelBuffer

    Raises:
        InvalidKernelError: If the kernel is malformed
    """
    matrix = as_kernel(kernel)
    logger.debug(f"Custom kernel {matrix.shape[0]}x{matrix.shape[1]}, sum={np.sum(matrix):.3f}")
    return convolve(buffer, matrix)
