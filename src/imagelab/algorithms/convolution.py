"""
Convolution engine.

Generic weighted-neighborhood filtering and kernel synthesis for spatial
filters. "Convolution" here is correlation in the image-processing sense:
the kernel is applied as given, without a 180 degree flip.

Border policy is clamp-to-edge for every filter in this module: neighbor
coordinates outside the image are replaced by the nearest valid coordinate.
"""

import logging
from typing import Sequence, Union

import numpy as np

from imagelab.domain_types import ConvolutionConstants
from imagelab.exceptions import InvalidKernelError
from imagelab.image.buffer import PixelBuffer
from imagelab.image.converters import to_uint8

logger = logging.getLogger(__name__)

KernelLike = Union[np.ndarray, Sequence[Sequence[float]]]


def _frozen(rows) -> np.ndarray:
    array = np.array(rows, dtype=np.float64)
    array.setflags(write=False)
    return array


# Fixed kernels
SHARPEN_KERNEL = _frozen(
    [
        [0, -1, 0],
        [-1, 5, -1],
        [0, -1, 0],
    ]
)

LAPLACIAN_KERNEL = _frozen(
    [
        [0, 1, 0],
        [1, -4, 1],
        [0, 1, 0],
    ]
)


# ==============================================================================
# Kernel validation & synthesis
# ==============================================================================


def as_kernel(kernel: KernelLike) -> np.ndarray:
    """
    Validate a kernel and return it as a float64 matrix.

    Raises:
        InvalidKernelError: If the kernel is empty, ragged, not square or
            contains non-finite weights
    """
    try:
        matrix = np.array(kernel, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidKernelError(f"cannot read kernel weights ({e})") from e

    if matrix.ndim != 2 or matrix.size == 0:
        raise InvalidKernelError(f"kernel must be a non-empty matrix, got shape {matrix.shape}")
    if matrix.shape[0] != matrix.shape[1]:
        raise InvalidKernelError(f"kernel must be square, got {matrix.shape[0]}x{matrix.shape[1]}")
    if not np.all(np.isfinite(matrix)):
        raise InvalidKernelError("kernel weights must be finite")
    return matrix


def normalize_kernel_size(size: int) -> int:
    """Bump even sizes to the next odd value and clamp to the supported range."""
    size = int(size)
    if size % 2 == 0:
        size += 1
    return max(ConvolutionConstants.KERNEL_SIZE_MIN, min(ConvolutionConstants.KERNEL_SIZE_MAX, size))


def box_kernel(size: int = ConvolutionConstants.KERNEL_SIZE_DEFAULT) -> np.ndarray:
    """
    Uniform (mean) kernel.

    Args:
        size: Kernel size (normalized to odd)

    Returns:
        size x size matrix of 1 / size^2
    """
    size = normalize_kernel_size(size)
    return np.full((size, size), 1.0 / (size * size))


def gaussian_kernel(
    size: int = ConvolutionConstants.KERNEL_SIZE_DEFAULT,
    sigma: float = ConvolutionConstants.GAUSSIAN_SIGMA_DEFAULT,
) -> np.ndarray:
    """
    Normalized Gaussian kernel.

    Samples exp(-(dx^2 + dy^2) / (2 sigma^2)) at each offset from the center,
    then divides by the total so the weights sum to 1.

    Args:
        size: Kernel size (normalized to odd)
        sigma: Standard deviation (raised to at least 0.1)

    Returns:
        size x size matrix
    """
    size = normalize_kernel_size(size)
    sigma = max(float(sigma), ConvolutionConstants.GAUSSIAN_SIGMA_MIN)
    center = size // 2

    offsets = np.arange(size) - center
    dy, dx = np.meshgrid(offsets, offsets, indexing="ij")
    kernel = np.exp(-(dx * dx + dy * dy) / (2 * sigma * sigma))
    return kernel / kernel.sum()


# ==============================================================================
# Engine
# ==============================================================================


def correlate(plane: np.ndarray, kernel: KernelLike) -> np.ndarray:
    """
    Weighted neighborhood sum with clamp-to-edge borders.

    For every output position accumulates
    sum(kernel[i][j] * plane[clamp(y + i - c)][clamp(x + j - c)]) where
    c = k // 2, in floating point and in kernel row-major order.

    Args:
        plane: HxW or HxWxC real array
        kernel: Square kernel

    Returns:
        float64 array with the same shape as `plane`
    """
    kernel = as_kernel(kernel)
    size = kernel.shape[0]
    center = size // 2
    height, width = plane.shape[:2]

    pad = [(center, size - 1 - center), (center, size - 1 - center)]
    pad += [(0, 0)] * (plane.ndim - 2)
    padded = np.pad(np.asarray(plane, dtype=np.float64), pad, mode="edge")

    result = np.zeros(plane.shape, dtype=np.float64)
    for ky in range(size):
        for kx in range(size):
            weight = kernel[ky, kx]
            if weight == 0:
                continue
            result += weight * padded[ky : ky + height, kx : kx + width]
    return result


def convolve(buffer: PixelBuffer, kernel: KernelLike) -> PixelBuffer:
    """
    Apply a kernel to every color channel of an image.

    Results are rounded and clamped to [0, 255]; alpha is copied from the
    source pixel.

    Args:
        buffer: Source buffer
        kernel: Square kernel (odd sizes are centered exactly)

    Returns:
        New PixelBuffer
    """
    sums = correlate(buffer.rgb, kernel)
    return buffer.with_rgb(to_uint8(sums))


# ==============================================================================
# Filters
# ==============================================================================


def box_blur(buffer: PixelBuffer, size: int = ConvolutionConstants.KERNEL_SIZE_DEFAULT) -> PixelBuffer:
    """Mean filter."""
    return convolve(buffer, box_kernel(size))


def gaussian_blur(
    buffer: PixelBuffer,
    size: int = ConvolutionConstants.KERNEL_SIZE_DEFAULT,
    sigma: float = ConvolutionConstants.GAUSSIAN_SIGMA_DEFAULT,
) -> PixelBuffer:
    """Gaussian smoothing."""
    logger.debug(f"Gaussian blur: size={size}, sigma={sigma}")
    return convolve(buffer, gaussian_kernel(size, sigma))


def sharpen(buffer: PixelBuffer) -> PixelBuffer:
    """Sharpen with the fixed 3x3 kernel [[0,-1,0],[-1,5,-1],[0,-1,0]]."""
    return convolve(buffer, SHARPEN_KERNEL)


def laplacian(buffer: PixelBuffer) -> PixelBuffer:
    """
    Laplacian edge-magnitude map.

    The signed response of [[0,1,0],[1,-4,1],[0,1,0]] is replaced by its
    absolute value before clamping, per color channel.
    """
    sums = correlate(buffer.rgb, LAPLACIAN_KERNEL)
    return buffer.with_rgb(to_uint8(np.abs(sums)))
