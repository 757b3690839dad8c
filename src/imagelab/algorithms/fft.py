"""
Fast Fourier Transform for frequency analysis.

Produces a viewable magnitude spectrum of an image:

1. Luminance reduction
2. Zero padding of each dimension to the next power of two
3. 2D FFT (1D transform over every row, then every column)
4. Quadrant shift so the zero frequency sits at the center
5. log(1 + |F|) scaling normalized to [0, 255]
6. Centered crop back to the original size, fully opaque

The 1D transform is an iterative radix-2 Cooley-Tukey (bit-reversal
permutation followed by butterfly passes) applied along the last axis of an
array, so all rows (or columns) of a matrix are transformed at once.
"""

import logging

import numpy as np

from imagelab.domain_types import FFTConstants
from imagelab.exceptions import FFTLengthError
from imagelab.image.buffer import PixelBuffer
from imagelab.image.converters import broadcast_gray, luminance, to_uint8

logger = logging.getLogger(__name__)


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


def _is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def _bit_reversal_indices(n: int) -> np.ndarray:
    bits = n.bit_length() - 1
    indices = np.arange(n)
    reversed_indices = np.zeros(n, dtype=np.int64)
    for bit in range(bits):
        reversed_indices |= ((indices >> bit) & 1) << (bits - 1 - bit)
    return reversed_indices


# ==============================================================================
# Transforms
# ==============================================================================


def fft1d(values: np.ndarray) -> np.ndarray:
    """
    Radix-2 FFT along the last axis.

    Args:
        values: Real or complex array whose last axis has power-of-two length

    Returns:
        New complex128 array of the same shape

    Raises:
        FFTLengthError: If the last axis is not a power of two
    """
    data = np.asarray(values, dtype=np.complex128)
    n = data.shape[-1]
    if n <= 1:
        return data.copy()
    if not _is_power_of_two(n):
        raise FFTLengthError(n)

    # Fancy indexing copies, so the butterflies below never touch the input.
    # Contiguity keeps the per-stage reshape a view.
    data = np.ascontiguousarray(data[..., _bit_reversal_indices(n)])

    size = 2
    while size <= n:
        half = size // 2
        angle = -2.0 * np.pi * np.arange(half) / size
        twiddle = np.cos(angle) + 1j * np.sin(angle)

        blocks = data.reshape(data.shape[:-1] + (n // size, size))
        even = blocks[..., :half].copy()
        odd = blocks[..., half:] * twiddle
        blocks[..., :half] = even + odd
        blocks[..., half:] = even - odd
        size *= 2

    return data


def fft2d(matrix: np.ndarray) -> np.ndarray:
    """
    2D FFT by separability: rows first, then columns.

    Args:
        matrix: 2D array with power-of-two dimensions

    Returns:
        Complex coefficient matrix
    """
    rows_done = fft1d(matrix)
    return fft1d(rows_done.T).T


def fft_shift(spectrum: np.ndarray) -> np.ndarray:
    """
    Move the zero-frequency component to the center.

    Output[i][j] takes input[(i + rows // 2) % rows][(j + cols // 2) % cols].
    """
    rows, cols = spectrum.shape
    row_index = (np.arange(rows) + rows // 2) % rows
    col_index = (np.arange(cols) + cols // 2) % cols
    return spectrum[np.ix_(row_index, col_index)]


def magnitude_spectrum(spectrum: np.ndarray) -> np.ndarray:
    """
    Log-scaled magnitude normalized to [0, 255].

    Args:
        spectrum: Complex coefficient matrix

    Returns:
        float64 matrix; all zeros when every coefficient is zero
    """
    magnitudes = np.log1p(np.abs(spectrum))
    peak = magnitudes.max()
    if peak <= 0:
        return np.zeros(magnitudes.shape, dtype=np.float64)
    return magnitudes / peak * 255.0


# ==============================================================================
# Visualization
# ==============================================================================


def fft_spectrum(buffer: PixelBuffer) -> PixelBuffer:
    """
    Compute the centered magnitude spectrum of an image.

    Args:
        buffer: Source buffer

    Returns:
        Same-size gray PixelBuffer with alpha 255
    """
    gray = luminance(buffer)
    height, width = gray.shape
    padded_height = next_power_of_two(height)
    padded_width = next_power_of_two(width)

    padded = np.pad(gray, [(0, padded_height - height), (0, padded_width - width)], mode="constant")
    spectrum = fft_shift(fft2d(padded))
    normalized = magnitude_spectrum(spectrum)

    offset_y = (padded_height - height) // 2
    offset_x = (padded_width - width) // 2
    cropped = normalized[offset_y : offset_y + height, offset_x : offset_x + width]

    logger.debug(
        f"FFT spectrum: {width}x{height} padded to {padded_width}x{padded_height}"
    )
    return broadcast_gray(buffer, to_uint8(cropped), alpha=FFTConstants.SPECTRUM_ALPHA)
