"""
Point operations (pixel-wise intensity transformations).

Every operation here remaps each color sample independently of its
neighbors and leaves alpha untouched. Intensity mappings are evaluated once
per possible input value into a 256-entry lookup table and then applied to
the whole image by indexing.

None of these operations raise on out-of-range parameters: quantization
levels and sampling factors are clamped, gamma and constants are accepted as
given and saturate instead.
"""

import logging
import math

import numpy as np

from imagelab.domain_types import PointConstants
from imagelab.image.buffer import PixelBuffer
from imagelab.image.converters import apply_luts, to_uint8
from imagelab.image.statistics import channel_histogram

logger = logging.getLogger(__name__)

_INPUT_LEVELS = np.arange(PointConstants.LEVELS, dtype=np.float64)


# ==============================================================================
# Lookup tables
# ==============================================================================


def negative_lut() -> np.ndarray:
    """s = L - 1 - r for 8-bit images."""
    return (PointConstants.MAX_VALUE - _INPUT_LEVELS).astype(np.uint8)


def gamma_lut(gamma: float, c: float = PointConstants.DEFAULT_CONSTANT) -> np.ndarray:
    """s = c * r^gamma on [0, 1], clamped, scaled back to [0, 255]."""
    normalized = _INPUT_LEVELS / PointConstants.MAX_VALUE
    with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
        transformed = c * np.power(normalized, gamma)
    transformed = np.nan_to_num(transformed, nan=0.0, posinf=1.0, neginf=0.0)
    return to_uint8(np.clip(transformed, 0.0, 1.0) * PointConstants.MAX_VALUE)


def log_lut(c: float = PointConstants.DEFAULT_CONSTANT) -> np.ndarray:
    """s = c * (255 / ln 256) * ln(1 + r)."""
    scale = PointConstants.MAX_VALUE / math.log(PointConstants.LEVELS)
    return to_uint8(c * scale * np.log1p(_INPUT_LEVELS))


def quantization_lut(levels: int) -> np.ndarray:
    """Snap each value to the nearest of `levels` evenly spaced outputs."""
    step = PointConstants.MAX_VALUE / (levels - 1)
    quantized = np.floor(_INPUT_LEVELS / step + 0.5) * step
    return to_uint8(quantized)


def equalization_lut(histogram: np.ndarray, total_pixels: int) -> np.ndarray:
    """Map each value through the normalized cumulative histogram."""
    cdf = np.cumsum(histogram)
    return to_uint8(cdf / total_pixels * PointConstants.MAX_VALUE)


# ==============================================================================
# Operations
# ==============================================================================


def negative(buffer: PixelBuffer) -> PixelBuffer:
    """
    Invert all color intensities.

    Formula: s = 255 - r. Applying it twice returns the original image.
    """
    return apply_luts(buffer, negative_lut())


def gamma_correction(
    buffer: PixelBuffer, gamma: float, c: float = PointConstants.DEFAULT_CONSTANT
) -> PixelBuffer:
    """
    Power-law (gamma) transformation.

    Formula: s = c * r^gamma

    - gamma < 1: brightens (expands dark tones)
    - gamma > 1: darkens (compresses dark tones)

    Args:
        buffer: Source buffer
        gamma: Exponent (> 0)
        c: Scaling constant

    Returns:
        New PixelBuffer
    """
    logger.debug(f"Gamma correction: gamma={gamma}, c={c}")
    return apply_luts(buffer, gamma_lut(gamma, c))


def log_transform(buffer: PixelBuffer, c: float = PointConstants.DEFAULT_CONSTANT) -> PixelBuffer:
    """
    Logarithmic transformation.

    Formula: s = c * (255 / ln 256) * ln(1 + r). Expands dark values while
    compressing bright ones; r = 0 maps to 0.
    """
    logger.debug(f"Log transform: c={c}")
    return apply_luts(buffer, log_lut(c))


def clamp_levels(levels: int) -> int:
    return max(
        PointConstants.MIN_QUANTIZATION_LEVELS,
        min(PointConstants.MAX_QUANTIZATION_LEVELS, int(levels)),
    )


def quantize(buffer: PixelBuffer, levels: int) -> PixelBuffer:
    """
    Reduce the number of intensity levels.

    Simulates reduced bit depth and produces the false-contour effect.

    Args:
        buffer: Source buffer
        levels: Number of output levels, clamped silently to [2, 256]

    Returns:
        New PixelBuffer with at most `levels` distinct color values
    """
    levels = clamp_levels(levels)
    logger.debug(f"Quantize: levels={levels}")
    return apply_luts(buffer, quantization_lut(levels))


def clamp_sampling_factor(factor: float) -> int:
    rounded = int(math.floor(float(factor) + 0.5))
    return max(
        PointConstants.MIN_SAMPLING_FACTOR, min(PointConstants.MAX_SAMPLING_FACTOR, rounded)
    )


def subsample(buffer: PixelBuffer, factor: float) -> PixelBuffer:
    """
    Reduce spatial resolution (pixelation).

    Each factor x factor block takes the color of its top-left pixel; blocks
    cut by the right or bottom edge are included.

    Args:
        buffer: Source buffer
        factor: Block size, rounded and clamped to [1, 32]

    Returns:
        New PixelBuffer
    """
    factor = clamp_sampling_factor(factor)
    rows = (np.arange(buffer.height) // factor) * factor
    cols = (np.arange(buffer.width) // factor) * factor
    rgb = buffer.pixels[:, :, :3][rows[:, np.newaxis], cols[np.newaxis, :]]
    return buffer.with_rgb(rgb)


def equalize_histogram(buffer: PixelBuffer) -> PixelBuffer:
    """
    Histogram equalization, per color channel.

    Formula: s_k = (L - 1) * sum(p_r(r_j)) for j = 0..k

    Spreads out the most frequent intensity values; a uniform image maps
    every sample to one single value.
    """
    total_pixels = buffer.width * buffer.height
    pixels = buffer.pixels
    luts = [
        equalization_lut(channel_histogram(pixels[:, :, channel]), total_pixels)
        for channel in range(3)
    ]
    return apply_luts(buffer, luts)
