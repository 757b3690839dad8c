"""
Histogram and intensity statistics.

Both scans read the buffer once and are never persisted; the histogram feeds
equalization and external display.
"""

import logging

import numpy as np

from imagelab.domain_types import HistogramData, ImageStatistics, PointConstants
from imagelab.image.buffer import PixelBuffer
from imagelab.image.converters import gray_levels

logger = logging.getLogger(__name__)


def channel_histogram(plane: np.ndarray) -> np.ndarray:
    """256-bin frequency count of a uint8 plane."""
    return np.bincount(plane.reshape(-1), minlength=PointConstants.LEVELS)


def calculate_histogram(buffer: PixelBuffer) -> HistogramData:
    """
    Calculate the histogram of an image.

    Args:
        buffer: Source buffer

    Returns:
        HistogramData with 256 counts for R, G, B and rounded luminance
    """
    pixels = buffer.pixels
    return HistogramData(
        r=channel_histogram(pixels[:, :, 0]).tolist(),
        g=channel_histogram(pixels[:, :, 1]).tolist(),
        b=channel_histogram(pixels[:, :, 2]).tolist(),
        gray=channel_histogram(gray_levels(buffer)).tolist(),
    )


def calculate_image_statistics(buffer: PixelBuffer) -> ImageStatistics:
    """
    Calculate statistics of the rounded luminance of an image.

    Computes mean, population variance, standard deviation, Shannon entropy
    H = -sum(p(i) * log2(p(i))) over the gray histogram, and the intensity
    range. Real-valued measures are rounded to two decimals.

    Args:
        buffer: Source buffer

    Returns:
        ImageStatistics
    """
    gray = gray_levels(buffer).astype(np.float64)
    pixel_count = buffer.width * buffer.height

    mean = gray.sum() / pixel_count
    variance = ((gray - mean) ** 2).sum() / pixel_count
    std_dev = np.sqrt(variance)

    histogram = channel_histogram(gray.astype(np.uint8))
    probabilities = histogram[histogram > 0] / pixel_count
    entropy = float(-(probabilities * np.log2(probabilities)).sum())

    return ImageStatistics(
        mean=round(float(mean), 2),
        variance=round(float(variance), 2),
        std_dev=round(float(std_dev), 2),
        entropy=round(entropy, 2),
        min=int(gray.min()),
        max=int(gray.max()),
        pixel_count=pixel_count,
    )
