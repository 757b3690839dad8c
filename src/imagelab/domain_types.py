"""
Central types module for the image processing toolkit.

This module consolidates the fundamental types, enums, and constants used
throughout the package. It has no dependencies on other project modules
(only stdlib and Pydantic).

Contents:
- Enums: FilterType, SobelDirection, NeighborType, DistanceMetric
- Constants: parameter ranges and fixed weights organized by engine
- Models: PixelInfo, NeighborPixel, HistogramData, ImageStatistics

IMPORTANT: This module must NOT import from image, algorithms, schemas or
services to avoid circular dependencies.
"""

from __future__ import annotations

from enum import Enum
from typing import List

from pydantic import BaseModel, Field

# ==============================================================================
# Enums
# ==============================================================================


class FilterType(str, Enum):
    """Available filters, one per engine operation."""

    NONE = "none"

    # Point operations
    NEGATIVE = "negative"
    GAMMA = "gamma"
    LOG = "log"
    QUANTIZATION = "quantization"
    SAMPLING = "sampling"
    EQUALIZATION = "equalization"

    # Spatial filters
    BOX_BLUR = "box_blur"
    GAUSSIAN_BLUR = "gaussian_blur"
    SHARPEN = "sharpen"
    LAPLACIAN = "laplacian"

    # Edge detection
    SOBEL_X = "sobel_x"
    SOBEL_Y = "sobel_y"
    SOBEL_MAGNITUDE = "sobel_magnitude"

    # Noise reduction
    MEDIAN = "median"

    # Color filters
    GRAYSCALE = "grayscale"
    SEPIA = "sepia"
    SWAP_CHANNELS = "swap_channels"

    # Morphology
    THRESHOLD = "threshold"
    EROSION = "erosion"
    DILATION = "dilation"
    OPENING = "opening"
    CLOSING = "closing"

    # Custom operations
    CUSTOM_FORMULA = "custom_formula"
    CUSTOM_KERNEL = "custom_kernel"

    # Frequency domain
    FFT_SPECTRUM = "fft_spectrum"


class SobelDirection(str, Enum):
    """Which Sobel response to emit."""

    X = "x"
    Y = "y"
    MAGNITUDE = "magnitude"


class NeighborType(str, Enum):
    """
    Pixel neighborhood connectivity.

    - N4: 4-connected (horizontal and vertical neighbors)
    - ND: diagonal neighbors only
    - N8: 8-connected (all surrounding pixels)
    """

    N4 = "N4"
    ND = "ND"
    N8 = "N8"


class DistanceMetric(str, Enum):
    """Distance metrics between pixel positions."""

    EUCLIDEAN = "euclidean"
    CITY_BLOCK = "city_block"
    CHESSBOARD = "chessboard"


# ==============================================================================
# Constants
# ==============================================================================


class LuminanceWeights:
    """ITU-R BT.601 weights used for every RGB to gray reduction."""

    RED = 0.299
    GREEN = 0.587
    BLUE = 0.114


class PointConstants:
    """Constants for point (per-sample) operations."""

    LEVELS = 256
    MAX_VALUE = 255

    MIN_QUANTIZATION_LEVELS = 2
    MAX_QUANTIZATION_LEVELS = 256
    DEFAULT_QUANTIZATION_LEVELS = 8

    MIN_SAMPLING_FACTOR = 1
    MAX_SAMPLING_FACTOR = 32
    DEFAULT_SAMPLING_FACTOR = 4

    DEFAULT_GAMMA = 1.0
    DEFAULT_CONSTANT = 1.0


class ConvolutionConstants:
    """Constants for kernel synthesis and neighborhood filters."""

    KERNEL_SIZE_DEFAULT = 3
    KERNEL_SIZE_MIN = 1
    KERNEL_SIZE_MAX = 31

    GAUSSIAN_SIGMA_DEFAULT = 1.0
    GAUSSIAN_SIGMA_MIN = 0.1


class MorphologyConstants:
    """Constants for thresholding and binary morphology."""

    THRESHOLD_DEFAULT = 128
    THRESHOLD_MIN = 0
    THRESHOLD_MAX = 255

    FOREGROUND = 255
    BACKGROUND = 0


class FFTConstants:
    """Constants for the frequency-domain engine."""

    SPECTRUM_ALPHA = 255


class InspectionConstants:
    """Constants for pixel inspection tooling."""

    NEIGHBORHOOD_RADIUS_DEFAULT = 5
    NEIGHBORHOOD_RADIUS_MAX = 50


# ==============================================================================
# Data Models
# ==============================================================================


class PixelInfo(BaseModel):
    """Detailed information about a single pixel."""

    x: int
    y: int
    r: int
    g: int
    b: int
    a: int
    gray: int
    hex: str


class NeighborPixel(BaseModel):
    """Pixel of a neighborhood, addressed relative to its center."""

    x: int = Field(..., description="Offset from the center column")
    y: int = Field(..., description="Offset from the center row")
    r: int
    g: int
    b: int


class HistogramData(BaseModel):
    """Frequency distribution for each color channel plus luminance."""

    r: List[int]
    g: List[int]
    b: List[int]
    gray: List[int]


class ImageStatistics(BaseModel):
    """Statistical measures of the luminance of an image."""

    mean: float
    variance: float
    std_dev: float
    entropy: float = Field(..., description="Entropy in bits (0-8 for 8-bit images)")
    min: int
    max: int
    pixel_count: int
