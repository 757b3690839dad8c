"""
ImageLab - educational image processing toolkit.

Pixel-level algorithms applied to RGBA pixel buffers: point operations,
convolution filters, binary morphology, FFT spectrum and custom per-pixel
formulas.

Example:
    >>> from imagelab import FilterService, FilterType, PixelBuffer
    >>> buffer = PixelBuffer.filled(4, 4, (200, 100, 50, 255))
    >>> FilterService().process(buffer, FilterType.NEGATIVE).buffer.pixels[0, 0]
    array([ 55, 155, 205, 255], dtype=uint8)
"""

__version__ = "1.0.0"

from imagelab.config import Settings, get_settings, reload_settings
from imagelab.domain_types import FilterType
from imagelab.exceptions import (
    ConfigurationError,
    FFTLengthError,
    FormulaSyntaxError,
    ImageLabError,
    InvalidBufferError,
    InvalidKernelError,
    ProcessingError,
)
from imagelab.image.buffer import PixelBuffer
from imagelab.schemas.params import FilterParams
from imagelab.services.filter_service import FilterService, ProcessingResult
from imagelab.utils import configure_logging

__all__ = [
    "__version__",
    "PixelBuffer",
    "FilterType",
    "FilterParams",
    "FilterService",
    "ProcessingResult",
    "Settings",
    "get_settings",
    "reload_settings",
    "configure_logging",
    "ImageLabError",
    "InvalidBufferError",
    "InvalidKernelError",
    "FormulaSyntaxError",
    "FFTLengthError",
    "ProcessingError",
    "ConfigurationError",
]
