"""
Sample-level conversion utilities.

Handles conversions shared by every engine:
- Rounding and clamping of real-valued results to 8-bit samples
- Luminance (grayscale) reduction
- Lookup-table application
- Interop with NumPy arrays, Pillow images and OpenCV (BGR) arrays
"""

import logging
from typing import Optional, Sequence, Union

import cv2
import numpy as np
from PIL import Image

from imagelab.domain_types import LuminanceWeights
from imagelab.image.buffer import PixelBuffer

logger = logging.getLogger(__name__)


# ==============================================================================
# Rounding / clamping
# ==============================================================================


def round_half_up(values: Union[np.ndarray, float]) -> Union[np.ndarray, float]:
    """Round to the nearest integer, halves away from negative infinity."""
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Round half-up and clamp real values into uint8 samples."""
    return np.clip(round_half_up(values), 0, 255).astype(np.uint8)


# ==============================================================================
# Luminance
# ==============================================================================


def luminance(buffer: PixelBuffer) -> np.ndarray:
    """
    Reduce a buffer to a real-valued luminance matrix.

    Args:
        buffer: Source buffer

    Returns:
        HxW float64 matrix of 0.299R + 0.587G + 0.114B
    """
    rgb = buffer.rgb
    return (
        LuminanceWeights.RED * rgb[:, :, 0]
        + LuminanceWeights.GREEN * rgb[:, :, 1]
        + LuminanceWeights.BLUE * rgb[:, :, 2]
    )


def gray_levels(buffer: PixelBuffer) -> np.ndarray:
    """Luminance rounded to integer gray levels (HxW uint8)."""
    return to_uint8(luminance(buffer))


def broadcast_gray(
    buffer: PixelBuffer, gray: np.ndarray, alpha: Optional[int] = None
) -> PixelBuffer:
    """
    Build a buffer whose color channels all carry the same gray plane.

    Args:
        buffer: Buffer providing dimensions and (by default) alpha
        gray: HxW uint8 plane
        alpha: Constant alpha to use instead of the source alpha

    Returns:
        New PixelBuffer
    """
    pixels = np.empty(buffer.shape + (4,), dtype=np.uint8)
    pixels[:, :, :3] = gray[:, :, np.newaxis]
    pixels[:, :, 3] = buffer.alpha if alpha is None else alpha
    return buffer.with_pixels(pixels)


# ==============================================================================
# Lookup tables
# ==============================================================================


def apply_luts(buffer: PixelBuffer, luts: Union[np.ndarray, Sequence[np.ndarray]]) -> PixelBuffer:
    """
    Remap color samples through 256-entry lookup tables.

    Args:
        buffer: Source buffer
        luts: A single table applied to R, G and B, or one table per channel

    Returns:
        New PixelBuffer with alpha untouched
    """
    if isinstance(luts, np.ndarray) and luts.ndim == 1:
        luts = [luts, luts, luts]

    pixels = np.array(buffer.pixels)
    for channel, lut in enumerate(luts):
        table = np.asarray(lut, dtype=np.uint8)
        pixels[:, :, channel] = table[pixels[:, :, channel]]
    return buffer.with_pixels(pixels)


# ==============================================================================
# Interop
# ==============================================================================


def buffer_to_pil(buffer: PixelBuffer) -> Image.Image:
    """
    Convert a buffer to a Pillow image.

    Returns:
        PIL Image in RGBA mode
    """
    return Image.fromarray(np.array(buffer.pixels))


def buffer_from_pil(image: Image.Image) -> PixelBuffer:
    """
    Convert a Pillow image to a buffer.

    Any mode is accepted; the image is converted to RGBA first.
    """
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return PixelBuffer.from_array(np.array(image))


def buffer_from_bgr(image: np.ndarray) -> PixelBuffer:
    """
    Convert an OpenCV image to a buffer.

    Args:
        image: Grayscale, BGR or BGRA NumPy array

    Returns:
        PixelBuffer in RGBA order
    """
    if len(image.shape) == 2:
        rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    elif image.shape[2] == 4:
        rgba = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    else:
        rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    return PixelBuffer.from_array(rgba)


def buffer_to_bgr(buffer: PixelBuffer, keep_alpha: bool = False) -> np.ndarray:
    """
    Convert a buffer to an OpenCV image.

    Args:
        buffer: Source buffer
        keep_alpha: If True return BGRA, else BGR

    Returns:
        NumPy array in OpenCV channel order
    """
    code = cv2.COLOR_RGBA2BGRA if keep_alpha else cv2.COLOR_RGBA2BGR
    return cv2.cvtColor(np.ascontiguousarray(buffer.pixels), code)
