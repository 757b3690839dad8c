"""
Pixel buffer - the canonical image representation.

Every engine takes a PixelBuffer by read-only reference and returns a freshly
allocated one. Samples are stored as a flat, read-only uint8 array of length
width * height * 4, RGBA interleaved, row-major, with no row padding.
"""

import logging
from typing import Sequence, Tuple, Union

import numpy as np

from imagelab.exceptions import InvalidBufferError

logger = logging.getLogger(__name__)

CHANNELS = 4


class PixelBuffer:
    """Immutable RGBA image of 8-bit samples."""

    __slots__ = ("_width", "_height", "_samples")

    def __init__(self, width: int, height: int, samples: Union[bytes, Sequence[int], np.ndarray]):
        """
        Create a buffer from raw interleaved samples.

        Args:
            width: Image width in pixels (>= 1)
            height: Image height in pixels (>= 1)
            samples: width * height * 4 values in [0, 255], RGBA order

        Raises:
            InvalidBufferError: If dimensions or sample length are invalid
        """
        width = int(width)
        height = int(height)
        if width < 1 or height < 1:
            raise InvalidBufferError("width and height must be at least 1", width, height)

        if isinstance(samples, (bytes, bytearray, memoryview)):
            array = np.frombuffer(bytes(samples), dtype=np.uint8)
        else:
            raw = np.asarray(samples)
            if raw.size and (raw.min() < 0 or raw.max() > 255):
                raise InvalidBufferError("samples must lie in [0, 255]", width, height)
            array = raw.astype(np.uint8).reshape(-1)

        expected = width * height * CHANNELS
        if array.size != expected:
            raise InvalidBufferError(
                f"expected {expected} samples, got {array.size}", width, height
            )

        array = array.copy()
        array.setflags(write=False)
        self._width = width
        self._height = height
        self._samples = array

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """
        Build a buffer from an image array.

        Accepts HxWx4 (RGBA), HxWx3 (RGB, alpha set to 255) or HxW (gray,
        broadcast to RGB, alpha set to 255).
        """
        array = np.asarray(array)
        if array.ndim == 2:
            array = np.repeat(array[:, :, np.newaxis], 3, axis=2)

        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise InvalidBufferError(f"unsupported array shape {array.shape}")

        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            # Range is checked by __init__ on the promoted array
            array = np.concatenate([array, alpha], axis=2)

        height, width = array.shape[:2]
        return cls(width, height, array)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "PixelBuffer":
        """Build a buffer from raw RGBA bytes."""
        return cls(width, height, data)

    @classmethod
    def filled(
        cls, width: int, height: int, rgba: Tuple[int, int, int, int] = (0, 0, 0, 255)
    ) -> "PixelBuffer":
        """Build a buffer where every pixel has the same RGBA value."""
        pixels = np.empty((int(height), int(width), CHANNELS), dtype=np.uint8)
        pixels[:, :] = rgba
        return cls(width, height, pixels)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width), matching NumPy image conventions."""
        return (self._height, self._width)

    @property
    def samples(self) -> np.ndarray:
        """Flat read-only sample array."""
        return self._samples

    @property
    def pixels(self) -> np.ndarray:
        """Read-only HxWx4 view of the samples."""
        return self._samples.reshape(self._height, self._width, CHANNELS)

    @property
    def rgb(self) -> np.ndarray:
        """Color channels as a float64 HxWx3 copy."""
        return self.pixels[:, :, :3].astype(np.float64)

    @property
    def alpha(self) -> np.ndarray:
        """Alpha channel as a read-only HxW view."""
        return self.pixels[:, :, 3]

    def to_bytes(self) -> bytes:
        return self._samples.tobytes()

    def with_rgb(self, rgb: np.ndarray) -> "PixelBuffer":
        """
        New buffer of the same size with the given color channels and this
        buffer's alpha.

        Args:
            rgb: HxWx3 array, already rounded and clamped to [0, 255]
        """
        pixels = np.empty((self._height, self._width, CHANNELS), dtype=np.uint8)
        pixels[:, :, :3] = rgb
        pixels[:, :, 3] = self.alpha
        return PixelBuffer(self._width, self._height, pixels)

    def with_pixels(self, pixels: np.ndarray) -> "PixelBuffer":
        """New buffer of the same size from a full HxWx4 array."""
        return PixelBuffer(self._width, self._height, pixels)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self._width, self._height, self._samples)

    # ------------------------------------------------------------------
    # Dunder helpers
    # ------------------------------------------------------------------

    def __eq__(self, other) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self._width == other._width
            and self._height == other._height
            and np.array_equal(self._samples, other._samples)
        )

    def __hash__(self):
        return hash((self._width, self._height, self._samples.tobytes()))

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self._width}, height={self._height})"
