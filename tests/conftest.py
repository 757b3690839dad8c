"""
Pytest configuration and fixtures for ImageLab tests
"""

import cv2
import numpy as np
import pytest

from imagelab.config import Settings
from imagelab.image.buffer import PixelBuffer
from imagelab.image.converters import buffer_from_bgr


@pytest.fixture
def test_image():
    """Create a BGR test image with a few shapes"""
    image = np.zeros((48, 64, 3), dtype=np.uint8)
    cv2.rectangle(image, (8, 8), (30, 30), (64, 128, 255), -1)
    cv2.circle(image, (46, 30), 10, (128, 128, 128), -1)
    return image


@pytest.fixture
def color_buffer(test_image):
    """Opaque RGBA buffer built from the BGR test image"""
    return buffer_from_bgr(test_image)


@pytest.fixture
def random_buffer():
    """Random RGBA buffer, including random alpha"""
    rng = np.random.default_rng(42)
    pixels = rng.integers(0, 256, size=(17, 23, 4), dtype=np.uint8)
    return PixelBuffer.from_array(pixels)


@pytest.fixture
def gradient_buffer():
    """Horizontal gray ramp 0..255 over 256 columns, 4 rows"""
    ramp = np.tile(np.arange(256, dtype=np.uint8), (4, 1))
    return PixelBuffer.from_array(ramp)


@pytest.fixture
def binary_buffer():
    """Binary image: white square, an isolated white pixel and a one-pixel hole"""
    image = np.zeros((20, 20), dtype=np.uint8)
    cv2.rectangle(image, (4, 4), (13, 13), 255, -1)
    image[8, 8] = 0  # hole inside the square
    image[17, 2] = 255  # isolated pixel
    return PixelBuffer.from_array(image)


@pytest.fixture
def settings():
    """Settings isolated from the environment and config files"""
    return Settings(environment="test")
