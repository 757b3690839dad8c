"""
Algorithms Package

Image processing engines. Every operation takes a PixelBuffer and returns a
new one; inputs are never modified.

Modules:
- point_operations: LUT-driven intensity transforms
- convolution: kernel synthesis and clamp-to-edge convolution
- edge_detection: Sobel operators
- noise_reduction: median filter
- color_filters: grayscale, sepia, channel swap
- morphology: threshold, erosion, dilation, opening, closing
- fft: 2D FFT magnitude spectrum
- formula: safe per-pixel formula evaluator
- custom_filters: user kernels and formulas
- filter_steps: step-by-step breakdown of selected filters
"""

from .color_filters import grayscale, sepia, swap_channels
from .convolution import (
    box_blur,
    box_kernel,
    convolve,
    gaussian_blur,
    gaussian_kernel,
    laplacian,
    sharpen,
)
from .custom_filters import PRESET_KERNELS, apply_custom_kernel, create_empty_kernel
from .edge_detection import sobel, sobel_magnitude, sobel_x, sobel_y
from .fft import fft1d, fft2d, fft_shift, fft_spectrum, magnitude_spectrum, next_power_of_two
from .filter_steps import FilterStep, StepInfo, get_step_info, process_filter_step
from .formula import (
    FormulaValidation,
    apply_custom_formula,
    evaluate_formula,
    parse_formula,
    validate_formula,
)
from .morphology import CROSS_ELEMENT, SQUARE_ELEMENT, closing, dilation, erosion, opening, threshold
from .noise_reduction import median_filter
from .point_operations import (
    equalize_histogram,
    gamma_correction,
    log_transform,
    negative,
    quantize,
    subsample,
)

__all__ = [
    # Point operations
    "negative",
    "gamma_correction",
    "log_transform",
    "quantize",
    "subsample",
    "equalize_histogram",
    # Convolution
    "box_kernel",
    "gaussian_kernel",
    "convolve",
    "box_blur",
    "gaussian_blur",
    "sharpen",
    "laplacian",
    # Edge detection
    "sobel",
    "sobel_x",
    "sobel_y",
    "sobel_magnitude",
    # Noise reduction
    "median_filter",
    # Color filters
    "grayscale",
    "sepia",
    "swap_channels",
    # Morphology
    "SQUARE_ELEMENT",
    "CROSS_ELEMENT",
    "threshold",
    "erosion",
    "dilation",
    "opening",
    "closing",
    # Frequency domain
    "next_power_of_two",
    "fft1d",
    "fft2d",
    "fft_shift",
    "magnitude_spectrum",
    "fft_spectrum",
    # Custom filters
    "FormulaValidation",
    "parse_formula",
    "validate_formula",
    "evaluate_formula",
    "apply_custom_formula",
    "apply_custom_kernel",
    "create_empty_kernel",
    "PRESET_KERNELS",
    # Step-by-step
    "StepInfo",
    "FilterStep",
    "get_step_info",
    "process_filter_step",
]
