"""
Step-by-step mode.

Breaks selected filters into their intermediate stages so each stage can be
shown with a title, a description and its formula (LaTeX).
"""

import logging
from typing import Dict, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict

from imagelab.algorithms import morphology
from imagelab.algorithms.convolution import LAPLACIAN_KERNEL, correlate
from imagelab.algorithms.edge_detection import SOBEL_X, SOBEL_Y
from imagelab.algorithms.morphology import dilation, erosion
from imagelab.algorithms.point_operations import equalize_histogram
from imagelab.domain_types import FilterType, MorphologyConstants
from imagelab.image.buffer import PixelBuffer
from imagelab.image.converters import broadcast_gray, gray_levels, to_uint8

logger = logging.getLogger(__name__)

LUMINANCE_FORMULA = "Y = 0.299R + 0.587G + 0.114B"
THRESHOLD_FORMULA = "s = \\begin{cases} 255 & r \\geq T \\\\ 0 & r < T \\end{cases}"

STEP_NAMES: Dict[FilterType, List[str]] = {
    FilterType.SOBEL_MAGNITUDE: ["Grayscale", "Sobel X", "Sobel Y", "Magnitude"],
    FilterType.EQUALIZATION: ["Original Histogram", "Calculate CDF", "Apply Mapping"],
    FilterType.OPENING: ["Binarization", "Erosion", "Dilation"],
    FilterType.CLOSING: ["Binarization", "Dilation", "Erosion"],
    FilterType.LAPLACIAN: ["Grayscale", "Laplacian"],
}


class StepInfo(BaseModel):
    """Which steps a filter can be broken into."""

    filter: FilterType
    supported: bool
    total_steps: int
    step_names: List[str]


class FilterStep(BaseModel):
    """One intermediate stage of a filter."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    step_number: int
    total_steps: int
    title: str
    description: str
    formula: Optional[str] = None
    buffer: PixelBuffer


def get_step_info(filter_type: FilterType) -> StepInfo:
    """Describe the step-by-step breakdown available for a filter."""
    filter_type = FilterType(filter_type)
    names = STEP_NAMES.get(filter_type)
    if names is None:
        return StepInfo(filter=filter_type, supported=False, total_steps=1, step_names=["Full Processing"])
    return StepInfo(filter=filter_type, supported=True, total_steps=len(names), step_names=list(names))


# ==============================================================================
# Helpers
# ==============================================================================


def _gray_plane(buffer: PixelBuffer) -> Tuple[PixelBuffer, np.ndarray]:
    levels = gray_levels(buffer)
    return broadcast_gray(buffer, levels), levels.astype(np.float64)


def _clamped_abs(plane: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    return np.minimum(255.0, np.abs(correlate(plane, kernel)))


# ==============================================================================
# Per-filter steps
# ==============================================================================


def _sobel_magnitude_step(buffer: PixelBuffer, step: int, total: int) -> FilterStep:
    gray_image, gray = _gray_plane(buffer)

    if step == 1:
        return FilterStep(
            step_number=1,
            total_steps=total,
            title="Step 1: Grayscale Conversion",
            description=f"Converting image to grayscale using luminance formula: {LUMINANCE_FORMULA}",
            formula=LUMINANCE_FORMULA,
            buffer=gray_image,
        )
    if step == 2:
        return FilterStep(
            step_number=2,
            total_steps=total,
            title="Step 2: Sobel X (Horizontal Gradient)",
            description="Applying Sobel X kernel to detect vertical edges. "
            "This highlights left-to-right intensity changes.",
            formula="G_x = \\begin{bmatrix} -1 & 0 & 1 \\\\ -2 & 0 & 2 \\\\ -1 & 0 & 1 \\end{bmatrix} * I",
            buffer=broadcast_gray(buffer, to_uint8(_clamped_abs(gray, SOBEL_X))),
        )
    if step == 3:
        return FilterStep(
            step_number=3,
            total_steps=total,
            title="Step 3: Sobel Y (Vertical Gradient)",
            description="Applying Sobel Y kernel to detect horizontal edges. "
            "This highlights top-to-bottom intensity changes.",
            formula="G_y = \\begin{bmatrix} -1 & -2 & -1 \\\\ 0 & 0 & 0 \\\\ 1 & 2 & 1 \\end{bmatrix} * I",
            buffer=broadcast_gray(buffer, to_uint8(_clamped_abs(gray, SOBEL_Y))),
        )

    # Combines the displayed (already clamped) gradients
    gx = _clamped_abs(gray, SOBEL_X)
    gy = _clamped_abs(gray, SOBEL_Y)
    magnitude = np.sqrt(gx * gx + gy * gy)
    return FilterStep(
        step_number=4,
        total_steps=total,
        title="Step 4: Gradient Magnitude",
        description="Combining both gradients using the magnitude formula. "
        "This produces the final edge map.",
        formula="G = \\sqrt{G_x^2 + G_y^2}",
        buffer=broadcast_gray(buffer, to_uint8(magnitude), alpha=255),
    )


def _equalization_step(buffer: PixelBuffer, step: int, total: int) -> FilterStep:
    if step == 1:
        return FilterStep(
            step_number=1,
            total_steps=total,
            title="Step 1: Original Histogram",
            description="Counting how many pixels hold each intensity level in every channel.",
            formula="h(r_k) = n_k",
            buffer=buffer.copy(),
        )
    if step == 2:
        return FilterStep(
            step_number=2,
            total_steps=total,
            title="Step 2: Calculate CDF",
            description="Accumulating the histogram into a cumulative distribution, "
            "which becomes the intensity mapping.",
            formula="cdf(r_k) = \\sum_{j=0}^{k} h(r_j)",
            buffer=buffer.copy(),
        )
    return FilterStep(
        step_number=3,
        total_steps=total,
        title="Step 3: Apply Mapping",
        description="Remapping every sample through the normalized CDF. "
        "Intensities spread over the full range.",
        formula="s_k = (L - 1) \\frac{cdf(r_k)}{N}",
        buffer=equalize_histogram(buffer),
    )


def _binarization_step(binary: PixelBuffer, value: float, total: int) -> FilterStep:
    return FilterStep(
        step_number=1,
        total_steps=total,
        title="Step 1: Binarization",
        description=f"Converting to binary image using threshold T = {value}. "
        "Pixels >= T become white, others become black.",
        formula=THRESHOLD_FORMULA,
        buffer=binary,
    )


def _opening_step(buffer: PixelBuffer, step: int, total: int, value: float) -> FilterStep:
    binary = morphology.threshold(buffer, value)
    if step == 1:
        return _binarization_step(binary, value, total)
    if step == 2:
        return FilterStep(
            step_number=2,
            total_steps=total,
            title="Step 2: Erosion",
            description="Applying erosion with 3x3 structuring element. "
            "This shrinks white regions and removes small white noise.",
            formula="A \\ominus B",
            buffer=erosion(binary),
        )
    return FilterStep(
        step_number=3,
        total_steps=total,
        title="Step 3: Dilation",
        description="Applying dilation to the eroded image. "
        "This restores object size while keeping noise removed.",
        formula="(A \\ominus B) \\oplus B",
        buffer=dilation(erosion(binary)),
    )


def _closing_step(buffer: PixelBuffer, step: int, total: int, value: float) -> FilterStep:
    binary = morphology.threshold(buffer, value)
    if step == 1:
        return _binarization_step(binary, value, total)
    if step == 2:
        return FilterStep(
            step_number=2,
            total_steps=total,
            title="Step 2: Dilation",
            description="Applying dilation with 3x3 structuring element. "
            "This expands white regions and fills small black holes.",
            formula="A \\oplus B",
            buffer=dilation(binary),
        )
    return FilterStep(
        step_number=3,
        total_steps=total,
        title="Step 3: Erosion",
        description="Applying erosion to the dilated image. "
        "This restores object size while keeping holes filled.",
        formula="(A \\oplus B) \\ominus B",
        buffer=erosion(dilation(binary)),
    )


def _laplacian_step(buffer: PixelBuffer, step: int, total: int) -> FilterStep:
    gray_image, gray = _gray_plane(buffer)
    if step == 1:
        return FilterStep(
            step_number=1,
            total_steps=total,
            title="Step 1: Grayscale Conversion",
            description="Converting image to grayscale for edge detection.",
            formula=LUMINANCE_FORMULA,
            buffer=gray_image,
        )
    edges = to_uint8(_clamped_abs(gray, LAPLACIAN_KERNEL))
    return FilterStep(
        step_number=2,
        total_steps=total,
        title="Step 2: Laplacian Edge Detection",
        description="Applying Laplacian operator to find edges by detecting zero-crossings "
        "in second derivative.",
        formula="\\nabla^2 f = \\frac{\\partial^2 f}{\\partial x^2} + \\frac{\\partial^2 f}{\\partial y^2}",
        buffer=broadcast_gray(buffer, edges, alpha=255),
    )


# ==============================================================================
# Entry point
# ==============================================================================


def process_filter_step(
    buffer: PixelBuffer,
    filter_type: FilterType,
    step: int,
    threshold: float = MorphologyConstants.THRESHOLD_DEFAULT,
) -> FilterStep:
    """
    Run a filter up to a given step.

    Args:
        buffer: Source buffer
        filter_type: Filter to break down
        step: 1-based step number, clamped into [1, total_steps]
        threshold: Binarization threshold for opening/closing

    Returns:
        FilterStep with the intermediate image
    """
    info = get_step_info(filter_type)
    step = max(1, min(info.total_steps, int(step)))
    logger.debug(f"Step {step}/{info.total_steps} of {info.filter.value}")

    if info.filter == FilterType.SOBEL_MAGNITUDE:
        return _sobel_magnitude_step(buffer, step, info.total_steps)
    if info.filter == FilterType.EQUALIZATION:
        return _equalization_step(buffer, step, info.total_steps)
    if info.filter == FilterType.OPENING:
        return _opening_step(buffer, step, info.total_steps, threshold)
    if info.filter == FilterType.CLOSING:
        return _closing_step(buffer, step, info.total_steps, threshold)
    if info.filter == FilterType.LAPLACIAN:
        return _laplacian_step(buffer, step, info.total_steps)

    # Imported here: the service module depends on this one
    from imagelab.services.filter_service import FilterService

    result = FilterService().process(buffer, info.filter)
    return FilterStep(
        step_number=1,
        total_steps=1,
        title="Processing",
        description=f"Applying {info.filter.value} in a single pass.",
        buffer=result.buffer,
    )
