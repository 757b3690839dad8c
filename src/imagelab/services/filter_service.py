"""
Filter Service - dispatch of a filter selection to its engine.

Each filter is a FilterOperation strategy that maps FilterParams onto one
engine call. The service looks the strategy up, times it, and turns
unexpected engine failures into ProcessingError.

Usage:
    service = FilterService()
    result = service.process(buffer, FilterType.GAUSSIAN_BLUR, FilterParams(kernel_size=5))
    print(result.processing_time_ms)
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict

from imagelab.algorithms import (
    color_filters,
    convolution,
    custom_filters,
    edge_detection,
    fft,
    morphology,
    noise_reduction,
    point_operations,
)
from imagelab.algorithms.filter_steps import FilterStep, StepInfo, get_step_info, process_filter_step
from imagelab.config import Settings
from imagelab.domain_types import FilterType
from imagelab.exceptions import FFTLengthError, ProcessingError
from imagelab.image.buffer import PixelBuffer
from imagelab.schemas.params import FilterParams
from imagelab.utils import timer

logger = logging.getLogger(__name__)


class ProcessingResult(BaseModel):
    """Output of a single filter run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    filter: FilterType
    buffer: PixelBuffer
    processing_time_ms: float


# ==============================================================================
# Strategies
# ==============================================================================


class FilterOperation(ABC):
    """Abstract base class for filter strategies."""

    @abstractmethod
    def apply(self, buffer: PixelBuffer, params: FilterParams) -> PixelBuffer:
        """
        Apply the filter.

        Args:
            buffer: Input buffer
            params: Filter parameters

        Returns:
            Processed buffer
        """
        pass

    @property
    @abstractmethod
    def filter_type(self) -> FilterType:
        """Filter handled by this strategy."""
        pass

    @property
    def name(self) -> str:
        return self.filter_type.value


class SimpleOperation(FilterOperation):
    """Filter that takes no parameters."""

    def __init__(self, filter_type: FilterType, fn: Callable[[PixelBuffer], PixelBuffer]):
        self._filter_type = filter_type
        self._fn = fn

    def apply(self, buffer: PixelBuffer, params: FilterParams) -> PixelBuffer:
        return self._fn(buffer)

    @property
    def filter_type(self) -> FilterType:
        return self._filter_type


class GammaOperation(FilterOperation):
    def apply(self, buffer: PixelBuffer, params: FilterParams) -> PixelBuffer:
        return point_operations.gamma_correction(buffer, params.gamma, params.gamma_constant)

    @property
    def filter_type(self) -> FilterType:
        return FilterType.GAMMA


class LogOperation(FilterOperation):
    def apply(self, buffer: PixelBuffer, params: FilterParams) -> PixelBuffer:
        return point_operations.log_transform(buffer, params.log_constant)

    @property
    def filter_type(self) -> FilterType:
        return FilterType.LOG


class QuantizationOperation(FilterOperation):
    def apply(self, buffer: PixelBuffer, params: FilterParams) -> PixelBuffer:
        return point_operations.quantize(buffer, params.quantization_levels)

    @property
    def filter_type(self) -> FilterType:
        return FilterType.QUANTIZATION


class SamplingOperation(FilterOperation):
    def apply(self, buffer: PixelBuffer, params: FilterParams) -> PixelBuffer:
        return point_operations.subsample(buffer, params.sampling_factor)

    @property
    def filter_type(self) -> FilterType:
        return FilterType.SAMPLING


class BoxBlurOperation(FilterOperation):
    def apply(self, buffer: PixelBuffer, params: FilterParams) -> PixelBuffer:
        return convolution.box_blur(buffer, params.kernel_size)

    @property
    def filter_type(self) -> FilterType:
        return FilterType.BOX_BLUR


class GaussianBlurOperation(FilterOperation):
    def apply(self, buffer: PixelBuffer, params: FilterParams) -> PixelBuffer:
        return convolution.gaussian_blur(buffer, params.kernel_size, params.gaussian_sigma)

    @property
    def filter_type(self) -> FilterType:
        return FilterType.GAUSSIAN_BLUR


class MedianOperation(FilterOperation):
    def apply(self, buffer: PixelBuffer, params: FilterParams) -> PixelBuffer:
        return noise_reduction.median_filter(buffer, params.kernel_size)

    @property
    def filter_type(self) -> FilterType:
        return FilterType.MEDIAN


class ThresholdOperation(FilterOperation):
    def apply(self, buffer: PixelBuffer, params: FilterParams) -> PixelBuffer:
        return morphology.threshold(buffer, params.threshold)

    @property
    def filter_type(self) -> FilterType:
        return FilterType.THRESHOLD


class MorphologyOperation(FilterOperation):
    """Binarize with params.threshold, then run a morphological operator."""

    def __init__(self, filter_type: FilterType, fn: Callable[[PixelBuffer], PixelBuffer]):
        self._filter_type = filter_type
        self._fn = fn

    def apply(self, buffer: PixelBuffer, params: FilterParams) -> PixelBuffer:
        return self._fn(morphology.threshold(buffer, params.threshold))

    @property
    def filter_type(self) -> FilterType:
        return self._filter_type


class CustomFormulaOperation(FilterOperation):
    def apply(self, buffer: PixelBuffer, params: FilterParams) -> PixelBuffer:
        return custom_filters.apply_custom_formula(buffer, params.custom_formula)

    @property
    def filter_type(self) -> FilterType:
        return FilterType.CUSTOM_FORMULA


class CustomKernelOperation(FilterOperation):
    def apply(self, buffer: PixelBuffer, params: FilterParams) -> PixelBuffer:
        return custom_filters.apply_custom_kernel(buffer, params.custom_kernel)

    @property
    def filter_type(self) -> FilterType:
        return FilterType.CUSTOM_KERNEL


def default_operations() -> List[FilterOperation]:
    """Every registered filter strategy, in menu order."""
    return [
        SimpleOperation(FilterType.NEGATIVE, point_operations.negative),
        GammaOperation(),
        LogOperation(),
        QuantizationOperation(),
        SamplingOperation(),
        SimpleOperation(FilterType.EQUALIZATION, point_operations.equalize_histogram),
        BoxBlurOperation(),
        GaussianBlurOperation(),
        SimpleOperation(FilterType.SHARPEN, convolution.sharpen),
        SimpleOperation(FilterType.LAPLACIAN, convolution.laplacian),
        SimpleOperation(FilterType.SOBEL_X, edge_detection.sobel_x),
        SimpleOperation(FilterType.SOBEL_Y, edge_detection.sobel_y),
        SimpleOperation(FilterType.SOBEL_MAGNITUDE, edge_detection.sobel_magnitude),
        MedianOperation(),
        SimpleOperation(FilterType.GRAYSCALE, color_filters.grayscale),
        SimpleOperation(FilterType.SEPIA, color_filters.sepia),
        SimpleOperation(FilterType.SWAP_CHANNELS, color_filters.swap_channels),
        ThresholdOperation(),
        MorphologyOperation(FilterType.EROSION, morphology.erosion),
        MorphologyOperation(FilterType.DILATION, morphology.dilation),
        MorphologyOperation(FilterType.OPENING, morphology.opening),
        MorphologyOperation(FilterType.CLOSING, morphology.closing),
        CustomFormulaOperation(),
        CustomKernelOperation(),
        SimpleOperation(FilterType.FFT_SPECTRUM, fft.fft_spectrum),
    ]


# ==============================================================================
# Service
# ==============================================================================


class FilterService:
    """
    Service running one filter at a time on a PixelBuffer.

    Every call is pure: the input buffer is never modified and a new buffer
    is returned.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize filter service.

        Args:
            settings: Settings used to seed default parameters
        """
        self.settings = settings
        self.operations: Dict[FilterType, FilterOperation] = {
            op.filter_type: op for op in default_operations()
        }

    def _default_params(self) -> FilterParams:
        return FilterParams.from_settings(self.settings)

    def process(
        self,
        buffer: PixelBuffer,
        filter_type: Union[FilterType, str],
        params: Optional[FilterParams] = None,
    ) -> ProcessingResult:
        """
        Apply a filter.

        Args:
            buffer: Input buffer
            filter_type: Filter to apply
            params: Filter parameters (defaults seeded from settings)

        Returns:
            ProcessingResult with the new buffer and timing

        Raises:
            ProcessingError: If the engine fails
            FFTLengthError: If the FFT invariant is violated
        """
        filter_type = FilterType(filter_type)
        if filter_type == FilterType.NONE:
            return ProcessingResult(filter=filter_type, buffer=buffer, processing_time_ms=0.0)

        if params is None:
            params = self._default_params()
        operation = self.operations[filter_type]

        with timer() as t:
            try:
                output = operation.apply(buffer, params)
            except FFTLengthError:
                logger.error(f"FFT invariant violated while running {operation.name}")
                raise
            except Exception as e:
                logger.error(f"Failed to apply {operation.name}: {e}")
                raise ProcessingError(operation.name, str(e)) from e

        logger.debug(
            f"Applied {operation.name} {params.overrides()} on "
            f"{buffer.width}x{buffer.height} in {t['ms']:.2f}ms"
        )
        return ProcessingResult(filter=filter_type, buffer=output, processing_time_ms=t["ms"])

    def get_step_info(self, filter_type: Union[FilterType, str]) -> StepInfo:
        """Describe the step-by-step breakdown of a filter."""
        return get_step_info(FilterType(filter_type))

    def process_step(
        self,
        buffer: PixelBuffer,
        filter_type: Union[FilterType, str],
        step: int,
        params: Optional[FilterParams] = None,
    ) -> FilterStep:
        """
        Run a filter up to one of its intermediate steps.

        Args:
            buffer: Input buffer
            filter_type: Filter to break down
            step: 1-based step number (clamped)
            params: Filter parameters; only the threshold is used

        Returns:
            FilterStep with the intermediate image
        """
        if params is None:
            params = self._default_params()
        return process_filter_step(buffer, FilterType(filter_type), step, params.threshold)

    def available_filters(self) -> List[str]:
        """Get list of available filter names."""
        return [FilterType.NONE.value] + [op.name for op in self.operations.values()]
