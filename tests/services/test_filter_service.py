"""
Tests for services.filter_service module.
"""

import logging

import numpy as np
import pytest

from imagelab.algorithms import convolution, morphology, point_operations
from imagelab.domain_types import FilterType
from imagelab.exceptions import FFTLengthError, ProcessingError
from imagelab.image.buffer import PixelBuffer
from imagelab.schemas.params import FilterParams
from imagelab.services.filter_service import (
    FilterOperation,
    FilterService,
    ProcessingResult,
    SimpleOperation,
)


@pytest.fixture
def service(settings):
    """Create FilterService instance."""
    return FilterService(settings)


class TestFilterService:
    """Tests for FilterService dispatch."""

    def test_every_filter_registered(self, service):
        """Test every FilterType has a strategy."""
        assert sorted(service.available_filters()) == sorted(f.value for f in FilterType)

    @pytest.mark.parametrize("filter_type", [f for f in FilterType])
    def test_every_filter_runs(self, service, color_buffer, filter_type):
        """Test every filter returns a same-size buffer without touching the input."""
        before = color_buffer.copy()
        result = service.process(color_buffer, filter_type)

        assert isinstance(result, ProcessingResult)
        assert result.filter == filter_type
        assert result.buffer.shape == color_buffer.shape
        assert result.processing_time_ms >= 0
        assert color_buffer == before

    def test_none_returns_input(self, service, random_buffer):
        """Test the 'none' filter is a pass-through."""
        result = service.process(random_buffer, "none")

        assert result.buffer is random_buffer
        assert result.processing_time_ms == 0.0

    def test_params_forwarded(self, service, gradient_buffer):
        """Test parameters reach the engine."""
        params = FilterParams(quantization_levels=4)
        result = service.process(gradient_buffer, FilterType.QUANTIZATION, params)

        assert result.buffer == point_operations.quantize(gradient_buffer, 4)

    def test_gaussian_params(self, service, random_buffer):
        """Test kernel size and sigma reach the Gaussian blur."""
        params = FilterParams(kernel_size=5, gaussian_sigma=2.0)
        result = service.process(random_buffer, FilterType.GAUSSIAN_BLUR, params)

        assert result.buffer == convolution.gaussian_blur(random_buffer, 5, 2.0)

    def test_morphology_thresholds_first(self, service, color_buffer):
        """Test morphological filters binarize with params.threshold."""
        params = FilterParams(threshold=90)
        result = service.process(color_buffer, FilterType.DILATION, params)

        assert result.buffer == morphology.dilation(morphology.threshold(color_buffer, 90))

    def test_debug_log_lists_changed_params(self, service, random_buffer, caplog):
        """Test the debug line names the filter and its non-default parameters."""
        with caplog.at_level(logging.DEBUG, logger="imagelab.services.filter_service"):
            service.process(random_buffer, FilterType.BOX_BLUR, FilterParams(kernel_size=5))

        assert "Applied box_blur {'kernel_size': 5} on 23x17" in caplog.text

    def test_custom_formula(self, service, random_buffer):
        """Test the default formula is the negative."""
        result = service.process(random_buffer, FilterType.CUSTOM_FORMULA)
        assert result.buffer == point_operations.negative(random_buffer)

    def test_custom_kernel(self, service, random_buffer):
        """Test the default kernel is the identity."""
        result = service.process(random_buffer, FilterType.CUSTOM_KERNEL)
        assert result.buffer == random_buffer

    def test_unknown_filter(self, service, random_buffer):
        """Test unknown filter names are rejected."""
        with pytest.raises(ValueError):
            service.process(random_buffer, "posterize")

    def test_engine_failure_wrapped(self, service, random_buffer, caplog):
        """Test unexpected engine errors become ProcessingError."""

        def broken(buffer):
            raise RuntimeError("boom")

        service.operations[FilterType.SEPIA] = SimpleOperation(FilterType.SEPIA, broken)

        with caplog.at_level(logging.ERROR):
            with pytest.raises(ProcessingError) as exc_info:
                service.process(random_buffer, FilterType.SEPIA)

        assert exc_info.value.details["operation"] == "sepia"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "Failed to apply sepia" in caplog.text

    def test_fft_invariant_propagates(self, service, random_buffer):
        """Test FFTLengthError is not wrapped."""

        def broken(buffer):
            raise FFTLengthError(6)

        service.operations[FilterType.FFT_SPECTRUM] = SimpleOperation(FilterType.FFT_SPECTRUM, broken)

        with pytest.raises(FFTLengthError):
            service.process(random_buffer, FilterType.FFT_SPECTRUM)

    def test_strategy_interface(self, service):
        """Test registered strategies implement FilterOperation."""
        for filter_type, operation in service.operations.items():
            assert isinstance(operation, FilterOperation)
            assert operation.name == filter_type.value


class TestFilterServiceSteps:
    """Tests for step-by-step access through the service."""

    def test_step_info(self, service):
        """Test step info passthrough."""
        assert service.get_step_info("closing").total_steps == 3

    def test_process_step_uses_threshold(self, service, gradient_buffer):
        """Test the params threshold reaches the binarization step."""
        step = service.process_step(gradient_buffer, FilterType.OPENING, 1, FilterParams(threshold=200))
        row = step.buffer.pixels[0, :, 0]

        assert np.all(row[:199] == 0)
        assert np.all(row[201:] == 255)

    def test_settings_seed_defaults(self, gradient_buffer):
        """Test settings provide default parameters."""
        from imagelab.config import ProcessingConfig, Settings

        settings = Settings(processing=ProcessingConfig(quantization_levels=2))
        result = FilterService(settings).process(gradient_buffer, FilterType.QUANTIZATION)

        assert np.unique(result.buffer.pixels[:, :, :3]).tolist() == [0, 255]


def test_result_is_new_buffer(settings):
    """Test results are distinct objects from the input."""
    buffer = PixelBuffer.filled(2, 2)
    result = FilterService(settings).process(buffer, FilterType.NEGATIVE)

    assert result.buffer is not buffer
