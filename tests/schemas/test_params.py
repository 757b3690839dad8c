"""
Tests for schemas.params module.
"""

import pytest
from pydantic import ValidationError

from imagelab.config import ProcessingConfig, Settings
from imagelab.schemas.params import FilterParams


class TestFilterParams:
    """Tests for FilterParams validation and defaults."""

    def test_defaults(self):
        """Test documented defaults."""
        params = FilterParams()

        assert params.gamma == 1.0
        assert params.gamma_constant == 1.0
        assert params.log_constant == 1.0
        assert params.quantization_levels == 8
        assert params.sampling_factor == 4
        assert params.kernel_size == 3
        assert params.gaussian_sigma == 1.0
        assert params.threshold == 128
        assert params.custom_formula == "255 - r"
        assert params.custom_kernel == [[0, 0, 0], [0, 1, 0], [0, 0, 0]]

    def test_out_of_range_values_normalized(self):
        """Test clamping instead of rejection."""
        params = FilterParams(quantization_levels=1, sampling_factor=99, kernel_size=4)

        assert params.quantization_levels == 2
        assert params.sampling_factor == 32
        assert params.kernel_size == 5

    def test_sampling_factor_rounded(self):
        """Test fractional sampling factors are rounded half-up."""
        assert FilterParams(sampling_factor=2.5).sampling_factor == 3

    @pytest.mark.parametrize(
        "field,value",
        [
            ("gamma", 0),
            ("gamma", -1.0),
            ("threshold", 256),
            ("threshold", -1),
            ("custom_kernel", [[1, 2, 3], [4, 5, 6]]),
            ("custom_kernel", []),
        ],
    )
    def test_invalid_values_rejected(self, field, value):
        """Test invalid values raise ValidationError."""
        with pytest.raises(ValidationError):
            FilterParams(**{field: value})

    def test_unknown_fields_rejected(self):
        """Test extra fields are forbidden."""
        with pytest.raises(ValidationError):
            FilterParams(radius=3)

    def test_overrides(self):
        """Test only values differing from the defaults are reported."""
        assert FilterParams().overrides() == {}
        assert FilterParams(gamma=2.2, kernel_size=3).overrides() == {"gamma": 2.2}
        assert FilterParams(custom_kernel=[[2]]).overrides() == {"custom_kernel": [[2.0]]}

    def test_default_kernel_not_shared(self):
        """Test each instance owns its default kernel."""
        a = FilterParams()
        a.custom_kernel[1][1] = 5

        assert FilterParams().custom_kernel[1][1] == 1

    def test_from_settings(self):
        """Test defaults seeded from settings, overrides win."""
        settings = Settings(processing=ProcessingConfig(threshold=64, kernel_size=7))
        params = FilterParams.from_settings(settings, kernel_size=9)

        assert params.threshold == 64
        assert params.kernel_size == 9
