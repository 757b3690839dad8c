"""
Filter parameters.

A single flat model carries the parameters of every filter; each filter
reads only the fields it needs. Out-of-range numeric values are normalized
the same way the engines normalize them, so a params object always holds
the values that will actually be used.
"""

from typing import List, Optional

from pydantic import Field, field_validator

from imagelab.algorithms.convolution import as_kernel, normalize_kernel_size
from imagelab.algorithms.custom_filters import PRESET_KERNELS
from imagelab.algorithms.point_operations import clamp_levels, clamp_sampling_factor
from imagelab.config import Settings, get_settings
from imagelab.domain_types import ConvolutionConstants, MorphologyConstants, PointConstants
from imagelab.exceptions import InvalidKernelError
from imagelab.schemas.base import BaseFilterParams


class FilterParams(BaseFilterParams):
    """Parameters for every filter, with validation and defaults."""

    # === Point operations ===
    gamma: float = Field(
        default=PointConstants.DEFAULT_GAMMA, gt=0, description="Gamma exponent (< 1 brightens)"
    )
    gamma_constant: float = Field(
        default=PointConstants.DEFAULT_CONSTANT, description="Gamma scaling constant c"
    )
    log_constant: float = Field(
        default=PointConstants.DEFAULT_CONSTANT, description="Log transform scaling constant c"
    )
    quantization_levels: int = Field(
        default=PointConstants.DEFAULT_QUANTIZATION_LEVELS,
        description="Number of output intensity levels (clamped to 2-256)",
    )
    sampling_factor: int = Field(
        default=PointConstants.DEFAULT_SAMPLING_FACTOR,
        description="Subsampling block size (rounded, clamped to 1-32)",
    )

    # === Spatial filters ===
    kernel_size: int = Field(
        default=ConvolutionConstants.KERNEL_SIZE_DEFAULT,
        description="Blur / median window size (odd, 1-31)",
    )
    gaussian_sigma: float = Field(
        default=ConvolutionConstants.GAUSSIAN_SIGMA_DEFAULT,
        description="Gaussian standard deviation (raised to at least 0.1 by the engine)",
    )

    # === Morphology ===
    threshold: float = Field(
        default=MorphologyConstants.THRESHOLD_DEFAULT,
        ge=MorphologyConstants.THRESHOLD_MIN,
        le=MorphologyConstants.THRESHOLD_MAX,
        description="Binarization threshold applied before morphology",
    )

    # === Custom operations ===
    custom_formula: str = Field(default="255 - r", description="Per-channel formula")
    custom_kernel: List[List[float]] = Field(
        default_factory=lambda: [list(row) for row in PRESET_KERNELS["identity"]],
        description="Square convolution kernel",
    )

    @field_validator("quantization_levels", mode="before")
    @classmethod
    def clamp_quantization_levels(cls, v):
        return clamp_levels(v)

    @field_validator("sampling_factor", mode="before")
    @classmethod
    def clamp_sampling(cls, v):
        return clamp_sampling_factor(v)

    @field_validator("kernel_size", mode="before")
    @classmethod
    def normalize_size(cls, v):
        """Ensure kernel size is odd and within range."""
        return normalize_kernel_size(v)

    @field_validator("custom_kernel")
    @classmethod
    def validate_kernel(cls, v):
        try:
            as_kernel(v)
        except InvalidKernelError as e:
            raise ValueError(e.message) from e
        return v

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides) -> "FilterParams":
        """
        Build parameters seeded with the configured processing defaults.

        Args:
            settings: Settings to read (default: cached global settings)
            **overrides: Explicit parameter values

        Returns:
            FilterParams instance
        """
        processing = (settings or get_settings()).processing
        values = {
            "kernel_size": processing.kernel_size,
            "gaussian_sigma": processing.gaussian_sigma,
            "threshold": processing.threshold,
            "quantization_levels": processing.quantization_levels,
            "sampling_factor": processing.sampling_factor,
        }
        values.update(overrides)
        return cls(**values)
