"""
Schemas Package

Pydantic parameter models for the filters.
"""

from .base import BaseFilterParams
from .params import FilterParams

__all__ = ["BaseFilterParams", "FilterParams"]
