"""
Services Package

High-level entry points for running filters.
"""

from .filter_service import FilterOperation, FilterService, ProcessingResult

__all__ = ["FilterOperation", "FilterService", "ProcessingResult"]
