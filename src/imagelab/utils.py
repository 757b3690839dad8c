"""
Utility functions for domain-agnostic operations.

This module consolidates small helpers used throughout the package:
- Logging setup from settings
- Timing context manager

All utilities are free of image-processing logic.
"""

import logging
import time
from contextlib import contextmanager
from typing import Generator, Optional

logger = logging.getLogger(__name__)


# ==============================================================================
# Logging
# ==============================================================================


def configure_logging(settings=None, level: Optional[str] = None) -> None:
    """
    Configure root logging from settings.

    Args:
        settings: Settings instance (defaults to the cached settings)
        level: Optional level overriding the configured one
    """
    if settings is None:
        from imagelab.config import get_settings

        settings = get_settings()

    log_level = (level or settings.system.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format=settings.system.log_format,
    )
    logger.debug(f"Logging configured at {log_level}")


# ==============================================================================
# Timing
# ==============================================================================


@contextmanager
def timer() -> Generator[dict, None, None]:
    """
    Context manager to measure execution time.

    Usage:
        with timer() as t:
            # ... code to time ...
            pass
        print(f"Took {t['ms']}ms")

    Yields:
        Dictionary with 'ms' key containing processing time in milliseconds
    """
    result = {"ms": 0.0}
    start_time = time.perf_counter()
    try:
        yield result
    finally:
        result["ms"] = (time.perf_counter() - start_time) * 1000
