"""
Custom exceptions for the image processing toolkit.

Provides a consistent error hierarchy for every engine. Out-of-range
parameters are normalised by the engines and never raised; the exceptions
here cover caller defects and invariant violations.
"""

from typing import Dict, Optional


class ImageLabError(Exception):
    """Base exception for the toolkit."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidBufferError(ImageLabError):
    """Exception raised when a pixel buffer violates its layout contract."""

    def __init__(self, reason: str, width: Optional[int] = None, height: Optional[int] = None):
        super().__init__(
            message=f"Invalid pixel buffer: {reason}",
            details={"reason": reason, "width": width, "height": height},
        )


class InvalidKernelError(ImageLabError):
    """Exception raised when a kernel or structuring element is malformed."""

    def __init__(self, reason: str):
        super().__init__(message=f"Invalid kernel: {reason}", details={"reason": reason})


class FormulaSyntaxError(ImageLabError):
    """Exception raised when a custom formula cannot be parsed."""

    def __init__(self, formula: str, reason: str, position: int):
        super().__init__(
            message=f"Invalid formula at position {position}: {reason}",
            details={"formula": formula, "reason": reason, "position": position},
        )
        self.reason = reason
        self.position = position


class FFTLengthError(ImageLabError):
    """
    Exception raised when the FFT receives a length that is not a power of two.

    This is an invariant violation: the padding step guarantees power-of-two
    lengths, so reaching it indicates a defect rather than bad input.
    """

    def __init__(self, length: int):
        super().__init__(
            message=f"FFT length must be a power of 2, got {length}",
            details={"length": length},
        )


class ProcessingError(ImageLabError):
    """Exception raised when a filter fails unexpectedly."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            message=f"Processing failed for {operation}: {reason}",
            details={"operation": operation, "reason": reason},
        )


class ConfigurationError(ImageLabError):
    """Exception raised when configuration is invalid."""

    def __init__(self, config_key: str, reason: str):
        super().__init__(
            message=f"Invalid configuration for {config_key}: {reason}",
            details={"config_key": config_key, "reason": reason},
        )
