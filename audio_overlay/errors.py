"""
Overlay Errors - Domain-specific error types.

Error hierarchy:
    OverlayError (base)
    ├── UnsupportedSampleFormatError
    ├── SampleFormatMismatchError
    └── NonGrowableDestinationError

Mixing itself never raises for in-contract input. These errors only
cover buffers the engine cannot interpret or cannot grow.
"""

from __future__ import annotations

from typing import Any


class OverlayError(Exception):
    """Base error for all overlay-related errors."""
    
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnsupportedSampleFormatError(OverlayError, ValueError):
    """
    Raised when a buffer's element type is not a supported representation.
    
    Supported: int8, int16, int32, int64, float32, float64.
    Unsigned and complex types are rejected.
    """
    
    def __init__(self, kind: Any, details: dict[str, Any] | None = None):
        super().__init__(f"Unsupported sample format: {kind}", details)
        self.kind = kind


class SampleFormatMismatchError(OverlayError, ValueError):
    """Raised when source samples cannot be safely cast to the destination format."""
    
    def __init__(
        self,
        source: Any,
        destination: Any,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            f"Cannot overlay {source} samples onto a {destination} destination",
            details,
        )
        self.source = source
        self.destination = destination


class NonGrowableDestinationError(OverlayError, TypeError):
    """
    Raised when the destination would have to grow but cannot.
    
    numpy arrays have a fixed size. Use overlay_array(), which returns
    the grown array, or pass a list / array.array.
    """
    
    def __init__(self, required_length: int, current_length: int):
        super().__init__(
            f"Destination must grow from {current_length} to {required_length} "
            "samples but does not support extend()",
            {"required_length": required_length, "current_length": current_length},
        )
        self.required_length = required_length
        self.current_length = current_length
