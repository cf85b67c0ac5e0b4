from __future__ import annotations

__all__ = [
    "NOT_FOUND_MESSAGE",
    "FAILED_MESSAGE",
    "PlateBlurError",
    "DetectionFailure",
    "NoDetectionError",
    "RedactionFailure",
]

# User-visible messages stored on an item in ERROR state.
NOT_FOUND_MESSAGE = "Не найден"
FAILED_MESSAGE = "Ошибка"


class PlateBlurError(Exception):
    """Base class for pipeline errors."""

    user_message: str = FAILED_MESSAGE


class DetectionFailure(PlateBlurError):
    """Remote detector call failed: network, quota, malformed response."""


class NoDetectionError(PlateBlurError):
    """Detector succeeded but returned no plates."""

    user_message = NOT_FOUND_MESSAGE


class RedactionFailure(PlateBlurError):
    """Image decode/encode or pixel manipulation failed."""
