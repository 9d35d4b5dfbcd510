"""Utility helpers for sonarscan."""

from sonarscan.utils.exceptions import (
    ErrorCategory,
    NotFoundError,
    SonarScanError,
    ValidationError,
    sanitize_error_message,
)

__all__ = [
    "ErrorCategory",
    "NotFoundError",
    "SonarScanError",
    "ValidationError",
    "sanitize_error_message",
]
