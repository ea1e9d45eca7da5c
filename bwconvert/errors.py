"""Exception types raised by bwconvert."""

from __future__ import annotations

from typing import Sequence

from .models import Notification
from .notifications import conversion_failed


class ConverterError(RuntimeError):
    """Base class for errors surfaced to the user as a notification."""

    def __init__(self, message: str, notification: Notification) -> None:
        super().__init__(message)
        self.notification = notification


class FormValidationError(ConverterError):
    """Raised before submission when required input is absent or invalid."""

    def __init__(self, fields: Sequence[str], notification: Notification) -> None:
        self.fields = list(fields)
        super().__init__(f"Invalid or missing fields: {', '.join(self.fields)}", notification)


class ConversionError(ConverterError):
    """Raised when the conversion request fails."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message, conversion_failed())


__all__ = ["ConversionError", "ConverterError", "FormValidationError"]
