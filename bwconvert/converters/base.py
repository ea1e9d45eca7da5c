"""Converter interface shared by the mock and backend implementations."""

from __future__ import annotations

from typing import Protocol

from ..models import ConversionRequest, ConversionResult


class Converter(Protocol):
    """Turns a validated request into downloadable output.

    Implementations raise :class:`bwconvert.errors.ConversionError` when the
    conversion fails.
    """

    def convert(self, request: ConversionRequest) -> ConversionResult:
        ...  # pragma: no cover - protocol definition
