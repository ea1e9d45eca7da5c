"""Conversion adapters."""

from .backend import BackendConverter
from .base import Converter
from .mock import MockConverter

__all__ = ["BackendConverter", "Converter", "MockConverter"]
