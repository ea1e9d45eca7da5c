"""Tests for the canned Spring Boot converter."""

from __future__ import annotations

import pytest

from bwconvert.converters.mock import JAVA_FILENAME, MockConverter, SPRING_BOOT_APPLICATION
from bwconvert.errors import ConversionError
from bwconvert.models import ConversionRequest


def test_mock_converter_returns_spring_boot_source(upload) -> None:
    converter = MockConverter(success_rate=0.7, chance=lambda: 0.95)

    result = converter.convert(ConversionRequest(variant="file", source_file=upload("a.bw")))

    assert result.filename == JAVA_FILENAME
    assert result.text == SPRING_BOOT_APPLICATION
    assert result.content == SPRING_BOOT_APPLICATION.encode("utf-8")
    assert "@SpringBootApplication" in result.text


def test_mock_converter_fails_below_threshold(upload) -> None:
    converter = MockConverter(success_rate=0.7, chance=lambda: 0.1)

    with pytest.raises(ConversionError) as excinfo:
        converter.convert(ConversionRequest(variant="file", source_file=upload("a.bw")))

    assert excinfo.value.notification.title == "Conversion Failed"


@pytest.mark.parametrize("roll", [0.0, 0.5, 0.999])
def test_mock_converter_always_succeeds_at_full_rate(roll: float) -> None:
    converter = MockConverter(success_rate=1.0, chance=lambda: roll)

    assert converter.convert(ConversionRequest(variant="repository")).text


def test_mock_converter_rejects_invalid_rate() -> None:
    with pytest.raises(ValueError):
        MockConverter(success_rate=2.0)
