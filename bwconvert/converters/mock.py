"""Fixed-output converter backing the single-file and repository forms."""

from __future__ import annotations

import random
from typing import Callable

from ..errors import ConversionError
from ..logging import get_logger
from ..models import ConversionRequest, ConversionResult

JAVA_FILENAME = "ConvertedTibcoApplication.java"
JAVA_MEDIA_TYPE = "text/x-java-source"

SPRING_BOOT_APPLICATION = """package com.abc.tibcoconverter;

import org.springframework.boot.SpringApplication;
import org.springframework.boot.autoconfigure.SpringBootApplication;
import org.springframework.web.bind.annotation.*;

@SpringBootApplication
@RestController
public class ConvertedTibcoApplication {

    public static void main(String[] args) {
        SpringApplication.run(ConvertedTibcoApplication.class, args);
    }

    @GetMapping("/api/process")
    public ResponseEntity<String> processData(@RequestParam String input) {
        // Converted TIBCO BW logic
        String processedData = processBusinessLogic(input);
        return ResponseEntity.ok(processedData);
    }

    private String processBusinessLogic(String input) {
        // This method contains the converted TIBCO BW business logic
        return "Processed: " + input;
    }
}

// Additional configuration classes and services would be generated here
// based on your TIBCO BW project structure and components."""


class MockConverter:
    """Returns a canned Spring Boot application, failing at ``1 - success_rate`` odds."""

    def __init__(
        self,
        *,
        success_rate: float = 0.7,
        chance: Callable[[], float] | None = None,
    ) -> None:
        if not 0.0 <= success_rate <= 1.0:
            raise ValueError("success_rate must be between 0 and 1")
        self.success_rate = success_rate
        self._chance = chance or random.random
        self.logger = get_logger("converters.mock")

    def convert(self, request: ConversionRequest) -> ConversionResult:
        roll = self._chance()
        if roll < 1.0 - self.success_rate:
            self.logger.debug("Mock conversion failed (roll %.3f)", roll)
            raise ConversionError("Mock conversion failed")

        self.logger.debug("Mock conversion succeeded for %s request", request.variant)
        return ConversionResult(
            filename=JAVA_FILENAME,
            content=SPRING_BOOT_APPLICATION.encode("utf-8"),
            media_type=JAVA_MEDIA_TYPE,
            text=SPRING_BOOT_APPLICATION,
        )


__all__ = ["JAVA_FILENAME", "JAVA_MEDIA_TYPE", "MockConverter", "SPRING_BOOT_APPLICATION"]
