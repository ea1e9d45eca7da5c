"""Web front-end and CLI for submitting TIBCO BW sources to a Spring Boot converter."""

__version__ = "1.0.0"
