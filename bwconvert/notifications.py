"""Toast messages shown to the user."""

from __future__ import annotations

from typing import Sequence

from .models import Notification, VARIANT_FILE, VARIANT_PROJECT, VARIANT_REPOSITORY

DESTRUCTIVE = "destructive"

_FIELD_LABELS = {
    "source_file": "TIBCO BW source code file",
    "repository_urls": "source repository URL",
    "target_git": "target Git repository",
    "project_archive": "project ZIP archive",
    "work_dir": "work directory",
    "config_file": "configuration file",
}


def missing_source_code() -> Notification:
    return Notification(
        title="Missing Source Code",
        description="Please upload your TIBCO BW source code file.",
        variant=DESTRUCTIVE,
    )


def missing_fields(variant: str, fields: Sequence[str]) -> Notification:
    """Describe the required fields a submission still lacks."""
    if variant == VARIANT_FILE and list(fields) == ["source_file"]:
        return missing_source_code()
    labels = [_FIELD_LABELS.get(name, name.replace("_", " ")) for name in fields]
    title = {
        VARIANT_FILE: "Missing Source Code",
        VARIANT_REPOSITORY: "Missing Repository Details",
        VARIANT_PROJECT: "Missing Project Details",
    }.get(variant, "Missing Required Fields")
    return Notification(
        title=title,
        description=f"Please provide the {_join(labels)}.",
        variant=DESTRUCTIVE,
    )


def unsupported_file(filename: str, accepted: Sequence[str]) -> Notification:
    return Notification(
        title="Unsupported File Type",
        description=f"{filename} is not supported. Supported formats: {', '.join(accepted)}",
        variant=DESTRUCTIVE,
    )


def conversion_succeeded() -> Notification:
    return Notification(
        title="Conversion Successful!",
        description="Your TIBCO BW code has been successfully converted to Spring Boot.",
    )


def conversion_failed() -> Notification:
    return Notification(
        title="Conversion Failed",
        description=(
            "There was an error during the conversion process. "
            "Please check your source code and try again."
        ),
        variant=DESTRUCTIVE,
    )


def code_copied() -> Notification:
    return Notification(
        title="Code Copied!",
        description="The generated Spring Boot code has been copied to your clipboard.",
    )


def _join(items: Sequence[str]) -> str:
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return " and ".join(items)
    return ", ".join(items[:-1]) + f", and {items[-1]}"


__all__ = [
    "code_copied",
    "conversion_failed",
    "conversion_succeeded",
    "missing_fields",
    "missing_source_code",
    "unsupported_file",
]
