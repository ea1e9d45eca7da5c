"""Tests for user-facing notifications."""

from __future__ import annotations

from bwconvert import notifications


def test_single_missing_source_file_uses_upload_prompt() -> None:
    message = notifications.missing_fields("file", ["source_file"])

    assert message.title == "Missing Source Code"
    assert message.description == "Please upload your TIBCO BW source code file."
    assert message.variant == "destructive"


def test_missing_fields_joins_labels() -> None:
    message = notifications.missing_fields("repository", ["repository_urls", "target_git"])

    assert message.description == "Please provide the source repository URL and target Git repository."


def test_success_and_copy_messages_are_not_errors() -> None:
    assert notifications.conversion_succeeded().variant == "default"
    assert notifications.code_copied().variant == "default"
    assert notifications.conversion_failed().as_dict()["variant"] == "destructive"
