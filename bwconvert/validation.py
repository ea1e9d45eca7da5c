"""Pre-submission checks for conversion requests."""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence

from .config import DEFAULT_ARCHIVE_SUFFIXES, DEFAULT_SOURCE_SUFFIXES
from .errors import FormValidationError
from .models import (
    ConversionRequest,
    UploadedFile,
    VARIANT_FILE,
    VARIANT_PROJECT,
    VARIANT_REPOSITORY,
)
from .notifications import missing_fields, unsupported_file

_URL_SPLIT = re.compile(r"[\s,]+")


class RequestValidator:
    """Rejects submissions whose required fields are empty or whose files have the wrong suffix."""

    def __init__(
        self,
        *,
        source_suffixes: Sequence[str] = DEFAULT_SOURCE_SUFFIXES,
        archive_suffixes: Sequence[str] = DEFAULT_ARCHIVE_SUFFIXES,
    ) -> None:
        self.source_suffixes = [suffix.lower() for suffix in source_suffixes]
        self.archive_suffixes = [suffix.lower() for suffix in archive_suffixes]

    def validate(self, request: ConversionRequest) -> None:
        if request.variant == VARIANT_FILE:
            self._validate_file(request)
        elif request.variant == VARIANT_REPOSITORY:
            self._validate_repository(request)
        elif request.variant == VARIANT_PROJECT:
            self._validate_project(request)
        else:
            raise ValueError(f"Unknown conversion variant: {request.variant}")

    def _validate_file(self, request: ConversionRequest) -> None:
        if not _is_present(request.source_file):
            self._missing(request.variant, ["source_file"])
        self._check_suffix(request.source_file, self.source_suffixes, "source_file")

    def _validate_repository(self, request: ConversionRequest) -> None:
        missing: List[str] = []
        if not any(url.strip() for url in request.repository_urls):
            missing.append("repository_urls")
        if not request.target_git.strip():
            missing.append("target_git")
        if missing:
            self._missing(request.variant, missing)

    def _validate_project(self, request: ConversionRequest) -> None:
        missing: List[str] = []
        if not _is_present(request.project_archive):
            missing.append("project_archive")
        if not request.work_dir.strip():
            missing.append("work_dir")
        if not _is_present(request.config_file):
            missing.append("config_file")
        if not request.target_git.strip():
            missing.append("target_git")
        if missing:
            self._missing(request.variant, missing)
        self._check_suffix(request.project_archive, self.archive_suffixes, "project_archive")

    @staticmethod
    def _missing(variant: str, fields: Sequence[str]) -> None:
        raise FormValidationError(fields, missing_fields(variant, fields))

    @staticmethod
    def _check_suffix(upload: UploadedFile | None, accepted: Sequence[str], name: str) -> None:
        if upload is None:
            return
        if upload.suffix not in accepted:
            raise FormValidationError([name], unsupported_file(upload.filename, accepted))


def split_repository_urls(raw: str | Iterable[str] | None) -> List[str]:
    """Split free-text repository input into URLs, one per line or comma separated."""
    if raw is None:
        return []
    chunks = [raw] if isinstance(raw, str) else list(raw)
    urls: List[str] = []
    for chunk in chunks:
        for part in _URL_SPLIT.split(chunk):
            part = part.strip()
            if part and part not in urls:
                urls.append(part)
    return urls


def _is_present(upload: UploadedFile | None) -> bool:
    return upload is not None and bool(upload.filename.strip())


__all__ = ["RequestValidator", "split_repository_urls"]
