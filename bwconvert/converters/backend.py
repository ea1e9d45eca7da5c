"""HTTP adapter for the external TIBCO to Spring Boot conversion service."""

from __future__ import annotations

from email.message import Message
from pathlib import PurePosixPath
from typing import Optional

import httpx

from ..config import BackendConfig
from ..errors import ConversionError
from ..logging import get_logger
from ..models import ConversionRequest, ConversionResult, VARIANT_PROJECT

_DEFAULT_ARCHIVE_TYPE = "application/zip"


class BackendConverter:
    """Posts a project archive to the conversion backend and returns the converted archive."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 300.0,
        verify_tls: bool = True,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.verify_tls = verify_tls
        self._transport = transport
        self.logger = get_logger("converters.backend")

    @classmethod
    def from_config(
        cls, config: BackendConfig, *, transport: httpx.BaseTransport | None = None
    ) -> "BackendConverter":
        return cls(
            config.url,
            timeout=config.timeout,
            verify_tls=config.verify_tls,
            transport=transport,
        )

    def convert(self, request: ConversionRequest) -> ConversionResult:
        if request.variant != VARIANT_PROJECT:
            raise ValueError(f"BackendConverter only handles '{VARIANT_PROJECT}' requests")
        archive = request.project_archive
        config_file = request.config_file
        if archive is None or config_file is None:
            raise ValueError("Project requests require an archive and a configuration file")

        files = {
            "file": (
                archive.filename,
                archive.content,
                archive.content_type or _DEFAULT_ARCHIVE_TYPE,
            ),
            "file_name": (
                config_file.filename,
                config_file.content,
                config_file.content_type or "application/octet-stream",
            ),
        }
        data = {"work_dir": request.work_dir, "target_git": request.target_git}

        self.logger.info("Submitting %s to %s", archive.filename, self.url)
        try:
            with httpx.Client(
                timeout=self.timeout, verify=self.verify_tls, transport=self._transport
            ) as client:
                response = client.post(self.url, data=data, files=files)
        except httpx.HTTPError as exc:
            self.logger.error("Conversion backend unreachable: %s", exc)
            raise ConversionError(f"Conversion backend request failed: {exc}") from exc

        if not response.is_success:
            detail = response.text.strip()[:500]
            self.logger.error(
                "Conversion backend returned status %s: %s", response.status_code, detail
            )
            raise ConversionError(
                f"Conversion backend failed with status {response.status_code}",
                status_code=response.status_code,
            )

        if not response.content:
            raise ConversionError("Conversion backend returned an empty archive")

        filename = _filename_from_disposition(response.headers.get("content-disposition"))
        media_type = response.headers.get("content-type", _DEFAULT_ARCHIVE_TYPE).split(";")[0].strip()
        result = ConversionResult(
            filename=filename or f"{archive.stem}.zip",
            content=response.content,
            media_type=media_type or _DEFAULT_ARCHIVE_TYPE,
        )
        self.logger.info("Received %s (%d bytes)", result.filename, len(result.content))
        return result


def _filename_from_disposition(header: str | None) -> Optional[str]:
    if not header:
        return None
    message = Message()
    message["content-disposition"] = header
    name = message.get_filename()
    if not name:
        return None
    # Drop any directory components the server may send.
    cleaned = PurePosixPath(name.replace("\\", "/")).name
    return cleaned or None


__all__ = ["BackendConverter"]
