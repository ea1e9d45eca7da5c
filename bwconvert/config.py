"""Configuration loading for bwconvert (.bwconvert.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAME = ".bwconvert.yml"
DEFAULT_ENDPOINT = "/usb-service-ics-tibco-to-java-converter/v1/files"
DEFAULT_SOURCE_SUFFIXES = (".bw", ".xml", ".java", ".properties")
DEFAULT_ARCHIVE_SUFFIXES = (".zip",)


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class BackendConfig:
    """Conversion backend location and HTTP settings."""

    base_url: str = "http://localhost:8080"
    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = 300.0
    verify_tls: bool = True

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.endpoint.lstrip('/')}"


@dataclass
class ProgressConfig:
    """Timing of the simulated progress indicator."""

    step_delay: float = 3.0


@dataclass
class MockConfig:
    """Behaviour of the mock converter used by the file and repository flows."""

    success_rate: float = 0.7


@dataclass
class UploadConfig:
    """Client-side file acceptance rules."""

    source_suffixes: List[str] = field(default_factory=lambda: list(DEFAULT_SOURCE_SUFFIXES))
    archive_suffixes: List[str] = field(default_factory=lambda: list(DEFAULT_ARCHIVE_SUFFIXES))


@dataclass
class ServiceConfig:
    """Bind address and in-memory retention limits for the web service."""

    host: str = "127.0.0.1"
    port: int = 8000
    max_jobs: int = 100
    max_artifacts: int = 50


@dataclass
class BWConvertConfig:
    """Represents the settings defined in .bwconvert.yml."""

    root: Path
    backend: BackendConfig = field(default_factory=BackendConfig)
    progress: ProgressConfig = field(default_factory=ProgressConfig)
    mock: MockConfig = field(default_factory=MockConfig)
    uploads: UploadConfig = field(default_factory=UploadConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)


ENV_BACKEND_URL = "BWCONVERT_BACKEND_URL"
ENV_BACKEND_TIMEOUT = "BWCONVERT_BACKEND_TIMEOUT"
ENV_STEP_DELAY = "BWCONVERT_STEP_DELAY"
ENV_SUCCESS_RATE = "BWCONVERT_SUCCESS_RATE"


def load_config(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> BWConvertConfig:
    """Load configuration from disk and apply environment overrides."""
    config_file = _resolve_config_path(config_path or Path.cwd())
    root = config_file.parent.resolve()
    config = BWConvertConfig(root=root)

    if config_file.exists():
        data = _read_config(config_file)
        if not isinstance(data, dict):
            raise ConfigError(f"{config_file.name} must contain a mapping at the root")
        _apply_mapping(config, data)

    _apply_environment(config, os.environ if environ is None else environ)
    _check(config)
    return config


def _apply_mapping(config: BWConvertConfig, data: Dict[str, Any]) -> None:
    backend_data = _as_dict(data.get("backend"))
    if backend_data:
        base_url = _as_str(backend_data.get("base_url"))
        if base_url:
            config.backend.base_url = base_url
        endpoint = _as_str(backend_data.get("endpoint"))
        if endpoint:
            config.backend.endpoint = endpoint
        timeout = _as_float(backend_data.get("timeout"))
        if timeout is not None:
            config.backend.timeout = timeout
        verify = _as_bool(backend_data.get("verify_tls"))
        if verify is not None:
            config.backend.verify_tls = verify

    progress_data = _as_dict(data.get("progress"))
    step_delay = _as_float(progress_data.get("step_delay"))
    if step_delay is not None:
        config.progress.step_delay = step_delay

    mock_data = _as_dict(data.get("mock"))
    success_rate = _as_float(mock_data.get("success_rate"))
    if success_rate is not None:
        config.mock.success_rate = success_rate

    upload_data = _as_dict(data.get("uploads"))
    if "source_suffixes" in upload_data:
        config.uploads.source_suffixes = _as_suffix_list(upload_data.get("source_suffixes"))
    if "archive_suffixes" in upload_data:
        config.uploads.archive_suffixes = _as_suffix_list(upload_data.get("archive_suffixes"))

    service_data = _as_dict(data.get("service"))
    host = _as_str(service_data.get("host"))
    if host:
        config.service.host = host
    port = _as_int(service_data.get("port"))
    if port is not None:
        config.service.port = port
    for key in ("max_jobs", "max_artifacts"):
        limit = _as_int(service_data.get(key))
        if limit is not None:
            setattr(config.service, key, limit)


def _apply_environment(config: BWConvertConfig, environ: Mapping[str, str]) -> None:
    base_url = environ.get(ENV_BACKEND_URL)
    if base_url:
        config.backend.base_url = base_url
    timeout = _as_float(environ.get(ENV_BACKEND_TIMEOUT))
    if timeout is not None:
        config.backend.timeout = timeout
    step_delay = _as_float(environ.get(ENV_STEP_DELAY))
    if step_delay is not None:
        config.progress.step_delay = step_delay
    success_rate = _as_float(environ.get(ENV_SUCCESS_RATE))
    if success_rate is not None:
        config.mock.success_rate = success_rate


def _check(config: BWConvertConfig) -> None:
    if config.progress.step_delay < 0:
        raise ConfigError("progress.step_delay must not be negative")
    if not 0.0 <= config.mock.success_rate <= 1.0:
        raise ConfigError("mock.success_rate must be between 0 and 1")
    if config.backend.timeout <= 0:
        raise ConfigError("backend.timeout must be positive")
    if not config.uploads.source_suffixes:
        raise ConfigError("uploads.source_suffixes must list at least one suffix")
    if config.service.max_jobs < 1 or config.service.max_artifacts < 1:
        raise ConfigError("service.max_jobs and service.max_artifacts must be at least 1")


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_suffix_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, Sequence):
        return []
    suffixes: List[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            continue
        suffix = item.strip().lower()
        suffixes.append(suffix if suffix.startswith(".") else f".{suffix}")
    return suffixes
