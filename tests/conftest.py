from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from bwconvert.config import BWConvertConfig, load_config
from bwconvert.models import UploadedFile


@pytest.fixture
def config(tmp_path: Path) -> BWConvertConfig:
    """Defaults with no artificial delay and a converter that always succeeds."""
    loaded = load_config(tmp_path, environ={})
    loaded.progress.step_delay = 0.0
    loaded.mock.success_rate = 1.0
    return loaded


@pytest.fixture
def upload() -> Callable[..., UploadedFile]:
    def _make(filename: str, content: bytes = b"<process/>", content_type: str = "text/xml") -> UploadedFile:
        return UploadedFile(filename=filename, content=content, content_type=content_type)

    return _make
