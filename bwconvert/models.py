"""Core data records shared across bwconvert components."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

VARIANT_FILE = "file"
VARIANT_REPOSITORY = "repository"
VARIANT_PROJECT = "project"


@dataclass
class UploadedFile:
    """A file supplied through the form or the command line."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def suffix(self) -> str:
        return Path(self.filename).suffix.lower()

    @property
    def stem(self) -> str:
        return Path(self.filename).stem

    @classmethod
    def from_path(cls, path: Path, content_type: str = "application/octet-stream") -> "UploadedFile":
        return cls(filename=path.name, content=path.read_bytes(), content_type=content_type)


@dataclass
class ConversionRequest:
    """User input for one submission; only the fields of ``variant`` are used."""

    variant: str
    source_file: Optional[UploadedFile] = None
    repository_urls: List[str] = field(default_factory=list)
    target_git: str = ""
    project_archive: Optional[UploadedFile] = None
    work_dir: str = ""
    config_file: Optional[UploadedFile] = None


@dataclass
class ConversionResult:
    """Payload returned by a converter."""

    filename: str
    content: bytes
    media_type: str
    text: Optional[str] = None


@dataclass
class Notification:
    """User-facing toast message."""

    title: str
    description: str
    variant: str = "default"

    def as_dict(self) -> dict[str, str]:
        return {"title": self.title, "description": self.description, "variant": self.variant}
