"""Ephemeral stores backing the web service."""

from .artifacts import ArtifactStore
from .jobs import ConversionJob, JobStore

__all__ = ["ArtifactStore", "ConversionJob", "JobStore"]
