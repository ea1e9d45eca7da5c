"""Tests for the conversion job registry."""

from __future__ import annotations

import pytest

from bwconvert.progress import ProgressTracker
from bwconvert.stores import JobStore
from bwconvert.stores.jobs import STATUS_FAILED, STATUS_PENDING, STATUS_PROCESSING, STATUS_SUCCEEDED


def test_create_registers_pending_job() -> None:
    store = JobStore()
    job = store.create("file", ProgressTracker(step_delay=0))

    assert job.status == STATUS_PENDING
    assert not job.is_processing
    assert not job.show_output
    assert store.get(job.id) is job
    assert job.id in store
    assert len(store) == 1


def test_get_unknown_job_raises() -> None:
    with pytest.raises(KeyError):
        JobStore().get("missing")


def _finish(store: JobStore, status: str = STATUS_SUCCEEDED):  # type: ignore[no-untyped-def]
    job = store.create("file", ProgressTracker(step_delay=0))
    job.status = status
    return job


def test_oldest_finished_jobs_are_evicted() -> None:
    evicted = []
    store = JobStore(max_size=2, on_evict=evicted.append)

    first = _finish(store)
    second = _finish(store, STATUS_FAILED)
    third = _finish(store)

    assert len(store) == 2
    assert first.id not in store
    assert second.id in store and third.id in store
    assert evicted == [first]


def test_running_jobs_are_never_evicted() -> None:
    store = JobStore(max_size=1)

    pending = store.create("file", ProgressTracker(step_delay=0))
    processing = store.create("project", ProgressTracker(step_delay=0))
    processing.status = STATUS_PROCESSING

    assert pending.id in store
    assert processing.id in store
    assert len(store) == 2

    pending.status = STATUS_SUCCEEDED
    latest = _finish(store)

    assert pending.id not in store
    assert processing.id in store
    assert latest.id in store


def test_max_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        JobStore(max_size=0)
