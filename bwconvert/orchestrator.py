"""Runs a conversion submission from validation to downloadable output."""

from __future__ import annotations

import asyncio
import functools
from typing import Awaitable, Callable, List

from .config import BWConvertConfig
from .converters import BackendConverter, Converter, MockConverter
from .errors import ConversionError
from .logging import get_logger
from .models import ConversionRequest, ConversionResult, VARIANT_PROJECT
from .notifications import conversion_failed, conversion_succeeded
from .progress import STEP_GENERATE, ProgressStep, ProgressTracker
from .stores import ArtifactStore, ConversionJob, JobStore
from .stores.jobs import STATUS_FAILED, STATUS_PROCESSING, STATUS_SUCCEEDED
from .validation import RequestValidator


class ConversionOrchestrator:
    """Coordinates validation, the progress animation, the converter call and artifact hand-off."""

    def __init__(
        self,
        config: BWConvertConfig,
        *,
        validator: RequestValidator | None = None,
        mock_converter: Converter | None = None,
        backend_converter: Converter | None = None,
        artifacts: ArtifactStore | None = None,
        jobs: JobStore | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self.config = config
        self.validator = validator or RequestValidator(
            source_suffixes=config.uploads.source_suffixes,
            archive_suffixes=config.uploads.archive_suffixes,
        )
        self.mock_converter = mock_converter or MockConverter(
            success_rate=config.mock.success_rate
        )
        self.backend_converter = backend_converter or BackendConverter.from_config(config.backend)
        self.artifacts = artifacts or ArtifactStore(config.service.max_artifacts)
        self.jobs = jobs or JobStore(config.service.max_jobs, on_evict=self._release)
        self._sleep = sleep
        self.logger = get_logger("orchestrator")

    def _release(self, job: ConversionJob) -> None:
        if job.result_token and self.artifacts.revoke(job.result_token):
            self.logger.debug("Released download for expired job %s", job.id)

    def converter_for(self, variant: str) -> Converter:
        if variant == VARIANT_PROJECT:
            return self.backend_converter
        return self.mock_converter

    def new_tracker(
        self, variant: str, *, on_step: Callable[[ProgressStep], None] | None = None
    ) -> ProgressTracker:
        # The backend flow is paced by the real request, so it gets no artificial delay.
        delay = 0.0 if variant == VARIANT_PROJECT else self.config.progress.step_delay
        return ProgressTracker(step_delay=delay, sleep=self._sleep, on_step=on_step)

    def submit(
        self,
        request: ConversionRequest,
        *,
        on_step: Callable[[ProgressStep], None] | None = None,
    ) -> ConversionJob:
        """Validate the request and register a job for it.

        Raises :class:`bwconvert.errors.FormValidationError` without creating a
        job when required input is missing.
        """
        self.validator.validate(request)
        job = self.jobs.create(request.variant, self.new_tracker(request.variant, on_step=on_step))
        self.logger.info("Accepted %s conversion job %s", request.variant, job.id)
        return job

    async def execute(self, job: ConversionJob, request: ConversionRequest) -> ConversionJob:
        """Animate progress, run the converter and record the outcome on ``job``."""
        job.status = STATUS_PROCESSING
        job.notification = None
        job.result_token = None
        job.result_filename = None
        job.generated_code = None
        job.progress.reset()

        try:
            result = await self._run_with_progress(job, request)
        except ConversionError as exc:
            self.logger.warning("Conversion job %s failed: %s", job.id, exc)
            job.status = STATUS_FAILED
            job.notification = exc.notification
        except Exception:
            self.logger.exception("Conversion job %s failed unexpectedly", job.id)
            job.status = STATUS_FAILED
            job.notification = conversion_failed()
        else:
            job.result_token = self.artifacts.publish(result)
            job.result_filename = result.filename
            job.generated_code = result.text
            job.status = STATUS_SUCCEEDED
            job.notification = conversion_succeeded()
            self.logger.info("Conversion job %s produced %s", job.id, result.filename)
        finally:
            job.progress.reset()
        return job

    async def convert(
        self,
        request: ConversionRequest,
        *,
        on_step: Callable[[ProgressStep], None] | None = None,
    ) -> ConversionJob:
        """Submit and execute in one call."""
        job = self.submit(request, on_step=on_step)
        return await self.execute(job, request)

    async def _run_with_progress(
        self, job: ConversionJob, request: ConversionRequest
    ) -> ConversionResult:
        converter = self.converter_for(job.variant)
        results: List[ConversionResult] = []

        async def _call_converter() -> None:
            results.append(await self._invoke(converter, request))

        # The backend call runs while "Generating" is active; mock output waits for the animation.
        hooks = {STEP_GENERATE.id: _call_converter} if job.variant == VARIANT_PROJECT else None
        await job.progress.run(hooks)
        if not results:
            await _call_converter()
        return results[0]

    @staticmethod
    async def _invoke(converter: Converter, request: ConversionRequest) -> ConversionResult:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(converter.convert, request))


__all__ = ["ConversionOrchestrator"]
