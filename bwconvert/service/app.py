"""FastAPI application serving the conversion form and its JSON API."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional
from urllib.parse import quote

import uvicorn
from fastapi import BackgroundTasks, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from .. import __version__
from ..config import BWConvertConfig, load_config
from ..errors import FormValidationError
from ..logging import get_logger
from ..models import (
    ConversionRequest,
    UploadedFile,
    VARIANT_FILE,
    VARIANT_PROJECT,
    VARIANT_REPOSITORY,
)
from ..notifications import code_copied
from ..orchestrator import ConversionOrchestrator
from ..progress import PROGRESS_STEPS
from ..stores import ConversionJob
from ..validation import split_repository_urls

TEMPLATES_DIR = Path(__file__).with_name("templates")

logger = get_logger("service")


class NotificationModel(BaseModel):
    title: str
    description: str
    variant: str


class StepModel(BaseModel):
    id: int
    label: str
    icon: str
    state: str


class JobResponse(BaseModel):
    id: str
    variant: str
    status: str
    processing: bool
    current_step: int
    percent: float
    steps: List[StepModel]
    notification: Optional[NotificationModel] = None
    download_url: Optional[str] = None
    filename: Optional[str] = None
    generated_code: Optional[str] = None


class CodeResponse(BaseModel):
    code: str
    notification: NotificationModel


class HealthResponse(BaseModel):
    status: str


def create_app(
    orchestrator: ConversionOrchestrator | None = None,
    *,
    config: BWConvertConfig | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing the converter form."""

    if orchestrator is None:
        orchestrator = ConversionOrchestrator(config or load_config())
    app = FastAPI(title="TIBCO to Spring Boot Converter", version=__version__)
    app.state.orchestrator = orchestrator
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request) -> HTMLResponse:
        uploads = orchestrator.config.uploads
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "steps": PROGRESS_STEPS,
                "source_suffixes": uploads.source_suffixes,
                "archive_suffixes": uploads.archive_suffixes,
            },
        )

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/api/conversions/file", response_model=JobResponse, status_code=202)
    async def convert_file(
        request: Request,
        background_tasks: BackgroundTasks,
        file: Optional[UploadFile] = File(None),
    ) -> JobResponse:
        conversion = ConversionRequest(
            variant=VARIANT_FILE,
            source_file=await _read_upload(file),
        )
        return _start(request, background_tasks, conversion)

    @app.post("/api/conversions/repository", response_model=JobResponse, status_code=202)
    async def convert_repository(
        request: Request,
        background_tasks: BackgroundTasks,
        repository_urls: str = Form(""),
        target_git: str = Form(""),
    ) -> JobResponse:
        conversion = ConversionRequest(
            variant=VARIANT_REPOSITORY,
            repository_urls=split_repository_urls(repository_urls),
            target_git=target_git.strip(),
        )
        return _start(request, background_tasks, conversion)

    @app.post("/api/conversions/project", response_model=JobResponse, status_code=202)
    async def convert_project(
        request: Request,
        background_tasks: BackgroundTasks,
        file: Optional[UploadFile] = File(None),
        config_file: Optional[UploadFile] = File(None),
        work_dir: str = Form(""),
        target_git: str = Form(""),
    ) -> JobResponse:
        conversion = ConversionRequest(
            variant=VARIANT_PROJECT,
            project_archive=await _read_upload(file, default_type="application/zip"),
            config_file=await _read_upload(config_file),
            work_dir=work_dir.strip(),
            target_git=target_git.strip(),
        )
        return _start(request, background_tasks, conversion)

    @app.get("/api/conversions/{job_id}", response_model=JobResponse)
    async def get_conversion(job_id: str, request: Request) -> JobResponse:
        return _job_response(_lookup(job_id), request)

    @app.get("/api/conversions/{job_id}/code", response_model=CodeResponse)
    async def get_generated_code(job_id: str) -> CodeResponse:
        job = _lookup(job_id)
        if not job.generated_code:
            raise HTTPException(status_code=404, detail="No generated code for this conversion")
        return CodeResponse(
            code=job.generated_code,
            notification=NotificationModel(**code_copied().as_dict()),
        )

    @app.get("/downloads/{token}")
    async def download(token: str) -> Response:
        try:
            result = orchestrator.artifacts.fetch(token)
        except KeyError:
            raise HTTPException(status_code=404, detail="Download link has expired") from None
        # Links are one-shot, like a revoked browser object URL.
        orchestrator.artifacts.revoke(token)
        logger.info("Serving download %s", result.filename)
        return Response(
            content=result.content,
            media_type=result.media_type,
            headers={"Content-Disposition": _attachment(result.filename)},
        )

    @app.exception_handler(FormValidationError)
    async def validation_error_handler(_: Any, exc: FormValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "detail": str(exc),
                "fields": exc.fields,
                "notification": exc.notification.as_dict(),
            },
        )

    def _start(
        request: Request, background_tasks: BackgroundTasks, conversion: ConversionRequest
    ) -> JobResponse:
        job = orchestrator.submit(conversion)
        background_tasks.add_task(orchestrator.execute, job, conversion)
        return _job_response(job, request)

    def _lookup(job_id: str) -> ConversionJob:
        try:
            return orchestrator.jobs.get(job_id)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Unknown conversion {job_id}") from None

    def _job_response(job: ConversionJob, request: Request) -> JobResponse:
        download_url = None
        if job.show_output and job.result_token in orchestrator.artifacts:
            download_url = str(request.url_for("download", token=job.result_token))
        return JobResponse(
            id=job.id,
            variant=job.variant,
            status=job.status,
            processing=job.is_processing,
            current_step=job.progress.current_step,
            percent=job.progress.percent,
            steps=[StepModel(**step) for step in job.progress.snapshot()],
            notification=(
                NotificationModel(**job.notification.as_dict()) if job.notification else None
            ),
            download_url=download_url,
            filename=job.result_filename,
            generated_code=job.generated_code,
        )

    return app


async def _read_upload(
    upload: Optional[UploadFile], *, default_type: str = "application/octet-stream"
) -> Optional[UploadedFile]:
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return UploadedFile(
        filename=Path(upload.filename).name,
        content=content,
        content_type=upload.content_type or default_type,
    )


def _attachment(filename: str) -> str:
    ascii_name = filename.encode("ascii", "ignore").decode("ascii").replace('"', "") or "download"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


def run_service(config: BWConvertConfig, host: str | None = None, port: int | None = None) -> None:  # pragma: no cover - integration path
    app = create_app(config=config)
    uvicorn.run(
        app,
        host=host or config.service.host,
        port=port or config.service.port,
    )


__all__ = ["create_app", "run_service"]
