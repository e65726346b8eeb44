"""FastAPI application.

Exposes corpus loading and question answering over HTTP. The corpus lives in
process memory; every convert call replaces it.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import PurePath
from typing import Optional

import structlog
from fastapi import APIRouter, FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from mail_reviewer import __version__
from mail_reviewer.agent import QueryOrchestrator
from mail_reviewer.config import Settings, get_settings
from mail_reviewer.corpus import CorpusRepository, count_recognized
from mail_reviewer.exceptions import EmptyCorpusError, UpstreamError, ValidationError
from mail_reviewer.models import QueryAnswer
from mail_reviewer.utils import configure_logging
from mail_reviewer.web.models import AskRequest, ConvertResponse, StatusResponse

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["corpus"])


def _repository(request: Request) -> CorpusRepository:
    return request.app.state.repository


def _orchestrator(request: Request) -> QueryOrchestrator:
    return request.app.state.orchestrator


@router.get("/status", response_model=StatusResponse)
def status(request: Request) -> StatusResponse:
    settings: Settings = request.app.state.settings
    corpus_dir = settings.corpus_dir
    exists = corpus_dir.is_dir()
    emails, attachments = (
        count_recognized([p.name for p in corpus_dir.iterdir() if p.is_file()]) if exists else (0, 0)
    )
    snapshot = _repository(request).current
    orchestrator = _orchestrator(request)

    return StatusResponse(
        corpus_dir=str(corpus_dir),
        corpus_dir_exists=exists,
        eml_count=emails,
        attachment_count=attachments,
        loaded_records=len(snapshot),
        loaded_source=snapshot.source,
        strategy=orchestrator.strategy.name,
        has_credentials=orchestrator.gateway.has_credentials,
    )


@router.post("/convert-folder", response_model=ConvertResponse)
def convert_folder(request: Request) -> ConvertResponse:
    settings: Settings = request.app.state.settings
    if not settings.corpus_dir.is_dir():
        raise ValidationError(f"{settings.corpus_dir}/ folder not found next to server.")

    snapshot = _repository(request).load_folder(settings.corpus_dir)
    if snapshot.is_empty:
        raise ValidationError(f"No readable files found in {settings.corpus_dir}/.")
    return ConvertResponse.from_snapshot(snapshot)


@router.post("/convert", response_model=ConvertResponse)
async def convert_upload(request: Request, file: UploadFile = File(...)) -> ConvertResponse:
    filename = PurePath(file.filename or "").name
    if not filename:
        raise ValidationError("No file uploaded.")

    data = await file.read()
    repository = _repository(request)
    if filename.lower().endswith(".zip"):
        snapshot = await run_in_threadpool(repository.load_archive, data, filename)
    else:
        snapshot = await run_in_threadpool(repository.load_message, data, filename)

    if snapshot.is_empty:
        raise ValidationError(f"No readable records found in {filename}.")
    return ConvertResponse.from_snapshot(snapshot)


@router.post("/ask", response_model=QueryAnswer)
async def ask(request: Request, body: AskRequest) -> QueryAnswer:
    return await _orchestrator(request).ask(body.question or "")


@router.post("/review", response_model=QueryAnswer)
async def review(request: Request) -> QueryAnswer:
    return await _orchestrator(request).review()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message})


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[CorpusRepository] = None,
    orchestrator: Optional[QueryOrchestrator] = None,
) -> FastAPI:
    """Build the application with its corpus repository and orchestrator.

    Args:
        settings: Application settings. If None, uses default settings.
        repository: Corpus repository. If None, starts with an empty one.
        orchestrator: Query orchestrator. If None, builds one from settings.
    """

    settings = settings or get_settings()
    repository = repository or CorpusRepository(settings)
    orchestrator = orchestrator or QueryOrchestrator(repository, settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        logger.info("mail_reviewer_web_started", version=__version__, strategy=orchestrator.strategy.name)
        yield
        await orchestrator.gateway.aclose()

    app = FastAPI(title="Mail Reviewer", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.repository = repository
    app.state.orchestrator = orchestrator
    app.include_router(router)

    @app.exception_handler(ValidationError)
    async def _validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(EmptyCorpusError)
    async def _empty_corpus(_request: Request, exc: EmptyCorpusError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(UpstreamError)
    async def _upstream_error(_request: Request, exc: UpstreamError) -> JSONResponse:
        logger.error("request_failed_upstream", status=exc.status, error=str(exc))
        return _error(502, str(exc))

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
