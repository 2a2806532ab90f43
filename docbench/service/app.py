"""FastAPI application entrypoint for docbench service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import PayloadTooLarge
from ..ingestion import UploadedFile
from ..llm import provider_statuses
from ..orchestrator import GenerationReport, Orchestrator


class FilePayload(BaseModel):
    path: str
    content: str


class FilesRequest(BaseModel):
    files: List[FilePayload]
    provider: Optional[str] = None


class RepositoryRequest(BaseModel):
    url: str
    provider: Optional[str] = None


class GenerateResponse(BaseModel):
    success: bool
    error: Optional[str] = None
    source: Optional[str] = None
    results: List[Dict[str, Any]] = []
    project_info: Optional[Dict[str, Any]] = None
    summary: Optional[Dict[str, Any]] = None
    warnings: List[str] = []
    skipped: int = 0


class ProviderStatusResponse(BaseModel):
    name: str
    display_name: str
    description: str
    website: str
    available: bool
    model_count: int


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


async def _in_executor(func: Callable[[], GenerationReport]) -> GenerationReport:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


async def _read_capped(request: Request, limit: int) -> bytes:
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLarge(f"Upload of {declared} bytes exceeds the {limit} byte limit")
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise PayloadTooLarge(f"Upload exceeds the {limit} byte limit")
    return bytes(body)


def _response(report: GenerationReport) -> GenerateResponse:
    return GenerateResponse(**report.to_dict())


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing docbench operations."""

    app = FastAPI(title="DocBench Service", version="1.0.0")

    @app.exception_handler(PayloadTooLarge)
    async def payload_too_large_handler(_: Any, exc: PayloadTooLarge) -> JSONResponse:
        return JSONResponse(status_code=413, content={"detail": str(exc)})

    async def get_orchestrator() -> Orchestrator:
        # Lazy-instantiate per request to keep state predictable.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/providers", response_model=List[ProviderStatusResponse])
    async def providers(
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> List[ProviderStatusResponse]:
        return [
            ProviderStatusResponse(**status.to_dict())
            for status in provider_statuses(orchestrator.environ)
        ]

    @app.post("/generate/files", response_model=GenerateResponse)
    async def generate_files(
        payload: FilesRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerateResponse:
        uploads = [UploadedFile.from_bytes(item.path, item.content) for item in payload.files]
        report = await _in_executor(
            lambda: orchestrator.run_files(uploads, provider=payload.provider)
        )
        return _response(report)

    @app.post("/generate/archive", response_model=GenerateResponse)
    async def generate_archive(
        request: Request,
        filename: str = "project.zip",
        provider: Optional[str] = None,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerateResponse:
        data = await _read_capped(request, orchestrator.config.ingestion.max_archive_bytes)
        report = await _in_executor(
            lambda: orchestrator.run_archive(data, filename, provider=provider)
        )
        return _response(report)

    @app.post("/generate/repository", response_model=GenerateResponse)
    async def generate_repository(
        payload: RepositoryRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerateResponse:
        report = await _in_executor(
            lambda: orchestrator.run_repository(payload.url, provider=payload.provider)
        )
        return _response(report)

    return app


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
