"""FastAPI application entrypoint for projectbranch service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import ProjectBranchConfig
from ..documents import DocumentNotFoundError
from ..git.shell import GitCommandError
from ..orchestrator import Orchestrator

T = TypeVar("T")


class RootsRequest(BaseModel):
    roots: List[str] = []


class DiscoverRequest(RootsRequest):
    include_without_docs: Optional[bool] = None


class RepositoryRequest(BaseModel):
    repository_path: str


class MappingRequest(RepositoryRequest):
    accessible: Optional[List[str]] = None


class SwitchRequest(RepositoryRequest):
    branch: str


class DocumentRequest(BaseModel):
    docs_path: str
    file_name: Optional[str] = None


class SaveDocumentRequest(DocumentRequest):
    contents: str


class DocumentResponse(BaseModel):
    path: str
    contents: str


class HealthResponse(BaseModel):
    status: str


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = Orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing catalog, branch and document operations."""

    app = FastAPI(title="ProjectBranch Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # Lazy-instantiate per request to keep state predictable.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/discover")
    async def discover(
        payload: DiscoverRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> List[Dict[str, Any]]:
        candidates = await _run_blocking(
            lambda: orchestrator.discover(
                payload.roots, include_without_docs=payload.include_without_docs
            )
        )
        return [candidate.to_dict() for candidate in candidates]

    @app.post("/catalog")
    async def catalog(
        payload: RootsRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> List[Dict[str, Any]]:
        groups = await _run_blocking(lambda: orchestrator.catalog(payload.roots))
        return [group.to_dict() for group in groups]

    @app.post("/mapping")
    async def mapping(
        payload: MappingRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        result = await _run_blocking(
            lambda: orchestrator.map_repository(payload.repository_path, payload.accessible)
        )
        return result.to_dict()

    @app.post("/branches")
    async def branches(
        payload: RepositoryRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        context = await _run_blocking(
            lambda: orchestrator.branch_context(payload.repository_path)
        )
        return context.to_dict()

    @app.post("/branches/switch")
    async def switch_branch(
        payload: SwitchRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        context = await _run_blocking(
            lambda: orchestrator.switch_branch(payload.repository_path, payload.branch)
        )
        return context.to_dict()

    @app.post("/docs/read", response_model=DocumentResponse)
    async def read_document(
        payload: DocumentRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> DocumentResponse:
        contents = await _run_blocking(
            lambda: orchestrator.read_document(payload.docs_path, payload.file_name)
        )
        path = orchestrator.document_service.resolve_file_path(
            payload.docs_path, payload.file_name
        )
        return DocumentResponse(path=path, contents=contents)

    @app.post("/docs/save", response_model=DocumentResponse)
    async def save_document(
        payload: SaveDocumentRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> DocumentResponse:
        path = await _run_blocking(
            lambda: orchestrator.write_document(
                payload.docs_path, payload.contents, payload.file_name
            )
        )
        return DocumentResponse(path=path, contents=payload.contents)

    @app.exception_handler(DocumentNotFoundError)
    async def document_not_found_handler(
        _: Any, exc: DocumentNotFoundError
    ) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(GitCommandError)
    async def git_error_handler(_: Any, exc: GitCommandError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


async def _run_blocking(operation: Callable[[], T]) -> T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, operation)


def run_service(
    host: str = "127.0.0.1",
    port: int = 8000,
    config: ProjectBranchConfig | None = None,
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(lambda: Orchestrator(config))
    uvicorn.run(app, host=host, port=port)
