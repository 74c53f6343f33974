"""FastAPI application exposing codescope analyses over HTTP."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..analyzers import build_analyzers
from ..engine import AnalysisEngine
from ..errors import ConfigurationError
from ..models import VERSION, AnalysisConfig


class AnalyzeRequest(BaseModel):
    path: str
    operation: str
    scope: str | None = None
    params: Dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    status: str
    version: str


class OperationsResponse(BaseModel):
    operations: List[str]


def _default_engine(path: str) -> AnalysisEngine:
    return AnalysisEngine(path)


def create_app(
    engine_factory: Callable[[str], AnalysisEngine] = _default_engine,
) -> FastAPI:
    """Create the FastAPI application; one engine is built per analyze request."""

    app = FastAPI(title="codescope", version=VERSION)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=VERSION)

    @app.get("/operations", response_model=OperationsResponse)
    async def operations() -> OperationsResponse:
        return OperationsResponse(operations=list(build_analyzers()))

    @app.post("/analyze")
    async def analyze(payload: AnalyzeRequest) -> JSONResponse:
        def _run() -> Dict[str, Any]:
            engine = engine_factory(payload.path)
            config = AnalysisConfig(
                operation=payload.operation,
                scope=payload.scope or engine.settings.scope,
                params=dict(payload.params),
            )
            return engine.analyze(payload.operation, config).to_dict()

        loop = asyncio.get_running_loop()
        envelope = await loop.run_in_executor(None, _run)
        return JSONResponse(status_code=200 if envelope["success"] else 422, content=envelope)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(_: Any, exc: ConfigurationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["AnalyzeRequest", "create_app", "run_service"]
