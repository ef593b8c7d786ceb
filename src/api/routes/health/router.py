"""Endpoints de health check."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config.settings import get_base_settings

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Resposta do health check."""

    status: str
    service: str
    timestamp: str
    version: str = "1.0.0"


@dataclass(frozen=True, slots=True)
class DependencyCheck:
    """Resultado de checagem de dependência."""

    status: Literal["ok", "degraded", "failed"]
    latency_ms: float | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "latency_ms": self.latency_ms,
            "error": self.error,
        }


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe — verifica se o serviço está rodando."""
    return HealthResponse(
        status="healthy",
        service=get_base_settings().service_name,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness probe: registro de sessões montado e backend alcançável."""
    registry = getattr(request.app.state, "session_registry", None)
    backend_check = await _check_session_backend(
        getattr(request.app.state, "session_backend", None)
    )
    ready = registry is not None and backend_check.status != "failed"

    payload = {
        "status": "ready" if ready else "not_ready",
        "checks": {
            "session_registry": {"status": "ok" if registry is not None else "failed"},
            "session_backend": backend_check.as_dict(),
        },
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return JSONResponse(content=payload, status_code=200 if ready else 503)


async def _check_session_backend(backend: Any | None) -> DependencyCheck:
    if backend is None:
        return DependencyCheck(status="failed", error="not_configured")
    settings = getattr(backend, "settings", None)
    if settings is None:
        return DependencyCheck(status="ok")
    started_at = time.perf_counter()
    try:
        await asyncio.wait_for(backend.get(settings.base_url), timeout=2.0)
    except TimeoutError:
        return DependencyCheck(status="degraded", error="timeout")
    except Exception as exc:
        logger.warning(
            "readiness_session_backend_check_failed",
            extra={"error_type": type(exc).__name__},
        )
        return DependencyCheck(status="degraded", error=type(exc).__name__)
    latency_ms = (time.perf_counter() - started_at) * 1000
    return DependencyCheck(status="ok", latency_ms=round(latency_ms, 2))
