"""Endpoints de health check (liveness e readiness)."""

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

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "iot-hub"
REDIS_PING_TIMEOUT_SECONDS = 2.0


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
    """Liveness probe: verifica se o serviço está rodando."""
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness probe: Holder montado e loop de rede ativo.

    Redis indisponível não derruba o serviço (roteamento de tokens é
    best-effort) e aparece como ``degraded``.
    """
    holder = getattr(request.app.state, "holder", None)
    transport_check = _check_transport(holder)
    redis_check = await _check_redis(holder)

    ready = transport_check.status == "ok"
    if not ready:
        status = "not_ready"
    elif redis_check.status == "ok":
        status = "ready"
    else:
        status = "degraded"

    payload = {
        "status": status,
        "checks": {
            "transport": transport_check.as_dict(),
            "redis": redis_check.as_dict(),
        },
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return JSONResponse(content=payload, status_code=200 if ready else 503)


def _check_transport(holder: Any | None) -> DependencyCheck:
    if holder is None:
        return DependencyCheck(status="failed", error="not_configured")
    if holder.is_closed or not holder.transport_holder.is_running:
        return DependencyCheck(status="failed", error="stopped")
    return DependencyCheck(status="ok")


async def _check_redis(holder: Any | None) -> DependencyCheck:
    if holder is None or holder.is_closed:
        return DependencyCheck(status="degraded", error="not_configured")
    started_at = time.perf_counter()
    try:
        await asyncio.wait_for(
            asyncio.to_thread(holder.redis_client.ping),
            timeout=REDIS_PING_TIMEOUT_SECONDS,
        )
    except TimeoutError:
        return DependencyCheck(status="degraded", error="timeout")
    except Exception as exc:
        logger.warning("readiness_redis_check_failed", extra={"error_type": type(exc).__name__})
        return DependencyCheck(status="degraded", error=type(exc).__name__)
    latency_ms = (time.perf_counter() - started_at) * 1000
    return DependencyCheck(status="ok", latency_ms=round(latency_ms, 2))
