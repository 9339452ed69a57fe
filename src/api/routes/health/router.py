"""Endpoints de health check (liveness e readiness)."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from fsm import ConnectionState

router = APIRouter()

SERVICE_NAME = "ponte-whatsapp"


class HealthResponse(BaseModel):
    """Resposta do health check."""

    status: str
    service: str
    timestamp: str
    version: str = "1.0.0"


@dataclass(frozen=True, slots=True)
class DependencyCheck:
    """Resultado de checagem de dependência."""

    status: Literal["ok", "skipped", "failed"]
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
    """Liveness: verifica se o processo está rodando."""
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ready")
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness: sessão LIVE e dependências acessíveis."""
    session_check = _check_session(getattr(request.app.state, "gateway", None))
    redis_check, firestore_check = await asyncio.gather(
        _check_redis(getattr(request.app.state, "redis_client", None)),
        _check_firestore(getattr(request.app.state, "firestore_client", None)),
    )

    checks = {
        "session": session_check,
        "redis": redis_check,
        "firestore": firestore_check,
    }
    ready = all(check.status in {"ok", "skipped"} for check in checks.values())
    payload = {
        "status": "ready" if ready else "not_ready",
        "checks": {name: check.as_dict() for name, check in checks.items()},
        "timestamp": datetime.now(UTC).isoformat(),
    }
    return JSONResponse(content=payload, status_code=200 if ready else 503)


def _check_session(gateway: Any | None) -> DependencyCheck:
    if gateway is None:
        return DependencyCheck(status="failed", error="not_configured")
    state = gateway.manager.state
    if state is ConnectionState.LIVE:
        return DependencyCheck(status="ok")
    return DependencyCheck(status="failed", error=state.name.lower())


async def _check_redis(redis_client: Any | None) -> DependencyCheck:
    if redis_client is None:
        return DependencyCheck(status="skipped")
    started_at = time.perf_counter()
    try:
        await asyncio.wait_for(redis_client.ping(), timeout=2.0)
    except TimeoutError:
        return DependencyCheck(status="failed", error="timeout")
    except Exception as exc:
        return DependencyCheck(status="failed", error=type(exc).__name__)
    latency_ms = (time.perf_counter() - started_at) * 1000
    return DependencyCheck(status="ok", latency_ms=round(latency_ms, 2))


async def _check_firestore(firestore_client: Any | None) -> DependencyCheck:
    if firestore_client is None:
        return DependencyCheck(status="skipped")
    started_at = time.perf_counter()
    try:
        await asyncio.wait_for(
            asyncio.to_thread(_list_one_collection, firestore_client),
            timeout=3.0,
        )
    except TimeoutError:
        return DependencyCheck(status="failed", error="timeout")
    except Exception as exc:
        return DependencyCheck(status="failed", error=type(exc).__name__)
    latency_ms = (time.perf_counter() - started_at) * 1000
    return DependencyCheck(status="ok", latency_ms=round(latency_ms, 2))


def _list_one_collection(firestore_client: Any) -> None:
    next(iter(firestore_client.collections()), None)
