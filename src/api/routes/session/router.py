"""Estado da sessão WhatsApp (diagnóstico operacional)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request, status

router = APIRouter()


@router.get("/session")
async def session_state(request: Request) -> dict[str, Any]:
    """Resumo do ciclo de vida: estado, identidade e tentativas."""
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="not_ready")
    return gateway.manager.snapshot()
