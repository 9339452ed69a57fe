"""Entrypoint da ponte WhatsApp.

Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI). O lifespan
monta a ponte (sessão, despacho de entrada, consumo de saída), inicia
as tasks de fundo e as encerra no shutdown.

Uso (produção):
    ponte-whatsapp
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Sessão em FATAL (credenciais indisponíveis, tentativas esgotadas)
encerra o processo com código de saída 1.
"""

from __future__ import annotations

import os
import signal
import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from api.routes import create_api_router
from app.bootstrap import initialize_app, validate_runtime_settings
from app.bootstrap.clients import create_async_redis_client, create_firestore_client
from app.bootstrap.gateway import build_gateway
from config.logging import get_logger
from config.settings import get_base_settings, get_firestore_settings, get_queue_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    import uvicorn

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)

_server: uvicorn.Server | None = None
_fatal = False


def request_shutdown() -> None:
    """Sinaliza ao host que a sessão entrou em FATAL."""
    global _fatal
    _fatal = True
    logger.critical("shutdown_requested", extra={"reason": "session_fatal"})
    if _server is not None:
        _server.should_exit = True
    else:
        os.kill(os.getpid(), signal.SIGTERM)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Valida configurações
    - Inicializa clientes (Redis, Firestore) usados pelo readiness
    - Monta e inicia a ponte

    Shutdown:
    - Para consumidores, drena lotes pendentes, fecha a sessão
    - Fecha conexões
    """
    logger.info("app_starting")
    validate_runtime_settings()
    app.state.redis_client = None
    app.state.firestore_client = None

    if get_queue_settings().backend == "redis":
        try:
            app.state.redis_client = create_async_redis_client()
        except Exception as exc:
            logger.warning("redis_client_not_ready", extra={"error_type": type(exc).__name__})

    if get_firestore_settings().backend == "firestore":
        try:
            app.state.firestore_client = create_firestore_client()
        except Exception as exc:
            logger.warning("firestore_client_not_ready", extra={"error_type": type(exc).__name__})

    gateway = build_gateway(on_fatal=request_shutdown)
    app.state.gateway = gateway
    await gateway.start()

    yield

    logger.info("app_shutting_down")
    await gateway.stop()
    redis_client = getattr(app.state, "redis_client", None)
    if redis_client is not None:
        await redis_client.aclose()


def create_app() -> FastAPI:
    """Cria e configura a aplicação FastAPI."""
    fastapi_app = FastAPI(
        title="Ponte WhatsApp",
        description="Gateway entre a sessão WhatsApp e o barramento de mensagens",
        version="1.0.0",
        lifespan=lifespan,
    )
    fastapi_app.include_router(create_api_router())
    logger.info("app_configured")
    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Executa o servidor (console script `ponte-whatsapp`)."""
    import uvicorn

    global _server
    settings = get_base_settings()
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
    _server = uvicorn.Server(config)
    _server.run()
    if _fatal:
        sys.exit(1)


if __name__ == "__main__":
    main()
