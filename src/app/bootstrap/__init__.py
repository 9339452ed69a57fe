"""Bootstrap da aplicação — inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
conecta implementações concretas aos protocolos.

Uso:
    from app.bootstrap import initialize_app, validate_runtime_settings

    initialize_app()
    validate_runtime_settings()
    gateway = build_gateway(on_fatal=...)
"""

from __future__ import annotations

import logging

from app.observability import get_correlation_id
from config.logging import configure_logging
from config.settings import (
    get_base_settings,
    get_credential_settings,
    get_firestore_settings,
    get_gcs_settings,
    get_openai_settings,
    get_queue_settings,
    get_whatsapp_session_settings,
)

STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Configura logging estruturado JSON com correlation_id.

    Deve ser chamada uma vez no início do serviço.
    """
    base = get_base_settings()
    configure_logging(
        level="DEBUG" if base.debug else base.log_level,
        service_name=base.service_name.replace("-", "_"),
        correlation_id_getter=get_correlation_id,
    )


def initialize_test_app() -> None:
    """Inicializa logging para testes (DEBUG)."""
    configure_logging(
        level="DEBUG",
        service_name="ponte_whatsapp_test",
        correlation_id_getter=get_correlation_id,
    )


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.
    """
    base = get_base_settings()
    strict_mode = base.environment in STRICT_VALIDATION_ENVS
    errors: list[str] = []

    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"whatsapp: {error}" for error in get_whatsapp_session_settings().validate())
    errors.extend(f"queue: {error}" for error in get_queue_settings().validate(base.redis_url))
    errors.extend(f"credentials: {error}" for error in get_credential_settings().validate())
    errors.extend(f"gcs: {error}" for error in get_gcs_settings().validate())
    errors.extend(
        f"firestore: {error}" for error in get_firestore_settings().validate(base.gcp_project)
    )
    errors.extend(f"openai: {error}" for error in get_openai_settings().validate())

    if get_credential_settings().backend == "redis" and not base.redis_url:
        errors.append("credentials: REDIS_URL obrigatório com CREDENTIALS_BACKEND=redis")

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": base.environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": base.environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {base.environment}:\n{details}")
