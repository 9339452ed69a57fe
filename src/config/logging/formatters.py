"""Formatter JSON com campos padronizados.

Campos obrigatórios:
- asctime, level, logger, message
- correlation_id, service

Campos passados em `extra` são serializados como chaves de primeiro nível.
"""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

REQUIRED_LOG_FIELDS = (
    "asctime",
    "levelname",
    "name",
    "message",
    "correlation_id",
    "service",
)

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter() -> JsonFormatter:
    """Cria o formatter JSON do serviço.

    Exemplo de output:
        {
            "asctime": "2026-10-19 10:30:00,120",
            "level": "INFO",
            "logger": "app.connection.manager",
            "message": "connection_live",
            "correlation_id": "",
            "service": "ponte_whatsapp",
            "attempts": 0
        }
    """
    format_string = " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS)

    return JsonFormatter(
        format_string,
        rename_fields=FIELD_RENAME_MAP,
        json_ensure_ascii=False,
    )
