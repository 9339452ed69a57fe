"""Observabilidade — correlation_id e métricas via logs estruturados.

Uso:
    from app.observability import correlation_scope, get_correlation_id
    from app.observability import record_dispatch_outcome, record_latency
"""

from app.observability.correlation import (
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from app.observability.metrics import (
    record_dispatch_outcome,
    record_latency,
    record_outbound_outcome,
    record_reconnect_scheduled,
)

__all__ = [
    "correlation_scope",
    "generate_correlation_id",
    "get_correlation_id",
    "record_dispatch_outcome",
    "record_latency",
    "record_outbound_outcome",
    "record_reconnect_scheduled",
    "reset_correlation_id",
    "set_correlation_id",
]
