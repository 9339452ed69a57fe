"""Ciclo de vida da sessão WhatsApp.

Exporta o gerenciador de conexão e seus blocos (retry e assinaturas).
"""

from app.sessions.connection_manager import BatchHandler, ConnectionLifecycleManager
from app.sessions.retry import RetryState
from app.sessions.subscriptions import Subscription, SubscriptionSet

__all__ = [
    "BatchHandler",
    "ConnectionLifecycleManager",
    "RetryState",
    "Subscription",
    "SubscriptionSet",
]
