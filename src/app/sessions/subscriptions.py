"""Assinaturas de eventos da sessão com liberação explícita.

Adquiridas ao entrar em LIVE e liberadas em qualquer saída, de modo que
listeners nunca se acumulam entre reconexões.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.protocols.chat_session import ChatSessionProtocol, EventListener

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Subscription:
    """Um listener registrado em uma sessão."""

    session: ChatSessionProtocol
    event: str
    listener: EventListener
    active: bool = True

    def release(self) -> None:
        """Remove o listener. Idempotente."""
        if not self.active:
            return
        self.active = False
        try:
            self.session.off(self.event, self.listener)
        except Exception as exc:
            logger.warning(
                "subscription_release_failed",
                extra={"event": self.event, "error_type": type(exc).__name__},
            )


@dataclass(slots=True)
class SubscriptionSet:
    """Conjunto de assinaturas de uma mesma sessão."""

    items: list[Subscription] = field(default_factory=list)

    def subscribe(
        self,
        session: ChatSessionProtocol,
        event: str,
        listener: EventListener,
    ) -> Subscription:
        session.on(event, listener)
        subscription = Subscription(session=session, event=event, listener=listener)
        self.items.append(subscription)
        return subscription

    def release_all(self) -> int:
        """Libera todas as assinaturas e retorna quantas estavam ativas."""
        released = sum(1 for item in self.items if item.active)
        for item in self.items:
            item.release()
        self.items.clear()
        return released

    def __len__(self) -> int:
        return sum(1 for item in self.items if item.active)
