"""Gerenciador do ciclo de vida da conexão WhatsApp.

Dono exclusivo da única sessão viva do processo. Carrega credenciais,
executa o handshake, assina os eventos da sessão, reage a fechamentos
com a escada de backoff e entrega a sessão a quem pedir via
`get_session()`.

Estados (fsm.ConnectionState):
    IDLE → CONNECTING → AUTHENTICATING → LIVE → CLOSING → IDLE
    FATAL é terminal: sessão fechada, listeners liberados, aguardando
    recebem SessionFatalError e o host é sinalizado para encerrar.

Política de fechamento:
    - logged out: apaga credenciais e faz uma única reconexão após
      atraso fixo, fora da escada de backoff
    - qualquer outro motivo: tentativa += 1; acima do máximo → FATAL;
      senão reconecta após min(base * tentativa, teto)

Só existe um timer de reconexão por vez; agendar outro substitui o
anterior.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from functools import partial
from typing import TYPE_CHECKING, Any

from app.observability import record_reconnect_scheduled
from app.protocols.chat_session import (
    EVENT_CONNECTION_UPDATE,
    EVENT_CREDS_UPDATE,
    EVENT_MESSAGE_BATCH,
    ConnectionUpdate,
    DisconnectReason,
)
from app.sessions.subscriptions import SubscriptionSet
from fsm import ConnectionState, FSMStateMachine
from utils.errors import LoggedOutError, SessionFatalError

if TYPE_CHECKING:
    from app.domain.credentials import Credentials
    from app.protocols.chat_session import ChatSessionProtocol, SessionConnectorProtocol
    from app.protocols.credential_store import CredentialStoreProtocol
    from app.sessions.retry import RetryState

logger = logging.getLogger(__name__)

BatchHandler = Callable[[Sequence[Mapping[str, Any]]], Awaitable[None]]
SleepFunc = Callable[[float], Awaitable[None]]


class ConnectionLifecycleManager:
    """Máquina de estados da sessão única com reconexão limitada."""

    def __init__(
        self,
        *,
        connector: SessionConnectorProtocol,
        credential_store: CredentialStoreProtocol,
        retry: RetryState,
        logged_out_delay_seconds: float = 3.0,
        on_fatal: Callable[[], None] | None = None,
        on_qr: Callable[[str], None] | None = None,
        batch_handler: BatchHandler | None = None,
        sleep: SleepFunc = asyncio.sleep,
        connection_id: str = "whatsapp",
    ) -> None:
        """Inicializa o gerenciador (não conecta).

        Args:
            connector: Transporte que executa o handshake.
            credential_store: Persistência das credenciais.
            retry: Estado da escada de backoff.
            logged_out_delay_seconds: Atraso da reconexão única após logout.
            on_fatal: Callback do host para encerrar o processo.
            on_qr: Exibe o QR de pareamento (ex: terminal).
            batch_handler: Consumidor de lotes de mensagens recebidas.
            sleep: Função de espera dos timers de reconexão.
            connection_id: Identificador para logs.
        """
        self._connector = connector
        self._credential_store = credential_store
        self._retry = retry
        self._logged_out_delay = logged_out_delay_seconds
        self._on_fatal = on_fatal
        self._on_qr = on_qr
        self._batch_handler = batch_handler
        self._sleep = sleep

        self._fsm = FSMStateMachine(connection_id=connection_id)
        self._session: ChatSessionProtocol | None = None
        self._credentials: Credentials | None = None
        self._authenticated = False
        self._subscriptions = SubscriptionSet()
        self._waiters: list[asyncio.Future[ChatSessionProtocol]] = []
        self._reconnect_task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self._fatal_reason: str | None = None
        self._reconnects_suspended = False

    # ──────────────────────────────────────────────────────────────
    # Estado
    # ──────────────────────────────────────────────────────────────

    @property
    def state(self) -> ConnectionState:
        return self._fsm.current_state

    @property
    def is_live(self) -> bool:
        return self.state is ConnectionState.LIVE and self._session is not None

    @property
    def authenticated(self) -> bool:
        """Identidade confirmada pelo remoto (conexão "open" ou já registrada)."""
        return self._authenticated

    @property
    def retry(self) -> RetryState:
        return self._retry

    @property
    def fsm(self) -> FSMStateMachine:
        return self._fsm

    def set_batch_handler(self, handler: BatchHandler) -> None:
        """Define o consumidor de lotes (o loop de despacho depende deste gerenciador)."""
        self._batch_handler = handler

    def snapshot(self) -> dict[str, Any]:
        """Resumo para logs e para a rota /session."""
        return {
            **self._fsm.get_state_summary(),
            "authenticated": self._authenticated,
            "retry_attempt": self._retry.attempt,
            "max_retries": self._retry.max_attempts,
            "reconnect_scheduled": self._reconnect_task is not None
            and not self._reconnect_task.done(),
            "fatal_reason": self._fatal_reason,
        }

    # ──────────────────────────────────────────────────────────────
    # API pública
    # ──────────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Inicia a conexão a partir de IDLE. Nada faz em outros estados.

        Raises:
            SessionFatalError: Se o gerenciador já está em FATAL.
        """
        state = self.state
        if state is ConnectionState.FATAL:
            raise SessionFatalError(self._fatal_reason or "fatal")
        if state is not ConnectionState.IDLE:
            return

        self._cancel_reconnect()
        self._reconnects_suspended = False
        self._transition(ConnectionState.CONNECTING, "start")
        await self._connect()

    async def get_session(self) -> ChatSessionProtocol:
        """Retorna a sessão viva, conectando se necessário.

        Aguarda a próxima transição para LIVE, limitada pela mesma escada
        de backoff (sem timeout próprio).

        Raises:
            SessionFatalError: Se o ciclo de vida terminar em FATAL.
        """
        if self.is_live:
            return self._session  # type: ignore[return-value]
        if self.state is ConnectionState.FATAL:
            raise SessionFatalError(self._fatal_reason or "fatal")

        waiter: asyncio.Future[ChatSessionProtocol] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        if self.state is ConnectionState.IDLE:
            self._spawn(self.start(), name="connection_start")
        try:
            return await waiter
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)

    async def stop(self) -> None:
        """Encerramento gracioso (shutdown do host)."""
        self._cancel_reconnect()
        state = self.state
        if state is ConnectionState.LIVE:
            await self._teardown("stop")
        elif state in (ConnectionState.CONNECTING, ConnectionState.AUTHENTICATING):
            self._transition(ConnectionState.IDLE, "stop")
        for waiter in self._waiters:
            if not waiter.done():
                waiter.cancel()
        self._waiters.clear()
        logger.info("connection_stopped", extra={"state": self.state.name})

    def suspend_reconnects(self) -> None:
        """Cancela o timer pendente e impede novos agendamentos.

        Chamado no shutdown antes de `drain()`, para que nenhum timer abra
        sessão nova enquanto o host encerra. `start()` reabilita.
        """
        had_timer = self._reconnect_task is not None and not self._reconnect_task.done()
        self._reconnects_suspended = True
        self._cancel_reconnect()
        logger.info("connection_reconnects_suspended", extra={"cancelled_timer": had_timer})

    async def drain(self) -> None:
        """Aguarda tasks internas pendentes (fechamento, reconexão, lotes)."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if self._reconnect_task is not None and not self._reconnect_task.done():
                pending.append(self._reconnect_task)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # ──────────────────────────────────────────────────────────────
    # Conexão
    # ──────────────────────────────────────────────────────────────

    async def _connect(self) -> None:
        try:
            credentials = await self._credential_store.load()
        except Exception as exc:
            logger.error(
                "credentials_unavailable",
                extra={"error_type": type(exc).__name__},
            )
            await self._enter_fatal("auth_unavailable")
            return

        if self.state is not ConnectionState.CONNECTING:
            return

        self._credentials = credentials
        self._authenticated = credentials.is_registered
        self._transition(
            ConnectionState.AUTHENTICATING,
            "credentials_loaded",
            {"pairing_required": credentials.is_empty},
        )

        try:
            session = await self._connector.connect(credentials)
        except LoggedOutError:
            if self.state is not ConnectionState.AUTHENTICATING:
                return
            self._transition(ConnectionState.CONNECTING, "handshake_logged_out")
            await self._handle_logged_out()
            return
        except Exception as exc:
            if self.state is not ConnectionState.AUTHENTICATING:
                return
            close_reason = getattr(exc, "close_reason", None)
            logger.warning(
                "connection_handshake_failed",
                extra={
                    "error_type": type(exc).__name__,
                    "close_reason": close_reason,
                    "attempt": self._retry.attempt,
                },
            )
            self._transition(
                ConnectionState.CONNECTING,
                "handshake_failed",
                {"close_reason": close_reason},
            )
            await self._schedule_retry("handshake_failed")
            return

        if self.state is not ConnectionState.AUTHENTICATING:
            # stop() durante o handshake
            await self._close_quietly(session)
            return

        self._bind(session)

    def _bind(self, session: ChatSessionProtocol) -> None:
        self._session = session
        self._subscriptions.subscribe(
            session, EVENT_CREDS_UPDATE, partial(self._on_creds_update, session)
        )
        self._subscriptions.subscribe(
            session, EVENT_CONNECTION_UPDATE, partial(self._on_connection_update, session)
        )
        self._subscriptions.subscribe(
            session, EVENT_MESSAGE_BATCH, partial(self._on_message_batch, session)
        )
        self._transition(ConnectionState.LIVE, "handshake_succeeded")
        logger.info(
            "connection_live",
            extra={"authenticated": self._authenticated, "subscriptions": len(self._subscriptions)},
        )

        for waiter in self._waiters:
            if not waiter.done():
                waiter.set_result(session)
        self._waiters.clear()

    async def _teardown(self, trigger: str, metadata: dict[str, Any] | None = None) -> None:
        """LIVE → CLOSING → IDLE, liberando assinaturas e fechando a sessão."""
        session = self._session
        self._transition(ConnectionState.CLOSING, trigger, metadata)
        self._subscriptions.release_all()
        self._session = None
        self._authenticated = False
        if session is not None:
            await self._close_quietly(session)
        self._transition(ConnectionState.IDLE, "session_released")

    # ──────────────────────────────────────────────────────────────
    # Eventos da sessão
    # ──────────────────────────────────────────────────────────────

    async def _on_creds_update(self, session: ChatSessionProtocol, update: Any) -> None:
        if session is not self._session or self._credentials is None:
            return
        if isinstance(update, Mapping):
            self._credentials.apply_update(dict(update))
        try:
            await self._credential_store.save(self._credentials)
        except Exception as exc:
            logger.error(
                "credentials_save_failed",
                extra={"error_type": type(exc).__name__},
            )

    async def _on_connection_update(self, session: ChatSessionProtocol, update: Any) -> None:
        if session is not self._session:
            return
        if not isinstance(update, ConnectionUpdate):
            update = ConnectionUpdate.from_mapping(update)

        if update.qr:
            logger.info("qr_received")
            if self._on_qr is not None:
                self._on_qr(update.qr)

        if update.state == "open":
            self._authenticated = True
            self._retry.reset()
            logger.info("connection_opened")
        elif update.state == "close":
            logger.warning(
                "connection_closed",
                extra={"close_reason": update.close_reason, "attempt": self._retry.attempt},
            )
            self._spawn(self._handle_close(session, update.close_reason), name="connection_close")

    async def _on_message_batch(self, session: ChatSessionProtocol, batch: Any) -> None:
        if session is not self._session or self._batch_handler is None:
            return
        messages = batch.get("messages") if isinstance(batch, Mapping) else batch
        if not messages:
            return
        self._spawn(self._batch_handler(list(messages)), name="message_batch")

    # ──────────────────────────────────────────────────────────────
    # Fechamento e reconexão
    # ──────────────────────────────────────────────────────────────

    async def _handle_close(self, session: ChatSessionProtocol, close_reason: int | None) -> None:
        if session is not self._session or self.state is not ConnectionState.LIVE:
            return
        await self._teardown("connection_closed", {"close_reason": close_reason})

        if close_reason == DisconnectReason.LOGGED_OUT:
            self._transition(ConnectionState.CONNECTING, "logged_out")
            await self._handle_logged_out()
            return

        self._transition(ConnectionState.CONNECTING, "connection_closed")
        await self._schedule_retry("connection_closed")

    async def _handle_logged_out(self) -> None:
        logger.warning("session_logged_out", extra={"delay_seconds": self._logged_out_delay})
        self._credentials = None
        self._authenticated = False
        try:
            await self._credential_store.delete()
        except Exception as exc:
            logger.error(
                "credentials_delete_failed",
                extra={"error_type": type(exc).__name__},
            )
        self._schedule_reconnect(self._logged_out_delay, "logged_out")

    async def _schedule_retry(self, trigger: str) -> None:
        delay = self._retry.register_failure()
        if delay is None:
            logger.error(
                "connection_retries_exhausted",
                extra={"attempt": self._retry.attempt, "max_retries": self._retry.max_attempts},
            )
            await self._enter_fatal("retries_exhausted")
            return
        record_reconnect_scheduled(self._retry.attempt, delay, trigger)
        self._schedule_reconnect(delay, trigger)

    def _schedule_reconnect(self, delay: float, trigger: str) -> None:
        self._cancel_reconnect()
        if self._reconnects_suspended:
            logger.info("connection_reconnect_skipped", extra={"trigger": trigger})
            return
        task = asyncio.create_task(
            self._reconnect_after(delay, trigger),
            name="connection_reconnect",
        )
        task.add_done_callback(self._on_task_done)
        self._reconnect_task = task

    async def _reconnect_after(self, delay: float, trigger: str) -> None:
        await self._sleep(delay)
        if self._reconnect_task is asyncio.current_task():
            self._reconnect_task = None
        if self.state is not ConnectionState.CONNECTING:
            return
        logger.info(
            "connection_reconnecting",
            extra={"trigger": trigger, "attempt": self._retry.attempt},
        )
        await self._connect()

    def _cancel_reconnect(self) -> None:
        task = self._reconnect_task
        self._reconnect_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _enter_fatal(self, reason: str) -> None:
        if self.state is ConnectionState.FATAL:
            return
        self._cancel_reconnect()
        session = self._session
        self._subscriptions.release_all()
        self._session = None
        if session is not None:
            await self._close_quietly(session)

        self._fatal_reason = reason
        self._transition(ConnectionState.FATAL, reason)
        logger.critical(
            "connection_fatal",
            extra={"reason": reason, "attempt": self._retry.attempt},
        )

        error = SessionFatalError(reason)
        for waiter in self._waiters:
            if not waiter.done():
                waiter.set_exception(error)
        self._waiters.clear()

        if self._on_fatal is not None:
            try:
                self._on_fatal()
            except Exception as exc:
                logger.error(
                    "fatal_callback_failed",
                    extra={"error_type": type(exc).__name__},
                )

    # ──────────────────────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────────────────────

    def _transition(
        self,
        target: ConnectionState,
        trigger: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        result = self._fsm.transition(target, trigger, metadata)
        if not result.success or result.transition is None:
            raise RuntimeError(result.error_reason)
        logger.info("connection_state_changed", extra=result.transition.to_log_dict())

    async def _close_quietly(self, session: ChatSessionProtocol) -> None:
        try:
            await session.close()
        except Exception as exc:
            logger.warning(
                "session_close_failed",
                extra={"error_type": type(exc).__name__},
            )

    def _spawn(self, coroutine: Awaitable[Any], *, name: str) -> None:
        task = asyncio.ensure_future(coroutine)
        task.set_name(name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                logger.error(
                    "connection_task_failed",
                    extra={"task": task.get_name(), "error_type": type(exc).__name__},
                )
