"""
Estados do ciclo de vida da conexão WhatsApp.

Uma única sessão viva por processo. O ciclo normal é
IDLE → CONNECTING → AUTHENTICATING → LIVE → CLOSING → IDLE;
FATAL é terminal e alcançável de qualquer estado não-terminal.
"""

from enum import StrEnum


class ConnectionState(StrEnum):
    """
    Estados canônicos da conexão com o serviço remoto.

    Estados não-terminais:
        - IDLE: Sem sessão e sem reconexão agendada
        - CONNECTING: Carregando credenciais ou aguardando reconexão agendada
        - AUTHENTICATING: Handshake com o serviço remoto em andamento
        - LIVE: Sessão ativa, eventos assinados
        - CLOSING: Sessão sendo encerrada (assinaturas liberadas)

    Estado terminal:
        - FATAL: Falha irrecuperável; o processo deve encerrar
    """

    IDLE = "IDLE"
    CONNECTING = "CONNECTING"
    AUTHENTICATING = "AUTHENTICATING"
    LIVE = "LIVE"
    CLOSING = "CLOSING"

    FATAL = "FATAL"

    def __str__(self) -> str:
        return self.value


TERMINAL_STATES: frozenset[ConnectionState] = frozenset({
    ConnectionState.FATAL,
})

DEFAULT_INITIAL_STATE: ConnectionState = ConnectionState.IDLE


def is_terminal(state: ConnectionState) -> bool:
    """Verifica se o estado é terminal."""
    return state in TERMINAL_STATES


def is_valid_state(state: ConnectionState) -> bool:
    """Verifica se o valor é um ConnectionState."""
    return isinstance(state, ConnectionState)
