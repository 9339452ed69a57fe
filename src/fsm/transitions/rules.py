"""
Regras de transição válidas entre estados da conexão.

Grafo de transições da máquina de estados do ciclo de vida.
"""

from fsm.states.connection import TERMINAL_STATES, ConnectionState

TransitionMap = dict[ConnectionState, frozenset[ConnectionState]]

# Chave: estado de origem; valor: destinos permitidos
VALID_TRANSITIONS: TransitionMap = {
    # IDLE: start() ou reconexão agendada após encerramento
    ConnectionState.IDLE: frozenset({
        ConnectionState.CONNECTING,
        ConnectionState.FATAL,
    }),

    # CONNECTING: credenciais carregadas, inicia handshake
    ConnectionState.CONNECTING: frozenset({
        ConnectionState.AUTHENTICATING,
        ConnectionState.IDLE,
        ConnectionState.FATAL,
    }),

    # AUTHENTICATING: handshake ok, ou falha com reconexão agendada
    ConnectionState.AUTHENTICATING: frozenset({
        ConnectionState.LIVE,
        ConnectionState.CONNECTING,
        ConnectionState.IDLE,
        ConnectionState.FATAL,
    }),

    # LIVE: fechamento remoto ou stop()
    ConnectionState.LIVE: frozenset({
        ConnectionState.CLOSING,
        ConnectionState.FATAL,
    }),

    # CLOSING: sessão liberada
    ConnectionState.CLOSING: frozenset({
        ConnectionState.IDLE,
        ConnectionState.FATAL,
    }),

    ConnectionState.FATAL: frozenset(),
}


def get_valid_targets(state: ConnectionState) -> frozenset[ConnectionState]:
    """
    Retorna os estados de destino válidos para um estado de origem.

    Args:
        state: Estado de origem

    Returns:
        Conjunto de destinos permitidos (vazio se terminal)
    """
    return VALID_TRANSITIONS.get(state, frozenset())


def is_transition_valid(from_state: ConnectionState, to_state: ConnectionState) -> bool:
    """Verifica se uma transição é permitida pelo grafo."""
    if from_state in TERMINAL_STATES:
        return False
    return to_state in get_valid_targets(from_state)


def validate_transition_map() -> list[str]:
    """
    Valida a integridade do mapa de transições.

    Verifica:
    - Todos os estados do enum estão no mapa
    - Estados terminais têm conjunto vazio
    - Todo estado não-terminal alcança FATAL

    Returns:
        Lista de erros encontrados (vazia se válido)
    """
    errors: list[str] = []

    for state in ConnectionState:
        if state not in VALID_TRANSITIONS:
            errors.append(f"Estado {state.name} ausente em VALID_TRANSITIONS")

    for state in TERMINAL_STATES:
        targets = VALID_TRANSITIONS.get(state, frozenset())
        if targets:
            errors.append(
                f"Estado terminal {state.name} não deveria ter transições: {targets}"
            )

    for from_state, targets in VALID_TRANSITIONS.items():
        if from_state in TERMINAL_STATES:
            continue
        if ConnectionState.FATAL not in targets:
            errors.append(f"Estado {from_state.name} não alcança FATAL")

    return errors
