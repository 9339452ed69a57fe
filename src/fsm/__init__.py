"""
Módulo FSM — máquina de estados do ciclo de vida da conexão WhatsApp.

Estrutura:
    - states/: ConnectionState
    - transitions/: Grafo de transições (VALID_TRANSITIONS)
    - rules/: Guards
    - manager/: FSMStateMachine
    - types/: StateTransition, TransitionResult
"""

from fsm.manager import (
    DEFAULT_HISTORY_LIMIT,
    FSMStateMachine,
    create_fsm,
)
from fsm.rules import (
    GuardResult,
    evaluate_guards,
)
from fsm.states import (
    DEFAULT_INITIAL_STATE,
    TERMINAL_STATES,
    ConnectionState,
    is_terminal,
    is_valid_state,
)
from fsm.transitions import (
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)
from fsm.types import (
    StateTransition,
    TransitionResult,
)

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "DEFAULT_INITIAL_STATE",
    "TERMINAL_STATES",
    "VALID_TRANSITIONS",
    "ConnectionState",
    "FSMStateMachine",
    "GuardResult",
    "StateTransition",
    "TransitionResult",
    "create_fsm",
    "evaluate_guards",
    "get_valid_targets",
    "is_terminal",
    "is_transition_valid",
    "is_valid_state",
    "validate_transition_map",
]
