"""
Exports públicos do módulo fsm/manager.

Máquina de estados do ciclo de vida da conexão.
"""

from fsm.manager.machine import (
    DEFAULT_HISTORY_LIMIT,
    FSMStateMachine,
    create_fsm,
)

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "FSMStateMachine",
    "create_fsm",
]
