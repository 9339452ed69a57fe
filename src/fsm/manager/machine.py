"""
Máquina de estados (FSMStateMachine) do ciclo de vida da conexão.

Valida transições contra o grafo e os guards e mantém um histórico
limitado para auditoria. Não executa efeitos colaterais: quem decide
o que fazer em cada estado é o ConnectionLifecycleManager.
"""

from collections import deque
from typing import Any

from fsm.rules.guards import GuardResult, evaluate_guards
from fsm.states.connection import (
    DEFAULT_INITIAL_STATE,
    ConnectionState,
    is_terminal,
)
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import StateTransition, TransitionResult

# Reconexões acontecem por horas; o histórico não pode crescer sem limite
DEFAULT_HISTORY_LIMIT = 200


class FSMStateMachine:
    """
    Máquina de estados de uma conexão.

    Attributes:
        current_state: Estado atual
        history: Últimas transições realizadas
    """

    __slots__ = ("_connection_id", "_current_state", "_history")

    def __init__(
        self,
        initial_state: ConnectionState | None = None,
        connection_id: str = "",
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self._current_state = initial_state or DEFAULT_INITIAL_STATE
        self._history: deque[StateTransition] = deque(maxlen=history_limit)
        self._connection_id = connection_id

    @property
    def current_state(self) -> ConnectionState:
        """Estado atual da máquina."""
        return self._current_state

    @property
    def history(self) -> list[StateTransition]:
        """Histórico de transições (cópia)."""
        return list(self._history)

    @property
    def connection_id(self) -> str:
        """Identificador da conexão para logs."""
        return self._connection_id

    @property
    def is_terminal(self) -> bool:
        """Verifica se está em estado terminal."""
        return is_terminal(self._current_state)

    def can_transition_to(self, target: ConnectionState) -> bool:
        """Verifica se pode transitar para o estado alvo."""
        if not is_transition_valid(self._current_state, target):
            return False
        return evaluate_guards(self._current_state, target).allowed

    def get_valid_targets(self) -> frozenset[ConnectionState]:
        """Retorna estados de destino válidos a partir do estado atual."""
        return get_valid_targets(self._current_state)

    def transition(
        self,
        target: ConnectionState,
        trigger: str,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transição de estado.

        Args:
            target: Estado de destino
            trigger: Gatilho (ex: 'start', 'connection_closed')
            metadata: Dados adicionais para auditoria (nunca PII)

        Returns:
            TransitionResult com sucesso/falha e dados da transição
        """
        if not is_transition_valid(self._current_state, target):
            return TransitionResult(
                success=False,
                error_reason=(
                    f"Transição inválida: {self._current_state.name} → {target.name}"
                ),
            )

        guard_result: GuardResult = evaluate_guards(self._current_state, target)
        if not guard_result.allowed:
            return TransitionResult(
                success=False,
                error_reason=guard_result.reason,
            )

        transition = StateTransition(
            from_state=self._current_state,
            to_state=target,
            trigger=trigger,
            metadata=metadata or {},
        )

        self._current_state = target
        self._history.append(transition)

        return TransitionResult(success=True, transition=transition)

    def get_state_summary(self) -> dict[str, Any]:
        """Resumo do estado atual (seguro para logs e /session)."""
        last = self._history[-1] if self._history else None
        return {
            "connection_id": self._connection_id,
            "current_state": self._current_state.name,
            "is_terminal": self.is_terminal,
            "transition_count": len(self._history),
            "last_trigger": last.trigger if last else None,
            "valid_targets": sorted(s.name for s in self.get_valid_targets()),
        }

    def get_history_summary(self) -> list[dict[str, Any]]:
        """Histórico em formato seguro para logs."""
        return [t.to_log_dict() for t in self._history]


def create_fsm(
    connection_id: str,
    initial_state: ConnectionState | None = None,
) -> FSMStateMachine:
    """Factory da FSM de uma conexão."""
    return FSMStateMachine(
        initial_state=initial_state,
        connection_id=connection_id,
    )
