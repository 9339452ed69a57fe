"""Estado da escada de backoff de reconexão.

Atraso da tentativa N (1-based): min(base * N, teto). Ao ultrapassar
`max_attempts` a escada se esgota e o ciclo de vida vai para FATAL.
Mutado apenas pelo ConnectionLifecycleManager.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RetryState:
    """Contador de tentativas e parâmetros do backoff.

    Attributes:
        max_attempts: Tentativas permitidas antes do estado fatal
        base_seconds: Incremento linear por tentativa
        cap_seconds: Atraso máximo
        attempt: Falhas consecutivas desde a última conexão bem-sucedida
    """

    max_attempts: int
    base_seconds: float
    cap_seconds: float
    attempt: int = 0

    @property
    def exhausted(self) -> bool:
        return self.attempt > self.max_attempts

    def register_failure(self) -> float | None:
        """Conta uma falha e devolve o atraso da próxima tentativa.

        Returns:
            Atraso em segundos, ou None se a escada se esgotou.
        """
        self.attempt += 1
        if self.exhausted:
            return None
        return self.next_delay()

    def next_delay(self) -> float:
        """Atraso correspondente à tentativa atual."""
        return min(self.base_seconds * self.attempt, self.cap_seconds)

    def reset(self) -> None:
        """Zera a contagem após conexão bem-sucedida."""
        self.attempt = 0
