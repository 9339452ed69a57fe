"""Material de autenticação da sessão WhatsApp.

O conteúdo é opaco para a ponte: o transporte define as chaves e emite
`creds-update` com o que mudou. A ponte só mescla e persiste.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class Credentials:
    """Credenciais serializáveis (JSON) de uma identidade.

    Attributes:
        data: Estado de autenticação (chaves, identidade, registro)
    """

    data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """Sem material: a conexão vai exigir pareamento por QR."""
        return not self.data

    @property
    def is_registered(self) -> bool:
        return bool(self.data.get("registered"))

    def apply_update(self, update: dict[str, Any]) -> None:
        """Mescla material renovado (chaves de primeiro nível substituídas)."""
        self.data.update(copy.deepcopy(update))

    def snapshot(self) -> dict[str, Any]:
        """Cópia independente para persistência."""
        return copy.deepcopy(self.data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Credentials:
        return cls(data=copy.deepcopy(data))
