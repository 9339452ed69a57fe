"""Carregamento do conector do transporte WhatsApp.

O transporte é uma biblioteca externa. SESSION_CONNECTOR aponta para
"pacote.modulo:atributo", onde o atributo é um conector pronto (objeto
com `connect`), uma classe ou uma factory sem argumentos.
"""

from __future__ import annotations

import importlib
import inspect
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.protocols.chat_session import SessionConnectorProtocol

logger = logging.getLogger(__name__)


def load_connector(path: str) -> SessionConnectorProtocol:
    """Resolve e instancia o conector a partir de "modulo:atributo".

    Raises:
        ValueError: Caminho vazio ou fora do formato.
        ImportError: Módulo inexistente.
        AttributeError: Atributo inexistente.
        TypeError: O alvo não expõe `connect`.
    """
    module_name, sep, attribute = path.partition(":")
    if not sep or not module_name or not attribute:
        msg = f"SESSION_CONNECTOR inválido (esperado 'modulo:atributo'): {path!r}"
        raise ValueError(msg)

    module = importlib.import_module(module_name)
    target = module
    for part in attribute.split("."):
        target = getattr(target, part)

    if inspect.isclass(target) or not hasattr(target, "connect"):
        if not callable(target):
            msg = f"{path} não é conector nem factory"
            raise TypeError(msg)
        target = target()

    if not callable(getattr(target, "connect", None)):
        msg = f"{path} não expõe connect()"
        raise TypeError(msg)

    logger.info("session_connector_loaded", extra={"connector": path})
    return target
