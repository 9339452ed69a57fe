"""Textos fixos enviados pela ponte e atalhos de reação."""

from __future__ import annotations

from types import MappingProxyType

# Enviado ao remetente quando a mensagem não pode ser processada
UNSUPPORTED_MESSAGE_REPLY = (
    "🚫 *Desculpe, houve um erro ao processar sua última mensagem.* 😓"
    "\n Parece que não é possível processar este tipo de mensagem. 🤔"
)

# Enviado quando a mídia da mensagem não pôde ser baixada ou arquivada
SERVER_ERROR_REPLY = (
    "⚠️ *Parece haver algum problema em nossos servidores!*\n"
    "🌐 Por favor, tente novamente em algumas horas. ⏳"
)

# Atalhos aceitos no campo `text` de pedidos de reação
REACTION_ALIASES: MappingProxyType[str, str] = MappingProxyType({
    ":like:": "👍",
    ":thinking:": "🤔",
    ":cool:": "😎",
    ":check:": "✔️",
    ":eyes:": "👀",
    ":thanks:": "🙏",
    # Também aceita sem os dois-pontos finais
    ":thanks": "🙏",
    ":smile:": "😊",
})
