"""Renderização do QR de pareamento no terminal."""

from __future__ import annotations

import io
import logging
import sys
from typing import TextIO

import qrcode

logger = logging.getLogger(__name__)


def render_qr(data: str) -> str:
    """Retorna o QR como texto (blocos unicode) pronto para imprimir."""
    qr = qrcode.QRCode(border=1)
    qr.add_data(data)
    qr.make(fit=True)
    buffer = io.StringIO()
    qr.print_ascii(out=buffer, invert=True)
    return buffer.getvalue()


def print_qr(data: str, out: TextIO | None = None) -> None:
    """Imprime o QR para o operador escanear com o aparelho."""
    stream = out or sys.stdout
    stream.write(render_qr(data))
    stream.flush()
    logger.info("qr_printed")
