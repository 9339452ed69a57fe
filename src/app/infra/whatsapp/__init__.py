"""Adapters do transporte WhatsApp (carregamento do conector e QR)."""

from app.infra.whatsapp.connector_loader import load_connector
from app.infra.whatsapp.qr_terminal import print_qr, render_qr

__all__ = ["load_connector", "print_qr", "render_qr"]
