"""Serviços de aplicação.

Classificação de payloads brutos e extração de mídia. Implementações
concretas de IO ficam em app/infra/.
"""

from app.services.media_extraction import MediaExtractionPipeline
from app.services.message_classifier import build_contact_info, classify

__all__ = [
    "MediaExtractionPipeline",
    "build_contact_info",
    "classify",
]
