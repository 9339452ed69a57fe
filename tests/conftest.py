"""Configuração do pytest para a ponte WhatsApp."""

import sys
from pathlib import Path

import pytest

# Adiciona src/ ao PYTHONPATH para permitir imports absolutos
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from config.settings.ai.openai import get_openai_settings  # noqa: E402
from config.settings.base.core import get_base_settings  # noqa: E402
from config.settings.infra.credentials import get_credential_settings  # noqa: E402
from config.settings.infra.firestore import get_firestore_settings  # noqa: E402
from config.settings.infra.gcs import get_gcs_settings  # noqa: E402
from config.settings.infra.queue import get_queue_settings  # noqa: E402
from config.settings.whatsapp import get_whatsapp_session_settings  # noqa: E402

_CACHED_GETTERS = (
    get_base_settings,
    get_credential_settings,
    get_firestore_settings,
    get_gcs_settings,
    get_openai_settings,
    get_queue_settings,
    get_whatsapp_session_settings,
)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Settings são lidas do ambiente a cada teste."""
    for getter in _CACHED_GETTERS:
        getter.cache_clear()
    yield
    for getter in _CACHED_GETTERS:
        getter.cache_clear()
