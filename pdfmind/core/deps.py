from functools import lru_cache

from pdfmind.core.config import get_settings
from pdfmind.services.orchestrator import Orchestrator
from pdfmind.services.sessions import SessionStore


def get_settings_dep():
    return get_settings()


@lru_cache
def get_session_store() -> SessionStore:
    """
    Store de sessions partagé (singleton de process).
    """
    settings = get_settings()
    return SessionStore(
        ttl_seconds=settings.SESSION_TTL_SECONDS,
        quiz_duration=settings.QUIZ_DURATION_SECONDS,
    )


@lru_cache
def get_orchestrator() -> Orchestrator:
    """
    Fournit l'orchestrateur en dépendance (DI), surchargé dans les tests.
    """
    return Orchestrator.from_settings(get_settings())
