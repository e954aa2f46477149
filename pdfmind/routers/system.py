from fastapi import APIRouter, Depends

from pdfmind.core.config import Settings
from pdfmind.core.deps import get_orchestrator, get_session_store, get_settings_dep
from pdfmind.services.orchestrator import Orchestrator
from pdfmind.services.sessions import SessionStore

router = APIRouter(tags=["system"])


@router.get("/health")
async def health(
    settings: Settings = Depends(get_settings_dep),
    orchestrator: Orchestrator = Depends(get_orchestrator),
    store: SessionStore = Depends(get_session_store),
):
    """
    État du service. Un fournisseur non configuré échoue sans appel réseau et passe
    la main à l'étape suivante ; le service reste utilisable sans aucun.
    """
    return {
        "status": "ok",
        "version": settings.APP_VERSION,
        "providers": {
            "pdfco": orchestrator.pdfco.configured,
            "functions": orchestrator.functions.configured,
            "llm": orchestrator.llm.configured,
        },
        "sessions": len(store),
    }


@router.get("/version")
async def version(settings: Settings = Depends(get_settings_dep)):
    return {"name": settings.APP_NAME, "version": settings.APP_VERSION, "env": settings.APP_ENV}
