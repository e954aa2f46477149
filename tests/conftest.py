import pytest
from fastapi.testclient import TestClient

from pdfmind.core.config import get_settings
from pdfmind.core.deps import get_orchestrator, get_session_store
from pdfmind.core.errors import ProviderError
from pdfmind.main import create_app
from pdfmind.services.orchestrator import Orchestrator

API_KEY_HEADER = {"x-api-key": "change_me"}


class FakePdfCo:
    """Remplace PdfCoClient : renvoie `text` ou lève `error`."""

    def __init__(self, text=None, error=None, configured=True):
        self.text = text
        self.error = error if error is not None else (None if text is not None else ProviderError("network error"))
        self.configured = configured
        self.calls = []

    async def extract_text(self, data, file_name, pages=None):
        self.calls.append({"file_name": file_name, "pages": pages, "size": len(data)})
        if self.error:
            raise self.error
        return self.text


class FakeFunctions:
    """Remplace FunctionsClient : une réponse (dict) ou une exception par nom de fonction."""

    def __init__(self, responses=None, configured=True):
        self.responses = responses or {}
        self.configured = configured
        self.calls = []

    async def invoke(self, name, body):
        self.calls.append((name, body))
        res = self.responses.get(name, ProviderError(f"Function {name} unreachable"))
        if isinstance(res, Exception):
            raise res
        return res


class FakeLLM:
    """Remplace LLMClient : renvoie les réponses dans l'ordre, ou lève `error`."""

    def __init__(self, replies=None, error=None, configured=True):
        self.replies = list(replies or [])
        self.error = error
        self.configured = configured
        self.prompts = []

    async def complete(self, prompt, json_mode=False, max_tokens=2048):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        if not self.replies:
            raise ProviderError("Generative provider error: offline")
        return self.replies.pop(0)


def make_orchestrator(pdfco=None, functions=None, llm=None, local_heuristics=True):
    return Orchestrator(
        pdfco=pdfco or FakePdfCo(),
        functions=functions or FakeFunctions(),
        llm=llm or FakeLLM(),
        local_heuristics=local_heuristics,
    )


@pytest.fixture
def env(monkeypatch):
    """
    Variables d'env isolées pour les settings ; vide les caches dépendants.
    """
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("APP_NAME", "PDF Mind API (tests)")
    monkeypatch.setenv("MAX_UPLOAD_MB", "10")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost")
    monkeypatch.setenv("API_KEY", "change_me")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    for var in ("PDFCO_API_KEY", "OPENAI_API_KEY", "FUNCTIONS_URL", "FUNCTIONS_API_KEY"):
        monkeypatch.delenv(var, raising=False)

    get_settings.cache_clear()
    get_session_store.cache_clear()
    get_orchestrator.cache_clear()
    yield
    get_settings.cache_clear()
    get_session_store.cache_clear()
    get_orchestrator.cache_clear()


@pytest.fixture
def orchestrator():
    return make_orchestrator()


@pytest.fixture
def test_client(env, orchestrator):
    """
    TestClient avec un orchestrateur sur fournisseurs factices.
    Les tests modifient `orchestrator.pdfco/functions/llm` selon le scénario.
    """
    app = create_app()
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
