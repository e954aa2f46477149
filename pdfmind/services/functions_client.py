from typing import Any, Dict, Optional

import httpx

from pdfmind.core.errors import ProviderError


class FunctionsClient:
    """
    Client des fonctions hébergées (proxy qui injecte les clés côté serveur).
    Chaque fonction est appelée par son nom : POST {base_url}/{name}.
    """

    def __init__(
        self,
        base_url: Optional[str],
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    async def invoke(self, name: str, body: Dict[str, Any]) -> Dict[str, Any]:
        if not self.configured:
            raise ProviderError("Hosted functions URL not configured")

        headers = {}
        if self.api_key:
            headers["x-api-key"] = self.api_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(f"{self.base_url}/{name}", json=body, headers=headers)
        except httpx.HTTPError as e:
            raise ProviderError(f"Function {name} unreachable: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.is_success:
            detail = data.get("error") if isinstance(data, dict) else resp.text[:500]
            raise ProviderError(f"Function {name} failed: {resp.status_code} - {detail}")
        if not isinstance(data, dict):
            raise ProviderError(f"Function {name} returned unexpected payload")
        if not data.get("success"):
            raise ProviderError(f"Function {name} failed: {data.get('error') or 'unknown error'}")
        return data
