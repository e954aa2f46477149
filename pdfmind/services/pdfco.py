import base64
import logging
from typing import Any, Dict, Optional

import httpx

from pdfmind.core.errors import ProviderError

logger = logging.getLogger(__name__)


class PdfCoClient:
    """
    Client du fournisseur d'extraction PDF.co.

    Trois temps : upload base64 -> conversion en texte (avec un endpoint de
    secours) -> téléchargement du texte produit.
    """

    CONVERT_PATH = "/pdf/convert/to/text"
    ALT_CONVERT_PATH = "/pdf/extract/text"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.pdf.co/v1",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def extract_text(self, data: bytes, file_name: str, pages: Optional[str] = None) -> str:
        if not self.configured:
            raise ProviderError("PDF.co API key not configured")

        headers = {"x-api-key": self.api_key or ""}
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                upload = await self._post_json(
                    client,
                    "/file/upload/base64",
                    {"file": base64.b64encode(data).decode("ascii"), "name": file_name},
                    "upload",
                )
                file_url = upload.get("url")
                if not file_url:
                    raise ProviderError("PDF.co upload returned no url")

                body: Dict[str, Any] = {"url": file_url}
                if pages:
                    body["pages"] = pages

                resp = await client.post(self.CONVERT_PATH, json=body)
                if not resp.is_success:
                    logger.info("PDF.co convert failed (%s), trying %s", resp.status_code, self.ALT_CONVERT_PATH)
                    resp = await client.post(self.ALT_CONVERT_PATH, json={"url": file_url})
                converted = self._json_or_fail(resp, "extract")

                text_url = converted.get("url")
                if not text_url:
                    raise ProviderError("PDF.co extract returned no url")

                text_resp = await client.get(text_url)
                if not text_resp.is_success:
                    raise ProviderError(f"Failed to fetch extracted text: {text_resp.status_code}")
                return text_resp.text
            except httpx.HTTPError as e:
                raise ProviderError(f"PDF.co request failed: {e}") from e

    async def _post_json(self, client: httpx.AsyncClient, path: str, body: dict, step: str) -> dict:
        resp = await client.post(path, json=body)
        return self._json_or_fail(resp, step)

    @staticmethod
    def _json_or_fail(resp: httpx.Response, step: str) -> dict:
        if not resp.is_success:
            message = resp.text[:500]
            try:
                message = resp.json().get("message") or message
            except (ValueError, AttributeError):
                pass
            raise ProviderError(f"PDF.co {step} failed: {resp.status_code} - {message}")
        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError(f"PDF.co {step} returned invalid JSON") from e
        if not isinstance(data, dict):
            raise ProviderError(f"PDF.co {step} returned unexpected payload")
        if data.get("error") is True:
            raise ProviderError(f"PDF.co {step} failed: {data.get('message', 'unknown error')}")
        return data
