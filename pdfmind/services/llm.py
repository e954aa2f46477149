from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from pdfmind.core.errors import ProviderError


class LLMClient:
    """
    Fournisseur génératif : un prompt texte en entrée, du texte libre en sortie.
    Le client OpenAI n'est créé qu'au premier appel.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self._client: Optional[AsyncOpenAI] = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,  # une tentative par étape de fallback
            )
        return self._client

    async def complete(self, prompt: str, json_mode: bool = False, max_tokens: int = 2048) -> str:
        if not self.configured:
            raise ProviderError("Generative provider API key not configured")

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            comp = await self._get_client().chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_tokens,
                temperature=0.2,
                **kwargs,
            )
        except OpenAIError as e:
            raise ProviderError(f"Generative provider error: {e}") from e

        text = ""
        if comp.choices:
            text = (comp.choices[0].message.content or "").strip()
        if not text:
            raise ProviderError("Generative provider returned no text")
        return text
