# ai/client.py
from __future__ import annotations

from typing import Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

import settings
from core.errors import UpstreamServiceError


class OpenAIChatModel:
    """
    The language-model collaborator.

    echo() is the exact-text path used for fixed questions: the literal is
    authoritative, so it is returned as-is rather than round-tripped through
    the model. complete() is open generation.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self.temperature = settings.OPENAI_TEMPERATURE if temperature is None else temperature
        self._client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise UpstreamServiceError("Missing OPENAI_API_KEY")
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def echo(self, text: str) -> str:
        return text

    async def complete(
        self,
        system: str,
        messages: List[Dict[str, str]],
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        client = self._get_client()
        payload = [{"role": "system", "content": system}, *messages]
        kwargs = {}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=payload,
                temperature=self.temperature if temperature is None else temperature,
                **kwargs,
            )
        except OpenAIError as e:
            if settings.DEBUG:
                print(f"[ERROR] chat completion failed: {e!r}")
            raise UpstreamServiceError(f"Language model call failed: {type(e).__name__}") from e

        content = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not content:
            raise UpstreamServiceError("Language model returned an empty completion")
        return content
