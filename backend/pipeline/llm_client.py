# backend/pipeline/llm_client.py
import os
from typing import Optional

from loguru import logger
from openai import OpenAI, OpenAIError

from .errors import GenerationFailed


def build_openai_client(api_key: Optional[str] = None) -> OpenAI:
    key = (api_key or os.getenv("OPENAI_API_KEY", "")).strip()
    if not key:
        raise GenerationFailed("Missing OPENAI_API_KEY")
    return OpenAI(api_key=key)


def completion_text(response) -> str:
    """Return choices[0].message.content, or "" when the model sent nothing."""
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    return choices[0].message.content or ""


class ChatCompletionClient:
    """One chat-completion call per request; no retries, no response validation."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        temperature: float = 0.3,
        client: Optional[OpenAI] = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self._api_key = api_key
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = build_openai_client(self._api_key)
        return self._client

    def complete(self, system_message: str, user_message: str, max_tokens: int) -> str:
        logger.info(f"Requesting completion from {self.model} (max_tokens={max_tokens})")
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_message},
                    {"role": "user", "content": user_message},
                ],
                max_tokens=max_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as e:
            logger.error(f"Completion call failed: {type(e).__name__}: {e}")
            raise GenerationFailed(f"AI call failed: {type(e).__name__}") from e

        text = completion_text(resp)
        if not text:
            logger.warning("Empty completion received")
        logger.info(f"Completion received, length={len(text)}")
        return text
