# backend/pipeline/vision.py
import base64
from typing import Optional

from loguru import logger
from openai import OpenAI, OpenAIError

from .errors import GenerationFailed
from .llm_client import build_openai_client, completion_text

VISION_INSTRUCTION = (
    "You are helping a student revise. Describe the educational content of this image "
    "in detail: transcribe any visible text, formulas and labels, and explain diagrams, "
    "charts and tables so that study questions can be written from your description."
)


def image_data_url(image_bytes: bytes, mime_type: str = "image/png") -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class VisionDescriber:
    def __init__(
        self,
        model: str = "gpt-4o-mini",
        max_tokens: int = 1000,
        api_key: Optional[str] = None,
        client: Optional[OpenAI] = None,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self._api_key = api_key
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = build_openai_client(self._api_key)
        return self._client

    def describe_image(self, image_bytes: bytes, mime_type: str = "image/png") -> str:
        """Single attempt; API failures surface as GenerationFailed."""
        logger.info(f"Describing image ({len(image_bytes)} bytes) with {self.model}")
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": VISION_INSTRUCTION},
                            {"type": "image_url", "image_url": {"url": image_data_url(image_bytes, mime_type)}},
                        ],
                    }
                ],
                max_tokens=self.max_tokens,
            )
        except OpenAIError as e:
            logger.error(f"Image description failed: {type(e).__name__}: {e}")
            raise GenerationFailed(f"Image description failed: {type(e).__name__}") from e
        return completion_text(resp)
