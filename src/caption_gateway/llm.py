from __future__ import annotations

import asyncio
from typing import Any, Protocol

from google import genai

from caption_gateway.config import GatewayConfig
from caption_gateway.log_config import logger


class CaptionModel(Protocol):
    """A multimodal model that answers a text prompt about one image."""

    async def generate(self, prompt: str, image: bytes, mime_type: str) -> str: ...


def extract_text(response: Any) -> str:
    """Return the text of a generate_content response, or an empty string."""
    try:
        text = getattr(response, "text", None)
    except ValueError:
        # The SDK raises when the candidate carries no text parts.
        text = None
    if isinstance(text, str) and text.strip():
        return text

    parts: list[str] = []
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            part_text = getattr(part, "text", None)
            if isinstance(part_text, str) and not getattr(part, "thought", False):
                parts.append(part_text)
    return "".join(parts)


class GeminiCaptionModel:
    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        system_instruction: str | None = None,
        temperature: float | None = None,
        top_p: float | None = None,
        max_output_tokens: int | None = None,
    ) -> None:
        self.model = model
        self._client = genai.Client(api_key=api_key)
        self._content_config = genai.types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=temperature,
            top_p=top_p,
            max_output_tokens=max_output_tokens,
            candidate_count=1,
        )

    def _build_contents(self, prompt: str, image: bytes, mime_type: str) -> list[object]:
        parts = [
            genai.types.Part.from_text(text=prompt),
            genai.types.Part.from_bytes(data=image, mime_type=mime_type),
        ]
        return [genai.types.Content(role="user", parts=parts)]

    async def generate(self, prompt: str, image: bytes, mime_type: str) -> str:
        logger.debug("gemini.generate model=%s mime=%s image_bytes=%d", self.model, mime_type, len(image))
        response = await asyncio.to_thread(
            self._client.models.generate_content,
            model=self.model,
            contents=self._build_contents(prompt, image, mime_type),
            config=self._content_config,
        )
        return extract_text(response)


def build_caption_model(config: GatewayConfig) -> GeminiCaptionModel | None:
    """Build the Gemini client for this config, or None without an API key."""
    if not config.gemini_api_key:
        return None
    return GeminiCaptionModel(
        api_key=config.gemini_api_key,
        model=config.model,
        system_instruction=config.system_instruction,
        temperature=config.temperature,
        top_p=config.top_p,
        max_output_tokens=config.max_output_tokens,
    )
