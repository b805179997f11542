"""
OpenAI client for quiz content generation.

Thin async wrapper around ``AsyncOpenAI`` chat completions with two entry
points: free text (the narrative pass) and a JSON object (the quiz pass).
"""

from __future__ import annotations

import json
import logging
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from ..config import Settings

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a sports historian writing trivia about real games."
JSON_SYSTEM_PROMPT = (
    "You are a sports trivia author. Always respond with a single valid JSON object "
    "and nothing else."
)


class GenerationError(Exception):
    """The model could not produce a usable response."""


class OpenAIClient:
    """Async OpenAI client used by the content generator."""

    def __init__(self, api_key: str, model: str = "gpt-4o", client: AsyncOpenAI | None = None) -> None:
        if not api_key:
            raise ValueError("OpenAI API key not configured")
        self.model = model
        self.client = client or AsyncOpenAI(api_key=api_key)
        logger.info("openai_client_initialized", extra={"model": self.model})

    @property
    def source_name(self) -> str:
        """Value recorded as ``source_api`` on cache rows."""
        return f"openai:{self.model}"

    async def _complete(self, messages: list[dict[str, str]], temperature: float, max_tokens: int, json_mode: bool) -> str:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            response = await self.client.chat.completions.create(**kwargs)
        except OpenAIError as exc:
            logger.error("openai_request_failed", extra={"model": self.model, "error": str(exc)})
            raise GenerationError(str(exc)) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise GenerationError("OpenAI returned empty response")
        return content

    async def generate_text(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 1500,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ]
        return (await self._complete(messages, temperature, max_tokens, json_mode=False)).strip()

    async def generate_json(
        self,
        prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 3000,
        max_retries: int = 3,
        system_prompt: str = JSON_SYSTEM_PROMPT,
    ) -> dict[str, Any]:
        """Generate a JSON object, retrying when the model returns malformed JSON.

        Only malformed output is retried; API errors raise ``GenerationError``
        immediately.

        Raises:
            GenerationError: If no attempt produced a JSON object.
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ]
        last_error: Exception | None = None

        for attempt in range(max_retries):
            content = await self._complete(messages, temperature, max_tokens, json_mode=True)
            try:
                parsed = json.loads(content)
            except json.JSONDecodeError as exc:
                last_error = exc
                logger.warning(
                    "openai_malformed_json",
                    extra={"attempt": attempt + 1, "max_retries": max_retries, "preview": content[:100]},
                )
                continue

            if not isinstance(parsed, dict):
                last_error = GenerationError("top-level JSON value is not an object")
                logger.warning("openai_json_not_object", extra={"attempt": attempt + 1})
                continue

            if attempt > 0:
                logger.info("openai_json_recovered", extra={"attempt": attempt + 1})
            return parsed

        raise GenerationError(f"OpenAI generation failed after {max_retries} attempts: {last_error}")


def get_openai_client(settings: Settings) -> OpenAIClient | None:
    """Build a client from settings, or ``None`` when no API key is configured."""
    if not settings.openai_api_key:
        logger.warning("OpenAI API key not configured - AI generation disabled")
        return None
    return OpenAIClient(settings.openai_api_key, model=settings.openai_model)
