"""
Language-model backend - single-shot text generation over an OpenAI-compatible API.

The default endpoint is Gemini's OpenAI-compatible surface, so the same
client also works against OpenAI or OpenRouter by changing LLM_API_BASE.
"""
from typing import Any, Dict, Optional, Protocol

import httpx
import openai

from .exceptions import APIError, InferenceError
from .utils.logging import get_logger

logger = get_logger(__name__)


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str:
        """Return the model's text response for a single prompt."""
        ...


class OpenAITextGenerator:
    """Wraps `openai.AsyncOpenAI` behind a one-method `generate` interface."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        timeout_seconds: float = 45.0,
        client: Optional[Any] = None,
    ):
        self.model = model
        self.client = client or openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
            max_retries=0,  # no retries; failures surface to the dispatcher
        )

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "OpenAITextGenerator":
        return cls(
            api_key=config["GOOGLEAI_API_KEY"],
            model=config["LLM_MODEL"],
            base_url=config.get("LLM_API_BASE"),
            timeout_seconds=config.get("LLM_TIMEOUT_SECONDS", 45.0),
        )

    async def generate(self, prompt: str) -> str:
        logger.debug(
            f"🤖 Prompt ({len(prompt)} chars) → {self.model}",
            extra={"subsys": "llm", "event": "generate_start"},
        )
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except openai.OpenAIError as e:
            raise APIError(f"Language model request failed: {e}") from e

        if not getattr(response, "choices", None):
            raise InferenceError("No choices returned from language model")

        text = response.choices[0].message.content
        if text is None:
            raise InferenceError("Empty response from language model")

        logger.debug(
            f"🤖 Response ({len(text)} chars)",
            extra={"subsys": "llm", "event": "generate_done"},
        )
        return text

    async def close(self) -> None:
        await self.client.close()
