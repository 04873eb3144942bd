import json
from typing import Any

import openai
import structlog

from proximity.core.config import get_settings

logger = structlog.get_logger(__name__)


class OpenAIClientWrapper:
    def __init__(self, api_key: str | None = None, model: str | None = None):
        settings = get_settings()
        self.api_key = api_key or settings.openai_api_key
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY is not set")
        self.model = model or settings.openai_model
        self.client = openai.AsyncClient(api_key=self.api_key)

    async def chat_completion(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
        response_format: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> Any:
        """
        Wrapper for client.chat.completions.create that logs token usage.
        """
        if response_format is not None:
            kwargs["response_format"] = response_format
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                **kwargs,
            )
        except Exception as e:
            logger.error("openai_api_error", error=str(e))
            raise e

        if response.usage:
            logger.info(
                "openai_usage",
                model=response.model,
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )
        else:
            logger.warning("openai_usage_missing", model=self.model)

        return response

    async def complete_text(self, prompt: str, **kwargs: Any) -> str:
        response = await self.chat_completion([{"role": "user", "content": prompt}], **kwargs)
        return (response.choices[0].message.content or "").strip()

    async def complete_json(self, prompt: str, **kwargs: Any) -> dict[str, Any]:
        """Ask for a JSON object; a non-object reply is an error."""
        response = await self.chat_completion(
            [{"role": "user", "content": prompt}],
            response_format={"type": "json_object"},
            **kwargs,
        )
        data = json.loads(response.choices[0].message.content or "{}")
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        return data


def build_llm_client() -> OpenAIClientWrapper | None:
    """Client for the configured key, or None when no key is set."""
    if not get_settings().openai_api_key:
        return None
    return OpenAIClientWrapper()
