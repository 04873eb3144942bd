from __future__ import annotations

from types import SimpleNamespace

import pytest

from proximity.core.config import get_settings
from proximity.utils.openai_client import OpenAIClientWrapper, build_llm_client


class _Completions:
    def __init__(self, content: str, error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.calls: list[dict] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        usage = SimpleNamespace(prompt_tokens=3, completion_tokens=5, total_tokens=8)
        return SimpleNamespace(
            model=kwargs["model"], choices=[SimpleNamespace(message=message)], usage=usage
        )


def _wrapper(content: str, error: Exception | None = None):
    wrapper = OpenAIClientWrapper(api_key="sk-test", model="gpt-test")
    completions = _Completions(content, error)
    wrapper.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return wrapper, completions


def test_build_llm_client_without_key_is_none():
    assert get_settings().openai_api_key is None
    assert build_llm_client() is None
    with pytest.raises(ValueError):
        OpenAIClientWrapper()


@pytest.mark.asyncio
async def test_complete_text_strips_reply():
    wrapper, completions = _wrapper("  Busy week on Elm St.  ")
    assert await wrapper.complete_text("summarize") == "Busy week on Elm St."
    [call] = completions.calls
    assert call["model"] == "gpt-test"
    assert call["messages"] == [{"role": "user", "content": "summarize"}]
    assert "response_format" not in call


@pytest.mark.asyncio
async def test_complete_json_requests_object_mode():
    wrapper, completions = _wrapper('{"place_type": "park"}')
    assert await wrapper.complete_json("describe") == {"place_type": "park"}
    assert completions.calls[0]["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_complete_json_rejects_non_object():
    wrapper, _ = _wrapper("[1, 2]")
    with pytest.raises(ValueError):
        await wrapper.complete_json("describe")


@pytest.mark.asyncio
async def test_api_errors_propagate():
    wrapper, _ = _wrapper("", error=RuntimeError("quota"))
    with pytest.raises(RuntimeError, match="quota"):
        await wrapper.complete_text("hi")
