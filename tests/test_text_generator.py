from types import SimpleNamespace

import pytest
from openai import OpenAIError

from regbot.agents import OpenAITextGenerator
from regbot.config import settings
from regbot.exceptions import ConfigurationError, TextGenerationError


class FakeCompletions:
    """Stand-in for client.chat.completions returning a canned reply."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _generator(completions):
    generator = OpenAITextGenerator(model_name="test-model", max_tokens=50, temperature=0.1)
    generator._llm_client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    generator._initialized = True
    return generator


@pytest.mark.asyncio
async def test_reply_is_stripped():
    completions = FakeCompletions(content=" ok ")
    assert await _generator(completions).generate("Say ok") == "ok"

    call = completions.calls[0]
    assert call["model"] == "test-model"
    assert call["messages"] == [{"role": "user", "content": "Say ok"}]
    assert call["max_tokens"] == 50
    assert call["temperature"] == 0.1


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["   ", "", None])
async def test_empty_reply_raises(content):
    with pytest.raises(TextGenerationError):
        await _generator(FakeCompletions(content=content)).generate("Say ok")


@pytest.mark.asyncio
async def test_provider_error_raises():
    generator = _generator(FakeCompletions(error=OpenAIError("connection reset")))
    with pytest.raises(TextGenerationError) as exc_info:
        await generator.generate("Say ok")
    assert isinstance(exc_info.value.__cause__, OpenAIError)


@pytest.mark.asyncio
async def test_generate_before_initialize():
    with pytest.raises(RuntimeError):
        await OpenAITextGenerator().generate("Say ok")


@pytest.mark.asyncio
async def test_initialize_requires_api_key(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", None)
    generator = OpenAITextGenerator()
    with pytest.raises(ConfigurationError):
        await generator.initialize()
    assert not generator.is_initialized()


@pytest.mark.asyncio
async def test_initialize_with_api_key(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")
    generator = OpenAITextGenerator()
    await generator.initialize()
    assert generator.is_initialized()
