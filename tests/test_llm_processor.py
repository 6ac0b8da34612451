"""
Tests for the LLM processor and the LiteLLM provider.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from mediaflow.config import RuntimeConfig
from mediaflow.errors import LLMExecutionError, ProcessorError
from mediaflow.llm.litellm import (
    LiteLLMProvider,
    build_messages,
    is_not_found_error,
    is_quota_error,
)
from mediaflow.llm.mock import MockLLMProvider
from mediaflow.llm.provider import ImagePart
from mediaflow.processors import build_default_processors
from mediaflow.processors.llm import LLMProcessor
from mediaflow.processors.media import MediaFetcher, encode_data_url


class FallbackLLM(MockLLMProvider):
    """Fails with a not-found error on the primary model only."""

    async def acomplete(self, prompt, system="", images=None, model=None, max_tokens=None):
        if model is None:
            self.calls.append({"prompt": prompt, "model": self.model})
            raise LLMExecutionError("model not found", status=404, is_not_found_error=True)
        return await super().acomplete(prompt, system, images, model, max_tokens)


@pytest.mark.asyncio
async def test_llm_uses_user_message_and_system_prompt():
    llm = MockLLMProvider(responder=lambda prompt, system, images: f"{system}|{prompt}")
    processor = LLMProcessor(llm)

    outputs = await processor.process({"userMessage": "describe", "systemPrompt": "be brief"})

    assert outputs == {"output": "be brief|describe"}


@pytest.mark.asyncio
async def test_default_llm_processor_uses_configured_max_tokens(tmp_path, monkeypatch):
    monkeypatch.setenv("MEDIAFLOW_CONFIG", str(tmp_path / "missing.json"))
    llm = MockLLMProvider()
    processors = build_default_processors(
        config=RuntimeConfig(max_tokens=321, fallback_model=None), llm=llm
    )

    await processors["llm"].process({"userMessage": "describe"})

    assert llm.calls[0]["max_tokens"] == 321


@pytest.mark.asyncio
async def test_user_message_is_required():
    processor = LLMProcessor(MockLLMProvider())

    with pytest.raises(ProcessorError, match="userMessage"):
        await processor.process({"systemPrompt": "x"})
    with pytest.raises(ProcessorError, match="userMessage"):
        await processor.process({"userMessage": ""})


@pytest.mark.asyncio
async def test_images_are_loaded_and_bad_ones_skipped():
    def handler(request):
        if request.url.path == "/ok.jpg":
            return httpx.Response(200, content=b"JPEG", headers={"content-type": "image/jpeg"})
        return httpx.Response(500)

    llm = MockLLMProvider()
    processor = LLMProcessor(llm, fetcher=MediaFetcher(transport=httpx.MockTransport(handler)))

    await processor.process(
        {
            "userMessage": "what is this?",
            "images": [
                "https://cdn.example.com/ok.jpg",
                "https://cdn.example.com/broken.jpg",
                encode_data_url(b"PNG", "image/png"),
            ],
        }
    )

    images = llm.calls[0]["images"]
    assert [image.mime_type for image in images] == ["image/jpeg", "image/png"]


@pytest.mark.asyncio
async def test_not_found_model_falls_back():
    llm = FallbackLLM(model="primary")
    processor = LLMProcessor(llm, fallback_model="backup")

    outputs = await processor.process({"userMessage": "hi"})

    assert outputs == {"output": "echo: hi"}
    assert [call["model"] for call in llm.calls] == ["primary", "backup"]


@pytest.mark.asyncio
async def test_not_found_without_fallback_propagates():
    error = LLMExecutionError("model not found", status=404, is_not_found_error=True)
    processor = LLMProcessor(MockLLMProvider(error=error))

    with pytest.raises(LLMExecutionError, match="not found"):
        await processor.process({"userMessage": "hi"})


@pytest.mark.asyncio
async def test_quota_errors_get_a_friendly_message():
    error = LLMExecutionError("429 RESOURCE_EXHAUSTED", status=429, is_quota_error=True)
    processor = LLMProcessor(MockLLMProvider(error=error))

    with pytest.raises(LLMExecutionError) as exc_info:
        await processor.process({"userMessage": "hi"})

    assert str(exc_info.value) == "Quota exceeded. Try again later."
    assert exc_info.value.status == 429


@pytest.mark.asyncio
async def test_empty_response_is_an_error():
    processor = LLMProcessor(MockLLMProvider(responder=lambda *args: "   "))

    with pytest.raises(LLMExecutionError, match="Empty response"):
        await processor.process({"userMessage": "hi"})


def test_build_messages_attaches_images_to_user_turn():
    messages = build_messages("caption", system="sys", images=[ImagePart(data="QUJD")])

    assert messages[0] == {"role": "system", "content": "sys"}
    assert messages[1]["role"] == "user"
    assert messages[1]["content"][0] == {"type": "text", "text": "caption"}
    assert messages[1]["content"][1]["image_url"]["url"] == "data:image/jpeg;base64,QUJD"


def test_build_messages_plain_text():
    assert build_messages("hi") == [{"role": "user", "content": "hi"}]


def test_error_classification():
    assert is_quota_error(Exception("429 Too Many Requests"))
    assert is_quota_error(Exception("Resource exhausted for this project"))
    assert is_not_found_error(Exception("models/gemini-x is not found"))
    assert not is_quota_error(Exception("invalid api key"))
    assert not is_not_found_error(Exception("invalid api key"))


@pytest.mark.asyncio
async def test_litellm_provider_returns_content_and_usage():
    response = SimpleNamespace(
        choices=[
            SimpleNamespace(
                message=SimpleNamespace(content="Great headphones"), finish_reason="stop"
            )
        ],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=3),
        model="gemini/gemini-2.5-flash",
    )
    provider = LiteLLMProvider(model="gemini/gemini-2.5-flash", api_key="test-key")

    with patch("litellm.acompletion", new=AsyncMock(return_value=response)) as mock_completion:
        result = await provider.acomplete("describe", system="sys", max_tokens=50)

    assert result.content == "Great headphones"
    assert (result.input_tokens, result.output_tokens) == (12, 3)
    kwargs = mock_completion.call_args.kwargs
    assert kwargs["api_key"] == "test-key"
    assert kwargs["max_tokens"] == 50
    assert kwargs["messages"][0]["role"] == "system"


@pytest.mark.asyncio
async def test_litellm_provider_wraps_failures():
    provider = LiteLLMProvider(model="gemini/gemini-2.5-flash")

    with patch(
        "litellm.acompletion", new=AsyncMock(side_effect=Exception("404 model not found"))
    ):
        with pytest.raises(LLMExecutionError) as exc_info:
            await provider.acomplete("hi")

    assert exc_info.value.is_not_found_error
    assert not exc_info.value.is_quota_error
