"""LiteLLM-backed provider: one interface for Gemini, OpenAI, Anthropic, ..."""

import logging
import re
from typing import Any

import litellm

from mediaflow.errors import LLMExecutionError
from mediaflow.llm.provider import ImagePart, LLMProvider, LLMResponse

logger = logging.getLogger(__name__)

_QUOTA_PATTERN = re.compile(r"429|quota|resource exhausted|rate limit", re.IGNORECASE)
_NOT_FOUND_PATTERN = re.compile(
    r"404|not found|no longer available|is not supported for generateContent"
    r"|model.*not available",
    re.IGNORECASE,
)


def is_quota_error(err: BaseException) -> bool:
    return isinstance(err, litellm.RateLimitError) or bool(_QUOTA_PATTERN.search(str(err)))


def is_not_found_error(err: BaseException) -> bool:
    return isinstance(err, litellm.NotFoundError) or bool(_NOT_FOUND_PATTERN.search(str(err)))


def build_messages(
    prompt: str, system: str = "", images: list[ImagePart] | None = None
) -> list[dict[str, Any]]:
    """Build OpenAI-style chat messages; LiteLLM translates them per backend."""
    messages: list[dict[str, Any]] = []
    if system:
        messages.append({"role": "system", "content": system})

    if images:
        content: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
        for image in images:
            content.append({"type": "image_url", "image_url": {"url": image.data_url}})
        messages.append({"role": "user", "content": content})
    else:
        messages.append({"role": "user", "content": prompt})
    return messages


class LiteLLMProvider(LLMProvider):
    """
    LLM provider backed by ``litellm.acompletion``.

    Example:
        llm = LiteLLMProvider(model="gemini/gemini-2.5-flash", api_key=config.api_key)
        response = await llm.acomplete("Describe this product", images=[...])
    """

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        api_base: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ):
        self.model = model
        self.api_key = api_key
        self.api_base = api_base
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def acomplete(
        self,
        prompt: str,
        system: str = "",
        images: list[ImagePart] | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        model = model or self.model
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": build_messages(prompt, system, images),
            "max_tokens": max_tokens or self.max_tokens,
            "temperature": self.temperature,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base

        logger.debug(f"LLM call: model={model}, images={len(images or [])}")
        try:
            response = await litellm.acompletion(**kwargs)
        except Exception as e:
            raise LLMExecutionError(
                str(e) or "LLM request failed",
                status=getattr(e, "status_code", None) or 400,
                is_quota_error=is_quota_error(e),
                is_not_found_error=is_not_found_error(e),
            ) from e

        choice = response.choices[0]
        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=choice.message.content or "",
            model=getattr(response, "model", None) or model,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            stop_reason=choice.finish_reason or "",
            raw_response=response,
        )
