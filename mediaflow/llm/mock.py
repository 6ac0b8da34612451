"""Deterministic LLM provider for tests and offline runs."""

from collections.abc import Callable

from mediaflow.llm.provider import ImagePart, LLMProvider, LLMResponse


class MockLLMProvider(LLMProvider):
    """
    Returns canned responses and records every call.

    By default it echoes the prompt; pass ``responder`` to compute a reply or
    ``error`` to make every call fail with that exception.
    """

    def __init__(
        self,
        model: str = "mock-model",
        responder: Callable[[str, str, list[ImagePart]], str] | None = None,
        error: Exception | None = None,
    ):
        self.model = model
        self.responder = responder
        self.error = error
        self.calls: list[dict] = []

    async def acomplete(
        self,
        prompt: str,
        system: str = "",
        images: list[ImagePart] | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        images = images or []
        self.calls.append(
            {
                "prompt": prompt,
                "system": system,
                "images": images,
                "model": model or self.model,
                "max_tokens": max_tokens,
            }
        )
        if self.error is not None:
            raise self.error

        if self.responder is not None:
            content = self.responder(prompt, system, images)
        else:
            content = f"echo: {prompt}"
        return LLMResponse(content=content, model=model or self.model)
