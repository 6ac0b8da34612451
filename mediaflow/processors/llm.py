"""Run an LLM over a user message, an optional system prompt and images."""

import base64
import logging

from pydantic import Field

from mediaflow.errors import LLMExecutionError, MediaError
from mediaflow.graph.node import NodeType
from mediaflow.llm.provider import ImagePart, LLMProvider
from mediaflow.processors.base import Processor, ProcessorInputs
from mediaflow.processors.media import MediaFetcher

logger = logging.getLogger(__name__)


class LLMInputs(ProcessorInputs):
    userMessage: str = Field(min_length=1)
    systemPrompt: str | None = None
    images: list[str] = Field(default_factory=list)


class LLMProcessor(Processor):
    """
    Calls the configured model; when that model is unavailable for the
    account (404 / not found) the call is repeated once on
    ``fallback_model``.
    """

    node_type = NodeType.LLM
    input_model = LLMInputs

    def __init__(
        self,
        llm: LLMProvider,
        fetcher: MediaFetcher | None = None,
        fallback_model: str | None = None,
        max_tokens: int | None = None,
    ):
        self.llm = llm
        self.fetcher = fetcher or MediaFetcher()
        self.fallback_model = fallback_model
        self.max_tokens = max_tokens

    async def load_images(self, urls: list[str]) -> list[ImagePart]:
        """Load every image that can be loaded; failures are logged and skipped."""
        parts = []
        for url in urls:
            if not url:
                continue
            try:
                data, mime_type = await self.fetcher.fetch(url)
            except MediaError as e:
                logger.warning(f"Skipping image that failed to load: {e}")
                continue
            encoded = base64.b64encode(data).decode("ascii")
            parts.append(ImagePart(data=encoded, mime_type=mime_type))
        return parts

    async def run(self, params: LLMInputs) -> dict[str, str]:
        images = await self.load_images(params.images)
        system = params.systemPrompt or ""

        try:
            response = await self.llm.acomplete(
                params.userMessage, system=system, images=images, max_tokens=self.max_tokens
            )
        except LLMExecutionError as e:
            fallback = self.fallback_model
            if e.is_not_found_error and fallback and fallback != self.llm.model:
                logger.warning(
                    f"Model {self.llm.model} not available, trying fallback {self.fallback_model}"
                )
                response = await self._complete_with_fallback(params.userMessage, system, images)
            elif e.is_quota_error:
                raise LLMExecutionError(
                    "Quota exceeded. Try again later.", status=429, is_quota_error=True
                ) from e
            else:
                raise

        if not response.content.strip():
            raise LLMExecutionError("Empty response from LLM")

        logger.info(
            f"LLM responded ({response.input_tokens}+{response.output_tokens} tokens)",
            extra={"model": response.model},
        )
        return {"output": response.content}

    async def _complete_with_fallback(self, prompt: str, system: str, images: list[ImagePart]):
        try:
            return await self.llm.acomplete(
                prompt,
                system=system,
                images=images,
                model=self.fallback_model,
                max_tokens=self.max_tokens,
            )
        except LLMExecutionError as e:
            if e.is_quota_error:
                raise LLMExecutionError(
                    "Quota exceeded. Try again later.", status=429, is_quota_error=True
                ) from e
            raise LLMExecutionError(
                "Model not available for this API key. Check your model access.",
                status=404,
                is_not_found_error=True,
            ) from e
