"""LLM Provider abstraction for pluggable LLM backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class LLMResponse:
    """Response from an LLM call."""

    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    stop_reason: str = ""
    raw_response: Any = None


@dataclass
class ImagePart:
    """An inline image attached to a user message."""

    data: str  # base64, no data: prefix
    mime_type: str = "image/jpeg"

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class LLMProvider(ABC):
    """
    Abstract LLM provider - plug in any LLM backend.

    Implementations should handle:
    - API authentication
    - Request/response formatting (including inline images)
    - Raising LLMExecutionError with quota/not-found flags set
    """

    model: str = ""

    @abstractmethod
    async def acomplete(
        self,
        prompt: str,
        system: str = "",
        images: list[ImagePart] | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """
        Generate a completion for a single user turn.

        Args:
            prompt: User message text
            system: System prompt
            images: Images to attach to the user message
            model: Override the provider's default model for this call
            max_tokens: Maximum tokens to generate

        Returns:
            LLMResponse with content and metadata

        Raises:
            LLMExecutionError: On any backend failure
        """
        pass
