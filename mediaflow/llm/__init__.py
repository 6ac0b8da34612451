"""LLM provider abstraction."""

from mediaflow.llm.mock import MockLLMProvider
from mediaflow.llm.provider import ImagePart, LLMProvider, LLMResponse

__all__ = [
    "ImagePart",
    "LLMProvider",
    "LLMResponse",
    "MockLLMProvider",
]

try:
    from mediaflow.llm.litellm import LiteLLMProvider  # noqa: F401

    __all__.append("LiteLLMProvider")
except ImportError:
    pass
