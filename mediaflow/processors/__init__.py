"""Built-in node processors."""

from mediaflow.config import RuntimeConfig
from mediaflow.llm.provider import LLMProvider
from mediaflow.processors.base import FunctionProcessor, Processor, ProcessorInputs
from mediaflow.processors.crop import CropImageProcessor
from mediaflow.processors.frame import ExtractFrameProcessor, FrameExtractor
from mediaflow.processors.llm import LLMProcessor
from mediaflow.processors.media import MediaFetcher
from mediaflow.processors.source import (
    TextProcessor,
    UploadImageProcessor,
    UploadVideoProcessor,
)


def build_default_processors(
    config: RuntimeConfig | None = None,
    llm: LLMProvider | None = None,
    fetcher: MediaFetcher | None = None,
    extractor: FrameExtractor | None = None,
) -> dict[str, Processor]:
    """
    Build the registry of built-in processors, keyed by node type.

    Any collaborator left as None is built from ``config``.
    """
    config = config or RuntimeConfig()
    fetcher = fetcher or MediaFetcher(timeout=config.http_timeout)
    if llm is None:
        from mediaflow.llm.litellm import LiteLLMProvider

        llm = LiteLLMProvider(
            model=config.model,
            api_key=config.api_key,
            api_base=config.api_base,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )
    extractor = extractor or FrameExtractor(ffmpeg=config.ffmpeg, ffprobe=config.ffprobe)

    processors: list[Processor] = [
        TextProcessor(),
        UploadImageProcessor(),
        UploadVideoProcessor(),
        LLMProcessor(
            llm,
            fetcher=fetcher,
            fallback_model=config.fallback_model,
            max_tokens=config.max_tokens,
        ),
        CropImageProcessor(fetcher=fetcher),
        ExtractFrameProcessor(extractor=extractor),
    ]
    return {p.node_type: p for p in processors}


__all__ = [
    "Processor",
    "ProcessorInputs",
    "FunctionProcessor",
    "MediaFetcher",
    "FrameExtractor",
    "TextProcessor",
    "UploadImageProcessor",
    "UploadVideoProcessor",
    "LLMProcessor",
    "CropImageProcessor",
    "ExtractFrameProcessor",
    "build_default_processors",
]
