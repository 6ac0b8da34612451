"""Crop an image by percentages of its width and height."""

import asyncio
import io
import logging

from PIL import Image, UnidentifiedImageError
from pydantic import Field, field_validator

from mediaflow.errors import MediaError
from mediaflow.graph.node import NodeType
from mediaflow.processors.base import Processor, ProcessorInputs, parse_percent
from mediaflow.processors.media import MediaFetcher, encode_data_url

logger = logging.getLogger(__name__)


class CropInputs(ProcessorInputs):
    image_url: str = Field(min_length=1)
    x_percent: float = Field(default=0, ge=0, le=100)
    y_percent: float = Field(default=0, ge=0, le=100)
    width_percent: float = Field(default=100, ge=0, le=100)
    height_percent: float = Field(default=100, ge=0, le=100)

    @field_validator("x_percent", "y_percent", "width_percent", "height_percent", mode="before")
    @classmethod
    def _parse_percent(cls, value):
        return parse_percent(value)


def crop_box(
    width: int, height: int, x: float, y: float, w: float, h: float
) -> tuple[int, int, int, int]:
    """
    Convert percentage geometry into a pixel box clamped to the image.

    Raises:
        MediaError: If the resulting box has no area
    """
    left = round(width * x / 100)
    top = round(height * y / 100)
    right = min(width, left + round(width * w / 100))
    bottom = min(height, top + round(height * h / 100))
    if right <= left or bottom <= top:
        raise MediaError(
            f"Crop region is empty (x={x}%, y={y}%, width={w}%, height={h}% of {width}x{height})"
        )
    return left, top, right, bottom


def crop_image_bytes(data: bytes, params: CropInputs) -> bytes:
    """Crop encoded image bytes and return PNG bytes."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            box = crop_box(
                image.width,
                image.height,
                params.x_percent,
                params.y_percent,
                params.width_percent,
                params.height_percent,
            )
            cropped = image.crop(box)
            if cropped.mode not in ("RGB", "RGBA", "L", "LA", "P"):
                cropped = cropped.convert("RGBA")
            buffer = io.BytesIO()
            cropped.save(buffer, format="PNG")
    except UnidentifiedImageError as e:
        raise MediaError("Input is not a recognised image format") from e
    return buffer.getvalue()


class CropImageProcessor(Processor):
    node_type = NodeType.CROP_IMAGE
    input_model = CropInputs

    def __init__(self, fetcher: MediaFetcher | None = None):
        self.fetcher = fetcher or MediaFetcher()

    async def run(self, params: CropInputs) -> dict[str, str]:
        data, _ = await self.fetcher.fetch(params.image_url)
        png = await asyncio.to_thread(crop_image_bytes, data, params)
        logger.info(
            f"Cropped image to x={params.x_percent}% y={params.y_percent}% "
            f"w={params.width_percent}% h={params.height_percent}%"
        )
        return {"output": encode_data_url(png, "image/png")}
