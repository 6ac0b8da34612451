"""Extract a single frame from a video with ffmpeg."""

import asyncio
import logging
import os
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from mediaflow.errors import MediaError, ProcessorError
from mediaflow.graph.node import NodeType
from mediaflow.processors.base import Processor, ProcessorInputs
from mediaflow.processors.media import decode_data_url, encode_data_url, is_data_url

logger = logging.getLogger(__name__)


class FrameInputs(ProcessorInputs):
    video_url: str
    timestamp: float | str = 0


def is_percentage(value: Any) -> bool:
    return isinstance(value, str) and value.strip().endswith("%")


def parse_timestamp(value: Any, duration: float | None = None) -> float:
    """
    Resolve a timestamp to absolute seconds.

    Numbers and numeric strings are seconds. Strings ending in ``%`` are a
    share of ``duration``; with no known duration they resolve to 0.
    Negative values clamp to 0.

    Raises:
        ProcessorError: If the value is not a number or percentage
    """
    if value is None or value == "":
        return 0.0
    try:
        if is_percentage(value):
            if not duration:
                return 0.0
            percent = float(value.strip()[:-1])
            return max(0.0, duration * percent / 100)
        return max(0.0, float(value))
    except (TypeError, ValueError) as e:
        raise ProcessorError(f"Invalid timestamp '{value}' (use seconds or a percentage)") from e


async def _run(cmd: list[str]) -> tuple[int, bytes, bytes]:
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise MediaError(f"'{cmd[0]}' is not installed or not on PATH") from e
    stdout, stderr = await proc.communicate()
    return proc.returncode, stdout, stderr


class FrameExtractor:
    """Thin async wrapper over the ffprobe/ffmpeg binaries."""

    def __init__(self, ffmpeg: str = "ffmpeg", ffprobe: str = "ffprobe"):
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe

    async def probe_duration(self, source: str) -> float | None:
        """Return the media duration in seconds, or None if it cannot be read."""
        cmd = [
            self.ffprobe,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            source,
        ]
        try:
            returncode, stdout, stderr = await _run(cmd)
        except MediaError as e:
            logger.warning(f"Could not probe duration: {e}")
            return None
        if returncode != 0:
            logger.warning(f"ffprobe failed: {stderr.decode(errors='replace').strip()}")
            return None
        try:
            return float(stdout.decode().strip())
        except ValueError:
            return None

    async def grab_frame(self, source: str, seconds: float) -> bytes:
        """Return the frame at ``seconds`` as PNG bytes."""
        cmd = [
            self.ffmpeg,
            "-hide_banner",
            "-loglevel",
            "error",
            "-ss",
            f"{seconds:.3f}",
            "-i",
            source,
            "-frames:v",
            "1",
            "-f",
            "image2pipe",
            "-vcodec",
            "png",
            "-",
        ]
        returncode, stdout, stderr = await _run(cmd)
        if returncode != 0:
            raise MediaError(f"ffmpeg error: {stderr.decode(errors='replace').strip()}")
        if not stdout:
            raise MediaError(f"No frame found at {seconds:.3f}s")
        return stdout


@asynccontextmanager
async def local_source(video_url: str) -> AsyncIterator[str]:
    """Yield something ffmpeg can open: the URL itself, or a temp file for data URLs."""
    if not is_data_url(video_url):
        yield video_url
        return

    data, _ = decode_data_url(video_url)
    fd, path = tempfile.mkstemp(suffix=".video")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        yield path
    finally:
        os.unlink(path)


class ExtractFrameProcessor(Processor):
    node_type = NodeType.EXTRACT_FRAME
    input_model = FrameInputs

    def __init__(self, extractor: FrameExtractor | None = None):
        self.extractor = extractor or FrameExtractor()

    async def run(self, params: FrameInputs) -> dict[str, str]:
        if not params.video_url:
            raise ProcessorError("video_url is required")

        async with local_source(params.video_url) as source:
            duration = None
            if is_percentage(params.timestamp):
                duration = await self.extractor.probe_duration(source)
                if duration is None:
                    logger.warning(
                        f"Unknown video duration; treating timestamp {params.timestamp} as 0s"
                    )
            seconds = parse_timestamp(params.timestamp, duration)
            frame = await self.extractor.grab_frame(source, seconds)

        logger.info(f"Extracted frame at {seconds:.3f}s")
        return {"output": encode_data_url(frame, "image/png")}
