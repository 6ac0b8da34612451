"""Loading and encoding media referenced by URL or inline data URL."""

import base64
import binascii
import logging
import re

import httpx

from mediaflow.config import DEFAULT_HTTP_TIMEOUT
from mediaflow.errors import MediaError

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:([^;,]+);base64,(.+)$", re.DOTALL)
DEFAULT_IMAGE_MIME = "image/jpeg"


def is_data_url(url: str) -> bool:
    return url.startswith("data:")


def decode_data_url(url: str) -> tuple[bytes, str]:
    """
    Split a base64 data URL into (bytes, mime type).

    Raises:
        MediaError: If the URL is not a well-formed base64 data URL
    """
    match = DATA_URL_PATTERN.match(url)
    if not match:
        raise MediaError("Malformed data URL (expected data:<mime>;base64,<payload>)")
    try:
        return base64.b64decode(match.group(2), validate=True), match.group(1)
    except binascii.Error as e:
        raise MediaError(f"Malformed base64 payload in data URL: {e}") from e


def encode_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class MediaFetcher:
    """
    Fetches media bytes over HTTP(S), or decodes them from a data URL.

    A transport can be injected for tests:

        fetcher = MediaFetcher(transport=httpx.MockTransport(handler))
    """

    def __init__(
        self,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, url: str, default_mime: str = DEFAULT_IMAGE_MIME) -> tuple[bytes, str]:
        """
        Return (bytes, mime type) for ``url``.

        Raises:
            MediaError: On malformed URLs, HTTP errors or timeouts
        """
        if not url:
            raise MediaError("No media URL provided")
        if is_data_url(url):
            return decode_data_url(url)
        if not url.startswith(("http://", "https://")):
            raise MediaError(f"Unsupported media URL: {url[:80]}")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport, follow_redirects=True
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise MediaError(f"Timed out fetching {url}") from e
        except httpx.HTTPStatusError as e:
            raise MediaError(f"Fetching {url} failed with HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise MediaError(f"Fetching {url} failed: {e}") from e

        content_type = response.headers.get("content-type", "")
        mime_type = content_type.split(";")[0].strip() or default_mime
        logger.debug(f"Fetched {len(response.content)} bytes ({mime_type}) from {url}")
        return response.content, mime_type
