from __future__ import annotations

import base64
import binascii
from pathlib import Path
from urllib.parse import unquote_to_bytes

import httpx
from loguru import logger

from spritestrip.errors import FetchError

_DATA_PREFIX = "data:"


class SourceFetcher:
    """Retrieve raw image bytes for a source identifier.

    Supported identifiers:

    - ``http://`` / ``https://`` URLs, fetched with ``httpx``;
    - ``data:<mime>;base64,<payload>`` URIs, decoded in-process;
    - anything else, read as a local file path.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 30.0) -> None:
        """Initialize the fetcher.

        Args:
            client: Shared async client. When omitted, a short-lived client
                is opened for each HTTP fetch.
            timeout: Per-request timeout in seconds for short-lived clients.
        """
        self.client = client
        self.timeout = timeout

    async def __call__(self, source: str) -> bytes:
        """Return the bytes behind ``source``.

        Raises:
            FetchError: The source is unreachable, returned a non-2xx status,
                or is a malformed data URI.
        """
        if source.startswith(("http://", "https://")):
            return await self._fetch_http(source)
        if source.startswith(_DATA_PREFIX):
            return decode_data_uri(source)
        return self._read_file(source)

    async def fetch_with_type(self, source: str) -> tuple[bytes, str]:
        """Like calling the fetcher, but also report the content type.

        HTTP sources report the response's ``content-type`` header, data URIs
        the MIME type in their header. Local files are assumed to be PNG.
        """
        if source.startswith(("http://", "https://")):
            resp = await self._get(source)
            return resp.content, resp.headers.get("content-type", "image/png")
        if source.startswith(_DATA_PREFIX):
            return decode_data_uri(source), data_uri_media_type(source)
        return await self(source), "image/png"

    async def _fetch_http(self, url: str) -> bytes:
        resp = await self._get(url)
        return resp.content

    async def _get(self, url: str) -> httpx.Response:
        try:
            if self.client is not None:
                resp = await self.client.get(url)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    resp = await client.get(url)
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(f"failed to fetch {url}: {exc}") from exc
        logger.debug("Fetched {} ({} bytes).", url, len(resp.content))
        return resp

    def _read_file(self, source: str) -> bytes:
        try:
            return Path(source).read_bytes()
        except OSError as exc:
            raise FetchError(f"failed to read {source}: {exc}") from exc


def decode_data_uri(uri: str) -> bytes:
    """Decode a ``data:[<mime>][;base64],<payload>`` URI to bytes.

    Raises:
        FetchError: The URI has no comma, or a base64 payload is invalid.
    """
    header, sep, payload = uri.partition(",")
    if not sep:
        raise FetchError("malformed data URI: missing ','")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except binascii.Error as exc:
            raise FetchError(f"malformed base64 payload in data URI: {exc}") from exc
    return unquote_to_bytes(payload)


def data_uri_media_type(uri: str) -> str:
    """Return the MIME type declared by a data URI, ``text/plain`` if omitted."""
    header = uri.partition(",")[0][len(_DATA_PREFIX) :]
    media_type = header.split(";")[0].strip()
    return media_type or "text/plain"
