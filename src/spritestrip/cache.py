from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence

from loguru import logger

from spritestrip.models import PixelBuffer

DecodeFn = Callable[[bytes], PixelBuffer]
FetchFn = Callable[[str], Awaitable[bytes]]


class AssetCache:
    """Process-lifetime store of decoded source images.

    The cache is filled lazily on the first ``get_or_populate`` call by
    fetching and decoding every source in order. Population is
    all-or-nothing: if any source fails, nothing is kept and the next call
    starts over. Concurrent callers are serialised on a lock, so at most one
    population attempt runs at a time and a successful one is never repeated.
    """

    def __init__(self, sources: Sequence[str]) -> None:
        """Initialize an empty cache.

        Args:
            sources: Source identifiers (URLs, data URIs or paths), in the
                order their decoded images will be stored.
        """
        self._sources = tuple(sources)
        self._assets: tuple[PixelBuffer, ...] | None = None
        self._lock = asyncio.Lock()

    @property
    def sources(self) -> tuple[str, ...]:
        return self._sources

    @property
    def populated(self) -> bool:
        return self._assets is not None

    def __len__(self) -> int:
        return 0 if self._assets is None else len(self._assets)

    async def get_or_populate(self, decode: DecodeFn, fetch: FetchFn) -> tuple[PixelBuffer, ...]:
        """Return the decoded assets, populating the cache on first use.

        Args:
            decode: Converts fetched bytes to a ``PixelBuffer``.
            fetch: Async callable returning the bytes for a source identifier.

        Returns:
            Decoded assets in source order.

        Raises:
            FetchError: A source could not be fetched. The cache stays empty.
            DecodeError: A source could not be decoded. The cache stays empty.
        """
        if self._assets is not None:
            return self._assets

        async with self._lock:
            # Another caller may have finished populating while we waited.
            if self._assets is not None:
                return self._assets

            logger.info("Populating asset cache from {} source(s)...", len(self._sources))
            decoded: list[PixelBuffer] = []
            for source in self._sources:
                data = await fetch(source)
                asset = decode(data)
                logger.debug(
                    "  Decoded {} ({}x{}).", _short(source), asset.width, asset.height
                )
                decoded.append(asset)

            self._assets = tuple(decoded)
            logger.info("Asset cache ready: {} asset(s) decoded.", len(self._assets))
            return self._assets


def _short(source: str, limit: int = 80) -> str:
    # data URIs can be many kilobytes long
    return source if len(source) <= limit else source[: limit - 3] + "..."
