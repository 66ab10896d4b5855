from __future__ import annotations

import random
from dataclasses import dataclass

from loguru import logger

from spritestrip.cache import AssetCache
from spritestrip.codec import decode_png, encode_png
from spritestrip.composition.compositor import BlendFn
from spritestrip.composition.scene import build_scene
from spritestrip.config import Settings
from spritestrip.errors import SpritestripError
from spritestrip.fetch import SourceFetcher
from spritestrip.models import PixelBuffer


@dataclass
class RenderResult:
    """An image ready to be served.

    Attributes:
        content: Encoded image bytes.
        media_type: MIME type of ``content``.
        fallback: ``True`` when rendering failed and ``content`` is the
            fallback image.
    """

    content: bytes
    media_type: str = "image/png"
    fallback: bool = False


class ImageService:
    """Renders sprite strips: cache population → scene composition → PNG encoding."""

    def __init__(
        self,
        settings: Settings | None = None,
        fetcher: SourceFetcher | None = None,
        rng: random.Random | None = None,
        blend: BlendFn | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            settings: Geometry, sources and fallback configuration. Read from
                the environment when not provided.
            fetcher: Byte source for sprites, the background and the fallback
                image. Defaults to a ``SourceFetcher`` using
                ``settings.fetch_timeout``.
            rng: Random source for sprite selection. A fresh unseeded
                ``random.Random`` is used when not provided.
            blend: Optional handler for partially transparent pixels.
        """
        self.settings = settings or Settings.from_env()
        self.fetcher = fetcher or SourceFetcher(timeout=self.settings.fetch_timeout)
        self.rng = rng or random.Random()
        self.blend = blend
        self.assets = AssetCache(self.settings.sources)
        self.background = (
            AssetCache([self.settings.background_source])
            if self.settings.background_source
            else None
        )
        self._blank_png: bytes | None = None

    @property
    def ready(self) -> bool:
        """``True`` once every configured cache has been populated."""
        return self.assets.populated and (self.background is None or self.background.populated)

    async def load_assets(self) -> tuple[tuple[PixelBuffer, ...], PixelBuffer | None]:
        """Return the sprite pool and optional background, populating caches on first use.

        Raises:
            FetchError: A source could not be fetched.
            DecodeError: A source could not be decoded.
        """
        assets = await self.assets.get_or_populate(decode_png, self.fetcher)
        background = None
        if self.background is not None:
            (background,) = await self.background.get_or_populate(decode_png, self.fetcher)
        return assets, background

    async def compose(self, rng: random.Random | None = None) -> PixelBuffer:
        """Build one canvas from the cached assets.

        Args:
            rng: Overrides the service's random source for this call.
        """
        assets, background = await self.load_assets()
        s = self.settings
        return build_scene(
            assets,
            s.slot_count,
            s.canvas_width,
            s.canvas_height,
            s.tile_width,
            s.tile_height,
            rng or self.rng,
            background=background,
            blend=self.blend,
        )

    async def render(self, rng: random.Random | None = None) -> bytes:
        """Compose a canvas and encode it as PNG.

        Raises:
            SpritestripError: Any fetch, decode, geometry or encode failure.
        """
        canvas = await self.compose(rng)
        return encode_png(canvas, compress_level=self.settings.compress_level)

    async def respond(self) -> RenderResult:
        """Render an image, substituting the fallback image on any failure.

        Never raises for rendering errors; they are logged and replaced by
        ``fallback()``.
        """
        try:
            content = await self.render()
        except Exception:
            logger.exception("Rendering failed, serving fallback image.")
            return await self.fallback()
        return RenderResult(content)

    async def fallback(self) -> RenderResult:
        """Return the configured fallback image, or a transparent canvas-sized PNG."""
        url = self.settings.fallback_image_url
        if url:
            try:
                content, media_type = await self.fetcher.fetch_with_type(url)
            except SpritestripError as exc:
                logger.warning("Fallback image {} unavailable: {}", url, exc)
            else:
                return RenderResult(content, media_type, fallback=True)
        return RenderResult(self._blank(), fallback=True)

    def _blank(self) -> bytes:
        if self._blank_png is None:
            blank = PixelBuffer.blank(self.settings.canvas_width, self.settings.canvas_height)
            self._blank_png = encode_png(blank)
        return self._blank_png
