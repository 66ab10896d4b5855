"""HTTP surface: one GET endpoint serving a freshly composed PNG."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

from fastapi import FastAPI
from fastapi.responses import Response

from spritestrip.service import ImageService


def create_app(service: ImageService | None = None) -> FastAPI:
    """Build the FastAPI application.

    One ``ImageService`` is shared by every request so the decoded asset
    cache lives as long as the process.

    Args:
        service: Pre-built service. Defaults to one configured from the
            environment.

    Returns:
        The configured ``FastAPI`` instance. Run it with
        ``uvicorn spritestrip.app:create_app --factory``.
    """
    service = service or ImageService()
    app = FastAPI(title="spritestrip")
    app.state.service = service

    @app.get("/", response_class=Response)
    @app.get("/image.png", response_class=Response)
    async def image() -> Response:
        result = await service.respond()
        if result.fallback:
            headers = {"cache-control": "no-store"}
        else:
            headers = {
                "cache-control": "public",
                "expires": http_expires(service.settings.cache_max_age),
            }
        return Response(content=result.content, media_type=result.media_type, headers=headers)

    @app.get("/healthz")
    async def healthz() -> dict:
        return {"status": "ok", "assets_cached": service.ready}

    return app


def http_expires(max_age: int, now: datetime | None = None) -> str:
    """Format ``now + max_age`` seconds as an RFC 1123 ``Expires`` value."""
    now = now or datetime.now(timezone.utc)
    return format_datetime(now + timedelta(seconds=max_age), usegmt=True)
