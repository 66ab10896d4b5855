from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

_EMOJI_BASE = "https://emojipedia-us.s3.dualstack.us-west-1.amazonaws.com/thumbs/72/microsoft/310"

DEFAULT_SOURCES: tuple[str, ...] = (
    f"{_EMOJI_BASE}/beaming-face-with-smiling-eyes_1f601.png",
    f"{_EMOJI_BASE}/cold-face_1f976.png",
    f"{_EMOJI_BASE}/smiling-face-with-horns_1f608.png",
    f"{_EMOJI_BASE}/skull_1f480.png",
    f"{_EMOJI_BASE}/alien_1f47d.png",
    f"{_EMOJI_BASE}/pouting-face_1f621.png",
    f"{_EMOJI_BASE}/face-with-spiral-eyes_1f635-200d-1f4ab.png",
)

ONE_WEEK = 7 * 24 * 60 * 60


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the renderer and HTTP service.

    Attributes:
        sources: Sprite source identifiers (URLs, data URIs or paths).
        background_source: Optional image drawn under the sprites.
        fallback_image_url: Image served when rendering fails. A locally
            encoded transparent PNG is used when unset or unreachable.
        canvas_width: Output width in pixels.
        canvas_height: Output height in pixels.
        tile_width: Nominal sprite width and slot stride.
        tile_height: Nominal sprite height.
        slot_count: Number of sprites per image.
        fetch_timeout: HTTP timeout in seconds for source fetches.
        cache_max_age: Seconds until a served image expires.
        compress_level: zlib level (0-9) for the PNG encoder.
        output_dir: Base directory for ``spritestrip render`` runs.
    """

    sources: tuple[str, ...] = DEFAULT_SOURCES
    background_source: str | None = None
    fallback_image_url: str | None = None
    canvas_width: int = 216
    canvas_height: int = 72
    tile_width: int = 72
    tile_height: int = 72
    slot_count: int = 3
    fetch_timeout: float = 30.0
    cache_max_age: int = ONE_WEEK
    compress_level: int = 6
    output_dir: Path = field(default_factory=lambda: Path("output"))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        ``.env`` files are loaded when the package is imported, so values
        there are visible here too. Unset or empty variables keep their
        defaults.

        Args:
            environ: Mapping to read instead of ``os.environ``.

        Raises:
            ValueError: A numeric variable does not parse, is negative, or is
                zero for a canvas or tile dimension.
        """
        env = os.environ if environ is None else environ
        sources = _split_sources(env.get("IMAGE_SOURCES", ""))
        return cls(
            sources=sources or DEFAULT_SOURCES,
            background_source=env.get("BACKGROUND_SOURCE") or None,
            fallback_image_url=env.get("FALLBACK_IMAGE_URL") or None,
            canvas_width=_int(env, "CANVAS_WIDTH", 216, minimum=1),
            canvas_height=_int(env, "CANVAS_HEIGHT", 72, minimum=1),
            tile_width=_int(env, "TILE_WIDTH", 72, minimum=1),
            tile_height=_int(env, "TILE_HEIGHT", 72, minimum=1),
            slot_count=_int(env, "SLOT_COUNT", 3),
            fetch_timeout=_float(env, "FETCH_TIMEOUT", 30.0),
            cache_max_age=_int(env, "CACHE_MAX_AGE", ONE_WEEK),
            compress_level=_int(env, "PNG_COMPRESS_LEVEL", 6),
            output_dir=Path(env.get("OUTPUT_DIR") or "output"),
        )


def _split_sources(raw: str) -> tuple[str, ...]:
    # Whitespace-separated: data URIs contain commas.
    return tuple(raw.split())


def _int(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {value}")
    return value


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value
