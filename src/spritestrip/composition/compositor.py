from __future__ import annotations

from collections.abc import Callable

from spritestrip.errors import GeometryPreconditionError
from spritestrip.models import CHANNELS, PixelBuffer

TRANSPARENT = 0
OPAQUE = 255

_ALPHA = 3

BlendFn = Callable[[bytes, bytes], bytes]
"""Blend hook for partially transparent pixels: ``(src_rgba, dst_rgba) -> new_dst_rgba``."""


def blit(
    background: PixelBuffer,
    foreground: PixelBuffer,
    x: int,
    y: int,
    *,
    blend: BlendFn | None = None,
) -> None:
    """Draw ``foreground`` onto ``background`` with its top-left corner at ``(x, y)``.

    Each foreground pixel ``(fx, fy)`` maps to ``(x + fx, y + fy)`` on the
    background. Destinations outside the background are skipped, so sprites
    may hang off any edge and the two buffers may have unrelated widths.

    Alpha policy per source pixel:

    - ``0``: the destination is left untouched.
    - ``255``: all four destination channels are overwritten.
    - anything else: no write, unless ``blend`` is given, in which case it
      receives the source and destination pixels and returns the new
      destination pixel.

    Args:
        background: Canvas to draw on. Must be mutable (``bytearray``).
        foreground: Sprite to draw. Never modified.
        x: Horizontal offset of the sprite on the canvas.
        y: Vertical offset of the sprite on the canvas.
        blend: Optional handler for partially transparent pixels.

    Raises:
        GeometryPreconditionError: Either buffer's length disagrees with its
            dimensions, or the background is read-only. Checked before any
            pixel is written.
    """
    background.validate()
    foreground.validate()
    if not background.mutable:
        raise GeometryPreconditionError("background buffer is read-only")

    dst = background.pixels
    src = foreground.pixels
    bg_width, bg_height = background.size
    fg_width = foreground.width

    for fy in range(foreground.height):
        dy = y + fy
        if not 0 <= dy < bg_height:
            continue
        for fx in range(fg_width):
            dx = x + fx
            if not 0 <= dx < bg_width:
                continue

            s = (fy * fg_width + fx) * CHANNELS
            alpha = src[s + _ALPHA]
            if alpha == TRANSPARENT:
                continue

            d = (dy * bg_width + dx) * CHANNELS
            if alpha == OPAQUE:
                dst[d : d + CHANNELS] = src[s : s + CHANNELS]
            elif blend is not None:
                dst[d : d + CHANNELS] = _checked(
                    blend(bytes(src[s : s + CHANNELS]), bytes(dst[d : d + CHANNELS]))
                )


def _checked(pixel: bytes) -> bytes:
    # A short or long slice assignment would silently resize the bytearray.
    if len(pixel) != CHANNELS:
        raise GeometryPreconditionError(f"blend returned {len(pixel)} bytes, expected 4")
    return pixel
