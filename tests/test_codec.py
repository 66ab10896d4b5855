from __future__ import annotations

from io import BytesIO

import pytest
from PIL import Image

from spritestrip.codec import decode_png, encode_png
from spritestrip.errors import DecodeError, EncodeError
from spritestrip.models import PixelBuffer


def _png(img: Image.Image) -> bytes:
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def test_decode_rgba_png():
    img = Image.new("RGBA", (3, 2), (10, 20, 30, 40))
    buf = decode_png(_png(img))
    assert buf.size == (3, 2)
    assert buf.pixel(2, 1) == bytes([10, 20, 30, 40])
    assert not buf.mutable


def test_decode_converts_rgb_to_opaque_rgba():
    buf = decode_png(_png(Image.new("RGB", (2, 2), (1, 2, 3))))
    assert buf.pixel(0, 0) == bytes([1, 2, 3, 255])


def test_decode_palette_with_transparency():
    img = Image.new("P", (2, 1))
    img.putpalette([0, 0, 0, 255, 0, 0] + [0] * 762)
    img.putpixel((1, 0), 1)
    img.info["transparency"] = 0
    buf = decode_png(_png(img))
    assert buf.pixel(0, 0)[3] == 0
    assert buf.pixel(1, 0) == bytes([255, 0, 0, 255])


def test_decode_garbage_raises():
    with pytest.raises(DecodeError):
        decode_png(b"definitely not a png")


def test_decode_truncated_png_raises():
    data = _png(Image.new("RGBA", (64, 64), (5, 5, 5, 255)))
    with pytest.raises(DecodeError):
        decode_png(data[: len(data) // 2])


def test_encode_produces_png_with_same_pixels():
    buf = PixelBuffer.blank(4, 3)
    buf.pixels[0:4] = bytes([9, 8, 7, 255])
    data = encode_png(buf)

    assert data.startswith(b"\x89PNG\r\n\x1a\n")
    img = Image.open(BytesIO(data))
    assert img.mode == "RGBA"
    assert img.size == (4, 3)
    assert img.getpixel((0, 0)) == (9, 8, 7, 255)
    assert img.getpixel((3, 2)) == (0, 0, 0, 0)


def test_encode_malformed_buffer_raises():
    buf = PixelBuffer.blank(2, 2)
    buf.pixels.pop()
    with pytest.raises(EncodeError):
        encode_png(buf)

