"""PNG decode/encode adapter over Pillow."""

from __future__ import annotations

from io import BytesIO

from PIL import Image

from spritestrip.errors import DecodeError, EncodeError, GeometryPreconditionError
from spritestrip.models import PixelBuffer


def decode_png(data: bytes) -> PixelBuffer:
    """Decode an image bitstream into an immutable RGBA8 ``PixelBuffer``.

    Any format Pillow can read is accepted; palette, greyscale and RGB
    images are converted to RGBA.

    Raises:
        DecodeError: ``data`` is not a readable image.
    """
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except Exception as exc:
        raise DecodeError(f"cannot decode image ({len(data)} bytes): {exc}") from exc
    return image_to_buffer(img)


def encode_png(buffer: PixelBuffer, *, compress_level: int = 6) -> bytes:
    """Encode ``buffer`` as an RGBA PNG.

    Raises:
        EncodeError: The buffer is malformed or Pillow refuses to write it.
    """
    try:
        img = buffer_to_image(buffer)
        out = BytesIO()
        img.save(out, format="PNG", compress_level=compress_level)
    except (GeometryPreconditionError, OSError, ValueError) as exc:
        raise EncodeError(f"cannot encode {buffer.width}x{buffer.height} buffer: {exc}") from exc
    return out.getvalue()


def image_to_buffer(img: Image.Image) -> PixelBuffer:
    rgba = img.convert("RGBA")
    w, h = rgba.size
    return PixelBuffer(w, h, rgba.tobytes())


def buffer_to_image(buffer: PixelBuffer) -> Image.Image:
    buffer.validate()
    return Image.frombytes("RGBA", buffer.size, bytes(buffer.pixels))
