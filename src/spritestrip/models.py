from __future__ import annotations

from dataclasses import dataclass

from spritestrip.errors import GeometryPreconditionError

CHANNELS = 4


@dataclass(frozen=True)
class PixelBuffer:
    """A row-major RGBA8 image held as a flat byte sequence.

    Pixel ``(x, y)`` channel ``c`` (0=R, 1=G, 2=B, 3=A) lives at byte
    ``(y * width + x) * 4 + c``. Decoded source assets keep immutable
    ``bytes``; canvases are ``bytearray`` so they can be written in place.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        pixels: ``width * height * 4`` bytes of RGBA data.
    """

    width: int
    height: int
    pixels: bytes | bytearray

    def __post_init__(self) -> None:
        self.validate()

    @classmethod
    def blank(cls, width: int, height: int) -> PixelBuffer:
        """Return a mutable, zero-filled (transparent black) buffer."""
        if width < 0 or height < 0:
            raise GeometryPreconditionError(f"negative dimensions {width}x{height}")
        return cls(width, height, bytearray(width * height * CHANNELS))

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def mutable(self) -> bool:
        return isinstance(self.pixels, bytearray)

    def validate(self) -> None:
        """Raise ``GeometryPreconditionError`` if the byte length is inconsistent.

        Raises:
            GeometryPreconditionError: Dimensions are negative or
                ``len(pixels) != width * height * 4``.
        """
        if self.width < 0 or self.height < 0:
            raise GeometryPreconditionError(
                f"negative dimensions {self.width}x{self.height}"
            )
        expected = self.width * self.height * CHANNELS
        if len(self.pixels) != expected:
            raise GeometryPreconditionError(
                f"{self.width}x{self.height} buffer needs {expected} bytes, "
                f"got {len(self.pixels)}"
            )

    def offset(self, x: int, y: int) -> int:
        """Byte index of the red channel of pixel ``(x, y)``."""
        return (y * self.width + x) * CHANNELS

    def pixel(self, x: int, y: int) -> bytes:
        """Return the 4 RGBA bytes of pixel ``(x, y)``.

        Raises:
            IndexError: ``(x, y)`` lies outside the buffer.
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} buffer")
        start = self.offset(x, y)
        return bytes(self.pixels[start : start + CHANNELS])

    def copy(self) -> PixelBuffer:
        """Return a mutable copy that shares no storage with this buffer."""
        return PixelBuffer(self.width, self.height, bytearray(self.pixels))


@dataclass(frozen=True)
class Placement:
    """Where one foreground sprite lands on the canvas.

    Attributes:
        foreground: The sprite, referenced rather than copied.
        x: Horizontal offset of the sprite's left edge; may be negative or
            beyond the canvas.
        y: Vertical offset of the sprite's top edge.
        asset_index: Index of the sprite in the asset pool it was drawn from,
            or ``-1`` when it did not come from a pool.
    """

    foreground: PixelBuffer
    x: int
    y: int
    asset_index: int = -1
