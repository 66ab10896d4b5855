"""Exception types raised by spritestrip."""

from __future__ import annotations


class SpritestripError(Exception):
    """Base class for every error raised by this package."""


class FetchError(SpritestripError):
    """Source bytes could not be retrieved (network, HTTP status, missing file)."""


class DecodeError(SpritestripError):
    """Fetched bytes are not a decodable image."""


class EncodeError(SpritestripError):
    """A pixel buffer could not be encoded to PNG."""


class GeometryPreconditionError(SpritestripError):
    """A pixel buffer's byte length disagrees with its declared dimensions.

    This is a programming error, raised before any compositing starts.
    """
