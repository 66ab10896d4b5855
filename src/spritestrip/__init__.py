"""spritestrip: serve PNG strips composed from randomly chosen sprites."""

from dotenv import load_dotenv

load_dotenv()

from spritestrip.cache import AssetCache  # noqa: E402
from spritestrip.composition import blit, build_scene  # noqa: E402
from spritestrip.config import Settings  # noqa: E402
from spritestrip.models import PixelBuffer, Placement  # noqa: E402
from spritestrip.service import ImageService, RenderResult  # noqa: E402

__all__ = [
    "AssetCache",
    "ImageService",
    "PixelBuffer",
    "Placement",
    "RenderResult",
    "Settings",
    "blit",
    "build_scene",
]
