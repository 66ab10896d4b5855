from __future__ import annotations

import random
from collections.abc import Sequence

from loguru import logger

from spritestrip.composition.compositor import BlendFn, blit
from spritestrip.models import PixelBuffer, Placement


def plan_slots(
    assets: Sequence[PixelBuffer],
    slot_count: int,
    tile_width: int,
    rng: random.Random,
) -> list[Placement]:
    """Pick an asset for every slot of a horizontal strip.

    Slot ``i`` gets a uniformly random asset (with replacement) placed at
    ``(i * tile_width, 0)``.

    Args:
        assets: Decoded sprite pool.
        slot_count: Number of slots to fill.
        tile_width: Horizontal distance between consecutive slots.
        rng: Random source; pass a seeded ``random.Random`` for repeatable
            layouts.

    Returns:
        One ``Placement`` per slot, left to right.

    Raises:
        ValueError: ``slot_count`` is positive but ``assets`` is empty.
    """
    if slot_count > 0 and not assets:
        raise ValueError("cannot fill slots from an empty asset pool")

    placements = []
    for i in range(slot_count):
        index = rng.randrange(len(assets))
        placements.append(Placement(assets[index], i * tile_width, 0, asset_index=index))
    return placements


def build_scene(
    assets: Sequence[PixelBuffer],
    slot_count: int,
    canvas_width: int,
    canvas_height: int,
    tile_width: int,
    tile_height: int,
    rng: random.Random,
    *,
    background: PixelBuffer | None = None,
    blend: BlendFn | None = None,
) -> PixelBuffer:
    """Compose a strip of randomly chosen sprites onto a fresh canvas.

    The canvas starts fully transparent. When ``background`` is given it is
    drawn first at ``(0, 0)``. Canvas area not covered by any slot keeps its
    initial value; slots starting past the right edge are clipped away.

    Args:
        assets: Decoded sprite pool. Not modified.
        slot_count: Number of sprites to place.
        canvas_width: Output width in pixels.
        canvas_height: Output height in pixels.
        tile_width: Nominal sprite width, also the slot stride.
        tile_height: Nominal sprite height.
        rng: Random source used for asset selection.
        background: Optional decoded background image.
        blend: Optional handler for partially transparent pixels, see ``blit``.

    Returns:
        The composed canvas.
    """
    canvas = PixelBuffer.blank(canvas_width, canvas_height)
    if background is not None:
        blit(canvas, background, 0, 0, blend=blend)

    for placement in plan_slots(assets, slot_count, tile_width, rng):
        sprite = placement.foreground
        if sprite.size != (tile_width, tile_height):
            logger.debug(
                "Asset {} is {}x{}, nominal tile is {}x{}.",
                placement.asset_index,
                sprite.width,
                sprite.height,
                tile_width,
                tile_height,
            )
        blit(canvas, sprite, placement.x, placement.y, blend=blend)

    return canvas
