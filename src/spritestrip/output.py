from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from spritestrip.models import Placement


def save_render(
    png: bytes,
    placements: list[Placement],
    sources: tuple[str, ...],
    canvas_size: tuple[int, int],
    output_dir: str | Path,
    seed: int | None = None,
    run_dir: Path | None = None,
) -> Path:
    """Save a rendered PNG and its metadata to a timestamped subdirectory.

    Creates ``{output_dir}/{YYYY-MM-DD_HH-MM-SS}/`` containing
    ``render.png`` and ``metadata.json``. The metadata records the seed,
    the canvas size, every configured source and, per slot, which source
    was drawn and where.

    Args:
        png: Encoded image bytes.
        placements: Slot placements used for the render, left to right.
        sources: Source identifiers of the asset pool, indexed by
            ``Placement.asset_index``.
        canvas_size: ``(width, height)`` of the canvas.
        output_dir: Base directory for render outputs.
        seed: Seed of the random source, or ``None`` if unseeded.
        run_dir: Pre-created run directory. When provided, ``output_dir``
            is ignored for directory creation.

    Returns:
        Path to the run directory.
    """
    timestamp = datetime.now()
    if run_dir is None:
        run_dir = Path(output_dir) / timestamp.strftime("%Y-%m-%d_%H-%M-%S")
    run_dir.mkdir(parents=True, exist_ok=True)

    (run_dir / "render.png").write_bytes(png)

    metadata = {
        "timestamp": timestamp.strftime("%Y-%m-%dT%H:%M:%S"),
        "seed": seed,
        "canvas_size": list(canvas_size),
        "sources": list(sources),
        "slots": [
            {
                "asset_index": p.asset_index,
                "source": sources[p.asset_index] if 0 <= p.asset_index < len(sources) else None,
                "position": [p.x, p.y],
                "size": [p.foreground.width, p.foreground.height],
            }
            for p in placements
        ],
    }
    (run_dir / "metadata.json").write_text(json.dumps(metadata, indent=2) + "\n")

    return run_dir
