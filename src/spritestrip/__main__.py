from __future__ import annotations

import argparse
import asyncio
import os
import random
import sys
from datetime import datetime
from pathlib import Path

from loguru import logger

from spritestrip.composition.scene import plan_slots
from spritestrip.config import Settings
from spritestrip.errors import SpritestripError
from spritestrip.output import save_render
from spritestrip.service import ImageService


def _configure_logging() -> None:
    logger.remove()
    logger.add(sys.stderr, level=os.environ.get("LOG_LEVEL", "INFO").upper())


async def _render(settings: Settings, seed: int | None, output_dir: Path) -> Path:
    """Render one image and save it with metadata.

    Args:
        settings: Geometry and source configuration.
        seed: Seed for sprite selection, or ``None`` to draw one.
        output_dir: Base directory for the timestamped run directory.

    Returns:
        Path to the run directory.
    """
    if seed is None:
        seed = random.randrange(2**32)
    run_dir = output_dir / datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    run_dir.mkdir(parents=True, exist_ok=True)

    log_sink_id = logger.add(
        run_dir / "render.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {message}",
        level="DEBUG",
        encoding="utf-8",
    )
    try:
        service = ImageService(settings)
        logger.info(
            "Rendering {}x{} canvas with {} slot(s), seed={}.",
            settings.canvas_width,
            settings.canvas_height,
            settings.slot_count,
            seed,
        )
        png = await service.render(random.Random(seed))

        # build_scene only draws from the rng through plan_slots, so replaying
        # the seed reproduces the layout for the metadata.
        assets, _ = await service.load_assets()
        placements = plan_slots(
            assets, settings.slot_count, settings.tile_width, random.Random(seed)
        )
        save_render(
            png,
            placements,
            settings.sources,
            (settings.canvas_width, settings.canvas_height),
            output_dir,
            seed=seed,
            run_dir=run_dir,
        )
        logger.info("Render saved to {}", run_dir)
        return run_dir
    finally:
        logger.remove(log_sink_id)


def cli() -> None:
    """Entry point for the ``spritestrip`` console script."""
    parser = argparse.ArgumentParser(
        description="Compose PNG strips from randomly chosen sprites.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")

    render = sub.add_parser("render", help="Render one image to disk")
    render.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for sprite selection (default: random, recorded in metadata.json)",
    )
    render.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Base output directory (default: $OUTPUT_DIR or ./output)",
    )

    args = parser.parse_args()
    _configure_logging()

    try:
        settings = Settings.from_env()
    except ValueError as exc:
        parser.error(str(exc))

    if args.command == "serve":
        import uvicorn

        from spritestrip.app import create_app

        uvicorn.run(create_app(ImageService(settings)), host=args.host, port=args.port)
        return

    try:
        asyncio.run(_render(settings, args.seed, args.output_dir or settings.output_dir))
    except SpritestripError as exc:
        logger.error("Render failed: {}", exc)
        sys.exit(1)


if __name__ == "__main__":
    cli()
