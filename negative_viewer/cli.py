"""
Command line conversion of a single negative.

    python -m negative_viewer scan.jpg positive.jpg --sample 12 40 --contrast 1.2
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .core.errors import NegativeViewerError
from .core.params import Parameters
from .engine import Engine
from .image_io import JPEG_QUALITY, save_jpeg

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="negative_viewer",
        description="Convert a photographed color negative into a positive.",
    )
    p.add_argument("input", type=Path, help="decoded negative (JPEG, PNG, TIFF, ...)")
    p.add_argument("output", type=Path, help="JPEG to write")

    base = p.add_mutually_exclusive_group()
    base.add_argument("--base", nargs=3, type=int, metavar=("R", "G", "B"),
                      help="film-base color")
    base.add_argument("--sample", nargs=2, type=int, metavar=("X", "Y"),
                      help="pick the film-base color at preview coordinates")

    p.add_argument("--preset", type=Path, help="JSON parameter preset")
    p.add_argument("--exposure", type=float)
    p.add_argument("--brightness", type=float)
    p.add_argument("--contrast", type=float)
    p.add_argument("--shadows", nargs=3, type=float, metavar=("R", "G", "B"))
    p.add_argument("--midtones", nargs=3, type=float, metavar=("R", "G", "B"))
    p.add_argument("--highlights", nargs=3, type=float, metavar=("R", "G", "B"))
    p.add_argument("--max-dim", type=int, default=None, help="preview long-edge cap")
    p.add_argument("--preview", action="store_true",
                   help="write the preview render instead of the full resolution export")
    p.add_argument("--quality", type=int, default=JPEG_QUALITY)
    p.add_argument("--save-preset", type=Path, help="write the final parameters as JSON")
    p.add_argument("-v", "--verbose", action="count", default=0)
    return p


def load_preset(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Preset {path} must contain a JSON object")
    return data


def collect_changes(args: argparse.Namespace) -> dict:
    changes = {}
    if args.preset is not None:
        changes.update(load_preset(args.preset))
    if args.base is not None:
        changes["base_color"] = args.base
    for name in ("exposure", "brightness", "contrast", "shadows", "midtones", "highlights"):
        value = getattr(args, name)
        if value is not None:
            changes[name] = value
    return changes


def run(args: argparse.Namespace) -> Path:
    engine = Engine() if args.max_dim is None else Engine(max_dim=args.max_dim)
    engine.load_file(args.input)

    changes = collect_changes(args)
    if changes:
        engine.update(**changes)

    if args.sample is not None:
        x, y = args.sample
        if not engine.pick_base_color(x, y):
            logger.warning("Sample point (%d, %d) outside preview, keeping base color", x, y)

    params: Parameters = engine.params
    logger.info("Parameters: %s", params.to_dict())

    if args.save_preset is not None:
        with open(args.save_preset, "w", encoding="utf-8") as f:
            json.dump(params.to_dict(), f, indent=2)

    result = engine.preview if args.preview else engine.export()
    return save_jpeg(result, args.output, args.quality)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        out = run(args)
    except (NegativeViewerError, OSError, ValueError) as e:
        logger.error("%s", e)
        return 1

    print(out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
