"""Command line interface for revdiff."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from .config import load_config
from .core.types import Annotation
from .engine import Engine
from .overlay import render_highlights
from .presets import EngineConfig, get_preset, iter_presets, parse_color
from .report import write_json_report

logger = logging.getLogger("revdiff")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="revdiff",
        description="Compare two revisions of a PDF page and report changed regions.",
    )
    parser.add_argument("--old", help="Path to the earlier revision")
    parser.add_argument("--new", help="Path to the later revision")
    parser.add_argument("--json", help="Diff report path (JSON)")
    parser.add_argument("--annotated", help="Write the later revision with highlights drawn on it")
    parser.add_argument("--message", default="", help="Commit message for the later revision")
    parser.add_argument("--preset", help="Preset name (fast|balanced|patient)")
    parser.add_argument("--env-file", help="Optional .env file with REVDIFF_* settings")
    parser.add_argument("--page", type=int, help="1-based page to compare")
    parser.add_argument("--scale", type=float, help="Display scale of the extracted geometry")
    parser.add_argument("--quantization-step", type=float, help="Annotation matching grid step")
    parser.add_argument("--min-highlight-chars", type=int, help="Ignore edits shorter than this")
    parser.add_argument("--old-annotations", help="JSON list of annotations of the earlier revision")
    parser.add_argument("--new-annotations", help="JSON list of annotations of the later revision")
    parser.add_argument("--added-color", help="Colour for added regions (#RRGGBB or r,g,b)")
    parser.add_argument("--deleted-color", help="Colour for deleted regions")
    parser.add_argument("--modified-color", help="Colour for modified annotations")
    parser.add_argument("--list-presets", action="store_true", help="Print the available presets as JSON and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from . import __version__

        print(__version__)
        return 0

    if args.list_presets:
        print(json.dumps([preset.to_dict() for preset in iter_presets()], indent=2))
        return 0

    missing = [flag for flag in ("old", "new", "json") if not getattr(args, flag)]
    if missing:
        parser.error("the following arguments are required: " + ", ".join("--" + flag for flag in missing))

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _override_config(load_config(args.preset, env_file=args.env_file), args)
        preset = get_preset(args.preset or os.getenv("REVDIFF_PRESET") or "balanced")
        colors = preset.colors.with_overrides(
            added=parse_color(args.added_color),
            deleted=parse_color(args.deleted_color),
            modified=parse_color(args.modified_color),
        )
        old_annotations = _load_annotations(args.old_annotations)
        new_annotations = _load_annotations(args.new_annotations)
    except (KeyError, ValueError) as exc:
        parser.error(str(exc))
        return 2

    # PyMuPDF is only needed once real files are involved
    from .backend.fitz_mutator import FitzMutator
    from .backend.fitz_renderer import FitzRenderer

    mutator = FitzMutator()
    engine = Engine(FitzRenderer(), mutator, config, colors=colors)
    first = engine.load_document(Path(args.old).read_bytes(), old_annotations)
    engine.replace_document(Path(args.new).read_bytes(), new_annotations)
    second = engine.commit(args.message or Path(args.new).name)

    result = asyncio.run(engine.compare(first.sequence_number, second.sequence_number))
    write_json_report(result, args.json, revisions=engine.revisions)

    if not result.ok:
        logger.error("comparison failed: %s", result.reason.describe() if result.reason else result.status.value)
        return 1

    if args.annotated:
        data = render_highlights(
            mutator,
            second.document_bytes,
            result.highlights,
            page=config.page_number,
            scale=config.scale,
            colors=colors,
            fill_opacity=preset.fill_opacity,
        )
        out_path = Path(args.annotated)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(data)

    logger.info("%d highlights written to %s", len(result.highlights), args.json)
    return 0


def _override_config(config: EngineConfig, args: argparse.Namespace) -> EngineConfig:
    overrides = {}
    for field_name, arg_name in (
        ("page_number", "page"),
        ("scale", "scale"),
        ("quantization_step", "quantization_step"),
        ("min_highlight_chars", "min_highlight_chars"),
    ):
        value = getattr(args, arg_name)
        if value is not None:
            overrides[field_name] = value
    return config.copy(**overrides)


def _load_annotations(path: Optional[str]) -> List[Annotation]:
    if not path:
        return []
    with open(path, "r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of annotations")
    try:
        return [Annotation.from_dict(item) for item in data]
    except KeyError as exc:
        raise ValueError(f"{path}: annotation missing field {exc}") from exc


if __name__ == "__main__":
    sys.exit(main())
