"""Command-line interface for widgetmap."""

from __future__ import annotations

import argparse
import dataclasses
import logging
from pathlib import Path

from widgetmap.config import ANALYZERS, load_settings
from widgetmap.docs import DocsMode
from widgetmap.errors import WidgetMapError
from widgetmap.pipeline import run

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="widgetmap",
        description="Inventory the public type hierarchy of a widget library as JSON.",
    )
    parser.add_argument(
        "project_dir",
        type=Path,
        nargs="?",
        default=Path("."),
        help="Path to the project to analyze (default: current directory)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help=(
            "Output JSON file path, relative to the working directory "
            "(default: widgets.json)"
        ),
    )
    parser.add_argument(
        "--root",
        dest="root_type",
        default=None,
        help="Root type whose descendants are reported (default: Widget)",
    )
    parser.add_argument(
        "--docs",
        choices=[m.value for m in DocsMode],
        default=None,
        help="Emit full documentation or only its first paragraph",
    )
    parser.add_argument(
        "--include-private",
        action="store_true",
        default=None,
        help="Also report types whose names start with an underscore",
    )
    parser.add_argument(
        "--no-root",
        dest="include_root",
        action="store_false",
        default=None,
        help="Leave the root type itself out of the report",
    )
    parser.add_argument(
        "--analyzer",
        choices=ANALYZERS,
        default=None,
        help="Source front end to use (default: auto-detect)",
    )
    parser.add_argument(
        "--source-dir",
        type=Path,
        default=None,
        help="Source directory relative to the project (default: auto-detect)",
    )
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help=(
            "Read resolved class metadata from this JSON/YAML snapshot; "
            "a relative path is taken from the project directory"
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if args.verbose:
        logging.getLogger("widgetmap").setLevel(logging.DEBUG)

    overrides = {
        key: value
        for key, value in vars(args).items()
        if key not in ("project_dir", "verbose") and value is not None
    }
    if "docs" in overrides:
        overrides["docs"] = DocsMode(overrides["docs"])

    try:
        settings = dataclasses.replace(load_settings(args.project_dir), **overrides)
        report = run(args.project_dir, settings=settings)
    except WidgetMapError as e:
        logger.error("%s", e)
        return e.exit_code

    return report.exit_code
