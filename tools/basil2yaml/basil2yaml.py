#!/usr/bin/env python3
"""Convert Basil .recipe archives to YAML and combine converted recipes.

Commands:
  convert   one or more .recipe files to .yml files (or one YAML list on stdout)
  combine   several recipe .yml files into a single .yml file
  dump      print the decoded object graph of a .recipe file
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.pretty import pprint

from basil_combine import combine_recipe_files
from basil_config import DEFAULT_COMBINED_FILE, DEFAULT_OUTPUT_DIR, EXCLUDE_IMAGES, LOG_LEVEL, OUTPUT_SUFFIX
from basil_errors import Basil2YamlError
from basil_logging import get_logger, setup_logging
from basil_recipe import convert_recipe_file, read_archive
from basil_yaml import dump_yaml, write_text_atomically

logger = get_logger("basil2yaml")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def output_path_for(input_path: Path, recipe: dict[str, Any], output_dir: Path, use_recipe_name: bool) -> Path:
    stem = input_path.name
    if use_recipe_name:
        name = str(recipe.get("name") or "")
        for separator in {os.sep, "/"}:
            name = name.replace(separator, "-")
        if name:
            stem = name
    return output_dir / f"{stem}{OUTPUT_SUFFIX}"


def run_convert(args: argparse.Namespace) -> int:
    output_dir = Path(args.output_dir)
    if not args.combine:
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Cannot use output directory %s: %s", output_dir, exc)
            return 1

    recipes: list[dict[str, Any]] = []
    failures = 0
    for filename in args.filenames:
        input_path = Path(filename)
        logger.info("Loading %s...", input_path)
        try:
            recipe = convert_recipe_file(input_path, exclude_images=args.exclude_images)
        except Basil2YamlError as exc:
            logger.error("Skipping %s: %s", input_path, exc)
            failures += 1
            continue

        if args.combine:
            recipes.append(recipe)
            continue

        out_path = output_path_for(input_path, recipe, output_dir, args.use_recipe_name)
        logger.info("Converting %s to %s...", input_path, out_path)
        try:
            write_text_atomically(out_path, dump_yaml(recipe))
        except Basil2YamlError as exc:
            logger.error("Skipping %s: %s", input_path, exc)
            failures += 1

    if args.combine:
        sys.stdout.write(dump_yaml(recipes))
        sys.stdout.flush()

    if failures:
        logger.error("%d of %d file(s) failed", failures, len(args.filenames))
        return 1
    return 0


def run_combine(args: argparse.Namespace) -> int:
    output_path = Path(args.output_file)
    try:
        result = combine_recipe_files([Path(name) for name in args.filenames], output_path)
    except Basil2YamlError as exc:
        logger.error("%s", exc)
        return 1

    logger.info("Combined %d recipe(s) into %s", len(result.recipes), output_path)
    if result.failed:
        logger.error("%d of %d file(s) skipped", len(result.failed), len(args.filenames))
        return 1
    return 0


def run_dump(args: argparse.Namespace) -> int:
    try:
        graph = read_archive(Path(args.filename))
    except Basil2YamlError as exc:
        logger.error("Could not decode %s: %s", args.filename, exc)
        return 1
    pprint(graph, console=Console(), max_string=200)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="basil2yaml", description="Convert Basil recipes to YAML")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=LOG_LEVEL,
        help="Logging level (default: %(default)s)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    convert = commands.add_parser("convert", help="Convert one or more Basil .recipe files to .yml files")
    convert.add_argument(
        "--output-dir",
        default=DEFAULT_OUTPUT_DIR,
        help="Output individual yml files in the specified directory.",
    )
    convert.add_argument(
        "--use-recipe-name",
        action="store_true",
        help="Use the recipe name for the yml file instead of the original filename.",
    )
    convert.add_argument(
        "--combine",
        action="store_true",
        help="Combine all recipes into a multi-recipe yml file written to stdout.",
    )
    convert.add_argument("--exclude-images", action="store_true", default=EXCLUDE_IMAGES, help="Exclude images.")
    convert.add_argument("filenames", nargs="+", help="One or more Basil .recipe files")
    convert.set_defaults(handler=run_convert)

    combine = commands.add_parser("combine", help="Combine multiple recipe .yml files into a single .yml file")
    combine.add_argument("--output-file", default=DEFAULT_COMBINED_FILE, help="Output file path")
    combine.add_argument("filenames", nargs="+", help="Files to combine")
    combine.set_defaults(handler=run_combine)

    dump = commands.add_parser("dump", help="Print the decoded object graph of a Basil .recipe file")
    dump.add_argument("filename")
    dump.set_defaults(handler=run_dump)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    return args.handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
