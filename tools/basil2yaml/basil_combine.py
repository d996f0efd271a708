#!/usr/bin/env python3
"""Merge converted recipe YAML files into one list, repairing known null-field defects.

Some older conversions wrote ``ingredients: null`` or ``directions: null`` for
recipes without entries. Those fields are rewritten to empty strings; other
fields are passed through untouched. A record whose name, ingredients or
directions is missing or not a string after repair is skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from basil_config import REPAIRABLE_FIELDS, REQUIRED_FIELDS
from basil_errors import Basil2YamlError, DecodeError
from basil_logging import get_logger
from basil_yaml import dump_yaml, load_yaml, write_text_atomically

logger = get_logger(__name__)


@dataclass
class CombineResult:
    recipes: list[dict[str, Any]] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def repair_recipe(recipe: dict[str, Any]) -> dict[str, Any]:
    repaired = dict(recipe)
    for name in REPAIRABLE_FIELDS:
        if name in repaired and repaired[name] is None:
            logger.info("Fixing %s field.", name)
            repaired[name] = ""
    return repaired


def missing_fields(recipe: dict[str, Any]) -> list[str]:
    return [name for name in REQUIRED_FIELDS if not isinstance(recipe.get(name), str)]


def add_recipe_text(result: CombineResult, source: str, text: str) -> bool:
    try:
        payload = load_yaml(text)
    except DecodeError as exc:
        logger.error("Failed to load %s: %s", source, exc)
        result.failed.append(source)
        return False

    if not isinstance(payload, dict):
        logger.error("Failed to load %s: expected a recipe mapping, found %s", source, type(payload).__name__)
        result.failed.append(source)
        return False

    recipe = repair_recipe(payload)
    missing = missing_fields(recipe)
    if missing:
        logger.error("Failed to load %s: missing or non-string %s", source, ", ".join(missing))
        result.failed.append(source)
        return False

    try:
        dump_yaml(recipe)
    except Basil2YamlError as exc:
        logger.error("Bad recipe file: %s: %s", source, exc)
        logger.error("%r", recipe)
        result.failed.append(source)
        return False

    result.recipes.append(recipe)
    return True


def combine_recipe_texts(items: Iterable[tuple[str, str]]) -> CombineResult:
    result = CombineResult()
    for source, text in items:
        add_recipe_text(result, source, text)
    return result


def combine_recipe_files(paths: Iterable[Path], output_path: Path) -> CombineResult:
    result = CombineResult()
    for path in paths:
        logger.info("Loading %s...", path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to load %s: %s", path, exc)
            result.failed.append(str(path))
            continue
        add_recipe_text(result, str(path), text)

    logger.info("Writing all recipes to %s...", output_path)
    write_text_atomically(output_path, dump_yaml(result.recipes))
    return result
