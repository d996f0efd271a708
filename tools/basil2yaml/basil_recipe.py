#!/usr/bin/env python3
"""Assemble a recipe record from a decoded Basil archive."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from basil_archive import Graph, decode_archive
from basil_errors import DecodeError
from basil_fields import (
    extract_directions,
    extract_favorite,
    extract_ingredients,
    extract_name,
    extract_notes,
    extract_servings,
    extract_source_name,
    extract_source_url,
    extract_total_time,
)
from basil_images import ImageFetcher, extract_photo, fetch_image_url

FAVORITE_VALUE = "yes"


def _set_if_present(recipe: dict[str, Any], field: str, value: Any) -> None:
    if value is not None:
        recipe[field] = value


def assemble_recipe(
    graph: Graph,
    *,
    exclude_images: bool = False,
    fetcher: ImageFetcher = fetch_image_url,
) -> dict[str, Any]:
    """Build the ordered recipe mapping; optional fields are left out rather than set to None."""
    recipe: dict[str, Any] = {
        "name": extract_name(graph),
        "ingredients": extract_ingredients(graph),
        "directions": extract_directions(graph),
    }

    source_url = extract_source_url(graph)
    if source_url is not None:
        recipe["source_url"] = source_url
        _set_if_present(recipe, "source", extract_source_name(source_url))

    _set_if_present(recipe, "servings", extract_servings(graph))
    _set_if_present(recipe, "total_time", extract_total_time(graph))

    if extract_favorite(graph):
        recipe["on_favorites"] = FAVORITE_VALUE

    if not exclude_images:
        _set_if_present(recipe, "photo", extract_photo(graph, fetcher))

    _set_if_present(recipe, "notes", extract_notes(graph))
    return recipe


def read_archive(path: Path) -> Graph:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DecodeError(f"Could not read archive: {exc.strerror or exc}", {"path": str(path)}) from exc
    return decode_archive(data)


def convert_recipe_file(
    path: Path,
    *,
    exclude_images: bool = False,
    fetcher: ImageFetcher = fetch_image_url,
) -> dict[str, Any]:
    return assemble_recipe(read_archive(path), exclude_images=exclude_images, fetcher=fetcher)
