#!/usr/bin/env python3
"""Field extraction rules, one per output field of a converted recipe."""

from __future__ import annotations

import re
import string
from functools import reduce
from typing import Iterable
from urllib.parse import SplitResult, urlsplit

from basil_archive import Graph, get_bool, get_int, get_string, require_list
from basil_config import (
    DIRECTIONS_KEY,
    DISPLAY_ORDER_KEY,
    FAVORITE_KEY,
    INGREDIENTS_KEY,
    NAME_KEY,
    NOTES_KEY,
    SERVINGS_KEY,
    SOURCE_KEY,
    TEXT_KEY,
    TIME_KEY,
)
from basil_errors import MalformedArchiveError
from basil_logging import get_logger

logger = get_logger(__name__)

SECTION_HEADER_SUFFIX = ":"

_URL_CHARACTERS = frozenset(string.ascii_letters + string.digits + "-._~:/?#[]@!$&'()*+,;=%")
_BROKEN_PERCENT_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def extract_name(graph: Graph) -> str:
    name = get_string(graph, NAME_KEY)
    if name is None:
        raise MalformedArchiveError(NAME_KEY, "missing or not a string")
    return name.strip()


def _sorted_entries(graph: Graph, key: str) -> list[tuple[int, Graph]]:
    entries: list[tuple[int, Graph]] = []
    for index, entry in enumerate(require_list(graph, key)):
        order = get_int(entry, DISPLAY_ORDER_KEY)
        if order is None:
            raise MalformedArchiveError(key, "entry has no integer displayOrder", index)
        entries.append((order, entry))
    return sorted(entries, key=lambda pair: pair[0])


def extract_ingredients(graph: Graph) -> str:
    texts = (get_string(entry, TEXT_KEY) for _, entry in _sorted_entries(graph, INGREDIENTS_KEY))
    return "\n".join(text for text in texts if text is not None)


def number_directions(texts: Iterable[str]) -> list[str]:
    """Number steps within each section; a text ending in ':' is a header and restarts the count.

    The fold carries the sorted position where the current section starts, so
    numbering stays contiguous however sparse the display orders are.
    """

    def step(state: tuple[int, list[str]], item: tuple[int, str]) -> tuple[int, list[str]]:
        section_start, lines = state
        position, text = item
        if text.endswith(SECTION_HEADER_SUFFIX):
            return position + 1, [*lines, text]
        return section_start, [*lines, f"{position - section_start + 1}. {text}"]

    _, lines = reduce(step, enumerate(texts), (0, []))
    return lines


def extract_directions(graph: Graph) -> str:
    texts: list[str] = []
    for _, entry in _sorted_entries(graph, DIRECTIONS_KEY):
        text = get_string(entry, TEXT_KEY)
        if text is None:
            raise MalformedArchiveError(DIRECTIONS_KEY, "entry has no text")
        texts.append(text)
    return "\n\n".join(number_directions(texts))


def parse_url(text: str) -> SplitResult | None:
    if not text or any(char not in _URL_CHARACTERS for char in text):
        return None
    if _BROKEN_PERCENT_ESCAPE.search(text):
        return None
    try:
        parts = urlsplit(text)
        _ = parts.port  # raises for a non-numeric port
    except ValueError:
        return None
    return parts


def extract_source_url(graph: Graph) -> str | None:
    text = get_string(graph, SOURCE_KEY)
    if text is None:
        return None
    if parse_url(text) is None:
        logger.debug("Ignoring source that is not a URL: %r", text)
        return None
    return text


def extract_source_name(url: str) -> str | None:
    parts = parse_url(url)
    if parts is None or not parts.hostname:
        return None
    host = parts.hostname
    if host.startswith("www."):
        return host[len("www."):]
    return host


def extract_servings(graph: Graph) -> str | None:
    return get_string(graph, SERVINGS_KEY)


def extract_time(graph: Graph) -> int | None:
    seconds = get_int(graph, TIME_KEY)
    if seconds is None or seconds == 0:
        return None
    if seconds < 0:
        logger.warning("Ignoring negative recipe time: %d seconds", seconds)
        return None
    return seconds


def seconds_to_time_string(seconds: int) -> str:
    hours, remainder = divmod(seconds, 3600)
    text = f"{remainder // 60} min"
    if hours > 0:
        text = f"{hours} hr {text}"
    return text


def extract_total_time(graph: Graph) -> str | None:
    seconds = extract_time(graph)
    if seconds is None:
        return None
    return seconds_to_time_string(seconds)


def extract_favorite(graph: Graph) -> bool:
    favorite = get_int(graph, FAVORITE_KEY)
    if favorite is None:
        # NSNumber booleans archive as plist booleans.
        return get_bool(graph, FAVORITE_KEY) is True
    return favorite != 0


def extract_notes(graph: Graph) -> str | None:
    return get_string(graph, NOTES_KEY)
