#!/usr/bin/env python3
"""Photo resolution for archived recipes.

Each image entry is tried in display order: embedded data first, then a remote
URL, then the embedded thumbnail. The first entry that yields bytes wins.
"""

from __future__ import annotations

import io
from http.client import HTTPException
from typing import Callable
from urllib import request as urllib_request

from PIL import Image

from basil_archive import Graph, get_blob, get_int, get_list, get_string
from basil_config import (
    DISPLAY_ORDER_KEY,
    FETCH_TIMEOUT_SECONDS,
    IMAGE_DATA_KEY,
    IMAGE_THUMBNAIL_KEY,
    IMAGE_URL_KEY,
    IMAGES_KEY,
    USER_AGENT,
)
from basil_errors import NetworkFetchError
from basil_logging import get_logger

logger = get_logger(__name__)

# Takes a URL, returns the image bytes or raises NetworkFetchError.
ImageFetcher = Callable[[str], bytes]


def identify_image(data: bytes) -> str | None:
    """Return the Pillow format name of ``data``, or None when it is not an image."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return image.format
    except (OSError, ValueError):
        return None


def fetch_image_url(url: str, timeout: float = FETCH_TIMEOUT_SECONDS) -> bytes:
    try:
        req = urllib_request.Request(url, headers={"User-Agent": USER_AGENT})
        with urllib_request.urlopen(req, timeout=timeout) as resp:  # noqa: S310
            data = resp.read()
    except (OSError, ValueError, HTTPException) as exc:
        raise NetworkFetchError(url, str(exc)) from exc

    image_format = identify_image(data)
    if image_format is None:
        raise NetworkFetchError(url, "response is not an image")
    logger.debug("Fetched %s image (%d bytes) from %s", image_format, len(data), url)
    return data


def _resolve_entry(entry: Graph, fetcher: ImageFetcher) -> bytes | None:
    data = get_blob(entry, IMAGE_DATA_KEY)
    if data is not None:
        return data

    url = get_string(entry, IMAGE_URL_KEY)
    if url is not None:
        logger.info("Missing photo data, loading URL: %s", url)
        try:
            return fetcher(url)
        except NetworkFetchError as exc:
            logger.warning("Photo not loaded: %s", exc)
            return None

    thumbnail = get_blob(entry, IMAGE_THUMBNAIL_KEY)
    if thumbnail is not None:
        logger.info("Missing photo data or URL, using thumbnail.")
        return thumbnail

    return None


def resolve_photo(entries: list[Graph], fetcher: ImageFetcher = fetch_image_url) -> bytes | None:
    ordered: list[tuple[int, Graph]] = []
    for index, entry in enumerate(entries):
        order = get_int(entry, DISPLAY_ORDER_KEY)
        if order is None:
            logger.warning("Skipping image entry %d without a display order", index)
            continue
        ordered.append((order, entry))
    ordered.sort(key=lambda pair: pair[0])

    for _, entry in ordered:
        data = _resolve_entry(entry, fetcher)
        if data is not None:
            return data
    return None


def extract_photo(graph: Graph, fetcher: ImageFetcher = fetch_image_url) -> bytes | None:
    entries = get_list(graph, IMAGES_KEY)
    if not entries:
        return None
    return resolve_photo(entries, fetcher)
