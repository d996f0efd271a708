from __future__ import annotations

import os


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


FETCH_TIMEOUT_SECONDS = float(os.environ.get("BASIL2YAML_FETCH_TIMEOUT") or 20)
USER_AGENT = (
    os.environ.get("BASIL2YAML_USER_AGENT")
    or "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0) AppleWebKit/537.36 (KHTML, like Gecko) basil2yaml"
)
LOG_LEVEL = (os.environ.get("BASIL2YAML_LOG_LEVEL") or "INFO").strip().upper()
EXCLUDE_IMAGES = _env_flag("BASIL2YAML_EXCLUDE_IMAGES")

DEFAULT_OUTPUT_DIR = "."
DEFAULT_COMBINED_FILE = "all.yml"
OUTPUT_SUFFIX = ".yml"

# Keys of the Basil recipe archive.
NAME_KEY = "name"
INGREDIENTS_KEY = "Ingredient"
DIRECTIONS_KEY = "Direction"
IMAGES_KEY = "Image"
SOURCE_KEY = "source"
SERVINGS_KEY = "servings"
TIME_KEY = "time"
FAVORITE_KEY = "favorite"
NOTES_KEY = "notes"

DISPLAY_ORDER_KEY = "displayOrder"
TEXT_KEY = "text"
IMAGE_DATA_KEY = "Data"
IMAGE_URL_KEY = "url"
IMAGE_THUMBNAIL_KEY = "thumbnail"

REPAIRABLE_FIELDS = ("ingredients", "directions")
REQUIRED_FIELDS = ("name", "ingredients", "directions")
