#!/usr/bin/env python3
"""YAML encoding of recipe records and atomic output writes."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from basil_errors import Basil2YamlError, DecodeError, WriteError

OUTPUT_FILE_MODE = 0o644


class RecipeDumper(yaml.SafeDumper):
    pass


# Block and single-quoted scalars read these back as plain line breaks or spaces.
_ESCAPED_BREAKS = ("\x85", "\u2028", "\u2029")


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if any(char in data for char in _ESCAPED_BREAKS):
        style = '"'
    else:
        # PyYAML falls back to a quoted style when a literal block cannot hold the text exactly.
        style = "|" if "\n" in data else None
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=style)


RecipeDumper.add_representer(str, _represent_str)


def dump_yaml(value: Any) -> str:
    try:
        return yaml.dump(
            value,
            Dumper=RecipeDumper,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    except yaml.YAMLError as exc:
        raise Basil2YamlError(f"Could not encode YAML: {exc}") from exc


def load_yaml(text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DecodeError(f"Invalid YAML: {exc}") from exc


def write_text_atomically(path: Path, text: str) -> None:
    """Write ``text`` so that ``path`` holds either the old content or the complete new content."""
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(text)
        os.chmod(temp_path, OUTPUT_FILE_MODE)
        os.replace(temp_path, path)
    except OSError as exc:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()
        raise WriteError(str(path), exc.strerror or str(exc)) from exc
