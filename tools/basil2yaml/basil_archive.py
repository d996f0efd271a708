#!/usr/bin/env python3
"""Keyed archive decoding and fail-soft accessors over the decoded object graph.

Basil stores each recipe as an NSKeyedArchiver property list. Decoding turns the
flat ``$objects`` table into a plain tree of ``dict``/``list``/``str``/``int``/
``bool``/``bytes`` values rooted at a mapping; the accessors below read typed
values out of that tree without raising on missing keys or type mismatches.
"""

from __future__ import annotations

import plistlib
from typing import Any
from xml.parsers.expat import ExpatError

from basil_errors import DecodeError, MalformedArchiveError

Graph = dict[str, Any]

NULL_MARKER = "$null"
# XML archives spell references as {"CF$UID": n}; plistlib only maps the binary form to UID.
XML_UID_KEY = "CF$UID"


def _is_xml_uid(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and len(value) == 1
        and isinstance(value.get(XML_UID_KEY), int)
        and not isinstance(value[XML_UID_KEY], bool)
    )


class _Unarchiver:
    def __init__(self, objects: list[Any]) -> None:
        self.objects = objects
        self._in_progress: set[int] = set()

    def resolve(self, value: Any) -> Any:
        if isinstance(value, plistlib.UID):
            return self._resolve_uid(value.data)
        if _is_xml_uid(value):
            return self._resolve_uid(value[XML_UID_KEY])
        if isinstance(value, list):
            return [self.resolve(item) for item in value]
        if isinstance(value, dict):
            return self._decode_object(value)
        return value

    def _resolve_uid(self, index: int) -> Any:
        if not 0 <= index < len(self.objects):
            raise DecodeError("Archive reference out of range", {"uid": index, "objects": len(self.objects)})
        if index in self._in_progress:
            raise DecodeError("Archive contains a reference cycle", {"uid": index})

        if index == 0 and self.objects[0] == NULL_MARKER:
            return None

        self._in_progress.add(index)
        try:
            return self._decode_object(self.objects[index])
        finally:
            self._in_progress.discard(index)

    def _decode_object(self, obj: Any) -> Any:
        if not isinstance(obj, dict):
            return self.resolve(obj) if isinstance(obj, list) else obj

        if "NS.keys" in obj:
            return self._decode_dictionary(obj)
        if "NS.objects" in obj:
            items = obj["NS.objects"]
            if not isinstance(items, list):
                raise DecodeError("Archived collection has no object list")
            return [self.resolve(item) for item in items]
        if "NS.string" in obj:
            return str(self.resolve(obj["NS.string"]))
        for data_key in ("NS.bytes", "NS.data"):
            if data_key in obj:
                data = self.resolve(obj[data_key])
                if not isinstance(data, (bytes, bytearray)):
                    raise DecodeError("Archived data object has no bytes", {"key": data_key})
                return bytes(data)
        if "NS.time" in obj:
            return float(obj["NS.time"])

        return {key: self.resolve(value) for key, value in obj.items() if key != "$class"}

    def _decode_dictionary(self, obj: dict[str, Any]) -> Graph:
        keys = obj.get("NS.keys")
        values = obj.get("NS.objects")
        if not isinstance(keys, list) or not isinstance(values, list) or len(keys) != len(values):
            raise DecodeError("Archived dictionary has mismatched keys and objects")

        result: Graph = {}
        for raw_key, raw_value in zip(keys, values):
            key = self.resolve(raw_key)
            if not isinstance(key, str):
                raise DecodeError("Archived dictionary key is not a string", {"key": repr(key)})
            result[key] = self.resolve(raw_value)
        return result


def decode_archive(data: bytes) -> Graph:
    """Decode keyed archive bytes into an object graph rooted at a mapping."""
    try:
        payload = plistlib.loads(data)
    except (plistlib.InvalidFileException, ExpatError, ValueError) as exc:
        raise DecodeError(f"Not a property list: {exc}") from exc

    if not isinstance(payload, dict):
        raise DecodeError("Archive property list is not a dictionary")

    objects = payload.get("$objects")
    top = payload.get("$top")
    if not isinstance(objects, list) or not isinstance(top, dict) or not top:
        raise DecodeError("Property list is not a keyed archive", {"archiver": payload.get("$archiver")})

    root_ref = top["root"] if "root" in top else next(iter(top.values()))
    root = _Unarchiver(objects).resolve(root_ref)
    if not isinstance(root, dict):
        raise DecodeError("Archive root is not a dictionary", {"root_type": type(root).__name__})
    return root


def get_string(graph: Graph, key: str) -> str | None:
    value = graph.get(key)
    return value if isinstance(value, str) else None


def get_int(graph: Graph, key: str) -> int | None:
    value = graph.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_bool(graph: Graph, key: str) -> bool | None:
    value = graph.get(key)
    return value if isinstance(value, bool) else None


def get_blob(graph: Graph, key: str) -> bytes | None:
    value = graph.get(key)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return None


def get_list(graph: Graph, key: str) -> list[Graph] | None:
    value = graph.get(key)
    if not isinstance(value, list):
        return None
    if not all(isinstance(item, dict) for item in value):
        return None
    return value


def require_list(graph: Graph, key: str) -> list[Graph]:
    """Return a structural list that must be present, raising if it is missing or malformed."""
    value = graph.get(key)
    if value is None:
        raise MalformedArchiveError(key, "missing")
    if not isinstance(value, list):
        raise MalformedArchiveError(key, f"expected a list, found {type(value).__name__}")
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            raise MalformedArchiveError(key, "entry is not a dictionary", index)
    return value
