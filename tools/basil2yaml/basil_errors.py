"""Error kinds raised while converting and combining recipes."""

from __future__ import annotations

from typing import Any


class Basil2YamlError(Exception):
    """Base exception for basil2yaml errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class DecodeError(Basil2YamlError):
    """Archive or YAML bytes do not parse into the expected shape."""


class MalformedArchiveError(Basil2YamlError):
    """A required field or structural list of the archive is missing or malformed."""

    def __init__(self, key: str, reason: str, index: int | None = None) -> None:
        details: dict[str, Any] = {"key": key}
        if index is not None:
            details["index"] = index
        super().__init__(f"Malformed archive field '{key}': {reason}", details)


class NetworkFetchError(Basil2YamlError):
    """Fetching a remote image failed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Could not fetch '{url}': {reason}", {"url": url})


class WriteError(Basil2YamlError):
    """An output file could not be written."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Could not write '{path}': {reason}", {"path": path})
