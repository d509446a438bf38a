# SPDX-FileCopyrightText: 2025 Knitli Inc.
# SPDX-FileContributor: Adam Poulemanos <adam@knit.li>
#
# SPDX-License-Identifier: MIT OR Apache-2.0
"""String key-value stores backing persisted consent."""

from __future__ import annotations

import logging

from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic_core import from_json, to_json


logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal string-keyed, string-valued store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-process store. Values are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """Store persisted as a flat JSON object in a single file.

    Every `set` rewrites the file synchronously through a temporary file that
    replaces the original, so readers see the old or the new contents. A missing or
    unreadable file reads as empty.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = from_json(self.path.read_bytes())
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable consent store at %s", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write to temporary file first (atomic write)
        temp_path = self.path.with_suffix(f"{self.path.suffix}.tmp")
        _ = temp_path.write_bytes(to_json(data, indent=2))
        _ = temp_path.replace(self.path)


__all__ = ("JsonFileStore", "KeyValueStore", "MemoryStore")
