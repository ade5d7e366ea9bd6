"""Durable key/value storage for the client's credential.

Two fixed keys make up the credential: ``auth_token`` and ``user``. Removing
both is the complete logout contract.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
USER_KEY = "user"


class MemoryStore:
    """Process-local store; nothing survives a restart."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)
        self._flush()

    def _flush(self) -> None:
        pass


class JsonFileStore(MemoryStore):
    """Store backed by a single JSON file, rewritten atomically on change."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(self._read())

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("storage.unreadable", extra={"extra_data": {"path": str(self.path)}})
            return {}
        return data if isinstance(data, dict) else {}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)
