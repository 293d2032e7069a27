# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the local storage unit so this responsibility stays isolated, testable, and easy to evolve."""

from __future__ import annotations

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict

from booknote.core.config import StorageSettings
from booknote.services.exceptions import PersistenceError
from booknote.services.storage.storage_backend import StorageBackend
from booknote.services.storage.storage_logging import (
    create_log_entry,
    finish_log_entry,
)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class LocalStorageBackend(StorageBackend):
    """Key-value directory where each key is one ``<key>.json`` file."""

    name = "local"

    def __init__(self, data_dir: Path, key: str = "booknote_databases"):
        if not _KEY_PATTERN.match(key or "") or key in (".", ".."):
            raise PersistenceError(f"Invalid storage key: {key!r}")
        self.data_dir = Path(data_dir)
        self.key = key

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "LocalStorageBackend":
        return cls(settings.data_dir, settings.key)

    @property
    def path(self) -> Path:
        return self.data_dir / f"{self.key}.json"

    async def load_document(self) -> Any | None:
        entry = create_log_entry("load", self.name, str(self.path))
        if not self.path.exists():
            finish_log_entry(entry, ok=True)
            return None
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            finish_log_entry(entry, ok=False, error_detail=str(exc))
            raise
        finish_log_entry(entry, ok=True)
        return document

    async def save_document(self, document: Dict[str, Any]) -> None:
        entry = create_log_entry("save", self.name, str(self.path))
        payload = json.dumps(document, ensure_ascii=False, indent=2)
        tmp_name = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            # Write beside the target, then swap, so readers never see half a file.
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.data_dir,
                prefix=f".{self.key}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            finish_log_entry(entry, ok=False, error_detail=str(exc))
            raise PersistenceError(f"Failed to save library data: {exc}") from exc
        finish_log_entry(entry, ok=True)
