# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""One storage interface for the whole library registry.

Both adapters persist the complete registry as a single JSON document under a
fixed key: a local key-value directory, or one row of a remote table. There is
no per-library or per-entity granularity, and nothing is retried.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from booknote.core.config import StorageSettings
from booknote.services.library.library_registry import LibraryRegistry
from booknote.services.storage.storage_logging import logger


class StorageBackend(ABC):
    name: str = "abstract"

    @abstractmethod
    async def load_document(self) -> Any | None:
        """Fetch the raw stored document, or None when nothing was saved yet."""

    @abstractmethod
    async def save_document(self, document: Dict[str, Any]) -> None:
        """Replace the stored document wholesale."""

    async def load(self) -> LibraryRegistry | None:
        """Load the registry; any failure or malformed payload reads as no data."""
        try:
            document = await self.load_document()
        except Exception as exc:  # every load failure routes to first-run setup
            logger.error("loading library data via %s failed: %s", self.name, exc)
            return None
        if document is None:
            return None
        try:
            registry = LibraryRegistry.from_document(document)
        except ValueError as exc:
            logger.error("stored library data is malformed: %s", exc)
            return None
        if not len(registry):
            return None
        return registry

    async def save(self, registry: LibraryRegistry) -> None:
        await self.save_document(registry.to_document())


def create_storage_backend(settings: StorageSettings, **kwargs) -> StorageBackend:
    """Pick the adapter named by ``settings.backend``."""
    if settings.backend == "remote":
        from booknote.services.storage.remote_storage import RemoteStorageBackend

        return RemoteStorageBackend.from_settings(settings, **kwargs)

    from booknote.services.storage.local_storage import LocalStorageBackend

    return LocalStorageBackend.from_settings(settings)
