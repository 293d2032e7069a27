# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Application state for one running BookNote instance.

Purpose: keep the registry, the active library's store, navigation and save
feedback in one explicit object instead of scattered module globals. Library
switches always pass the active snapshot to the registry explicitly, so the
library being left is flushed before the target is read.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from booknote.core.config import StorageSettings
from booknote.models.entities import Detail, LibrarySnapshot, empty_snapshot
from booknote.services.exceptions import BadRequestError, NotFoundError, ServiceError
from booknote.services.library.entity_store import EntityStore
from booknote.services.library.library_registry import LibraryRegistry
from booknote.services.navigation.navigation_state import (
    VIEW_EDITOR,
    NavigationState,
)
from booknote.services.session.save_ops import SaveCoordinator, SaveStatus
from booknote.services.spelling.text_correction import (
    MESSAGE_APPLIED,
    SpellCheckResult,
    resolve_spell_target,
    run_spell_check,
)
from booknote.services.storage.storage_backend import (
    StorageBackend,
    create_storage_backend,
)

logger = logging.getLogger(__name__)


class AppSession:
    def __init__(
        self,
        backend: StorageBackend,
        *,
        delete_policy: str = "orphan",
        save_feedback_s: float = 1.5,
        spell_check_delay_s: float = 1.0,
        id_factory: Optional[Callable[[], int]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.backend = backend
        self.delete_policy = delete_policy
        self.spell_check_delay_s = spell_check_delay_s
        self._store_kwargs: Dict[str, Any] = {"delete_policy": delete_policy}
        if id_factory is not None:
            self._store_kwargs["id_factory"] = id_factory

        self.registry: Optional[LibraryRegistry] = None
        self.current_library: str = ""
        self.store = self._new_store(empty_snapshot())
        self.navigation = NavigationState()
        self.save_status = (
            SaveStatus(save_feedback_s, clock) if clock else SaveStatus(save_feedback_s)
        )
        self.saver = SaveCoordinator(backend)
        self.loading = True

    @classmethod
    def from_settings(cls, settings: StorageSettings, **kwargs) -> "AppSession":
        return cls(
            create_storage_backend(settings),
            delete_policy=settings.delete_policy,
            save_feedback_s=settings.save_feedback_s,
            spell_check_delay_s=settings.spell_check_delay_s,
            **kwargs,
        )

    def _new_store(self, snapshot: LibrarySnapshot) -> EntityStore:
        return EntityStore.from_snapshot(snapshot, **self._store_kwargs)

    @property
    def needs_setup(self) -> bool:
        return not self.loading and self.registry is None

    def _require_registry(self) -> LibraryRegistry:
        if self.registry is None:
            raise BadRequestError("Create a library first")
        return self.registry

    def _activate(self, name: str, snapshot: LibrarySnapshot) -> None:
        self.current_library = name
        self.store = self._new_store(snapshot)
        self.navigation.reset()

    # ------------------------------------------------------------------
    # registry lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """Read the registry from storage. Returns True when data was found."""
        self.loading = True
        try:
            registry = await self.backend.load()
        finally:
            self.loading = False
        if registry is None:
            self.registry = None
            self.current_library = ""
            self.store = self._new_store(empty_snapshot())
            self.navigation.reset()
            return False
        self.registry = registry
        first = registry.first_library_name() or ""
        self._activate(first, registry.get(first))
        return True

    async def setup(self, name: str) -> str:
        """First-run: create the registry with one library and persist it.

        The new library stays usable even if that first write fails; the
        failure is recorded on the save status so a later save can retry.
        """
        registry, cleaned = LibraryRegistry.initial_setup(name)
        self.registry = registry
        self._activate(cleaned, registry.get(cleaned))
        try:
            await self.saver.save(registry)
        except ServiceError as exc:
            logger.error("initial save of library '%s' failed: %s", cleaned, exc)
            self.save_status.fail(exc.detail)
        return cleaned

    def list_library_names(self) -> List[str]:
        return self.registry.list_library_names() if self.registry else []

    def switch_library(self, name: str) -> None:
        registry = self._require_registry()
        snapshot = registry.switch_library(
            self.current_library, self.store.snapshot(), name
        )
        self._activate(name, snapshot)

    def create_library(self, name: str) -> str:
        registry = self._require_registry()
        cleaned = registry.create_library(
            name, self.current_library, self.store.snapshot()
        )
        self._activate(cleaned, registry.get(cleaned))
        return cleaned

    def flush(self) -> LibraryRegistry:
        registry = self._require_registry()
        registry.flush(self.current_library, self.store.snapshot())
        return registry

    async def save(self) -> bool:
        """Flush the active store and persist every library.

        Failures propagate as ServiceError for the caller to show; in-memory
        state stays as it is and the status is not marked saved. A call
        overtaken by a newer one reports that newer write's outcome.
        """
        registry = self.flush()
        self.save_status.begin()
        try:
            written = await self.saver.save(registry)
        except ServiceError as exc:
            self.save_status.fail(exc.detail)
            raise
        self.save_status.succeed()
        return written

    # ------------------------------------------------------------------
    # entity helpers that also touch navigation
    # ------------------------------------------------------------------

    def delete_book(self, book_id: int) -> None:
        self._require_registry()
        if not self.store.delete_book(book_id):
            raise NotFoundError(f"Book {book_id} not found")
        self.navigation.reset()

    def after_edit(self) -> None:
        self.navigation.refresh(self.store)

    # ------------------------------------------------------------------
    # spelling
    # ------------------------------------------------------------------

    def spell_target(self, target_name: str = "") -> Optional[Detail]:
        """The note open in the editor, else a note picked by its title.

        The title lookup lets a check run from the chapter and detail lists
        too, not only from inside the editor. Applying a correction still
        needs the note open in the editor.
        """
        return resolve_spell_target(
            self.navigation.detail,
            self.navigation.view == VIEW_EDITOR,
            target_name,
            self.store.details,
        )

    async def check_spelling(self, target_name: str = "") -> SpellCheckResult:
        target = self.spell_target(target_name)
        if target is None or not target.content:
            raise BadRequestError("No note to check")
        return await run_spell_check(target.content, self.spell_check_delay_s)

    def apply_correction(self, corrected: str) -> tuple[Detail, str]:
        """Write corrected text into the note open in the editor."""
        detail = self.navigation.detail
        if self.navigation.view != VIEW_EDITOR or detail is None:
            raise BadRequestError("Open a note in the editor to apply corrections")
        updated = self.store.update_detail(detail.id, content=corrected)
        self.after_edit()
        return updated, MESSAGE_APPLIED

    # ------------------------------------------------------------------

    def state_payload(self) -> Dict[str, Any]:
        return {
            "loading": self.loading,
            "needs_setup": self.needs_setup,
            "current_library": self.current_library,
            "libraries": self.list_library_names(),
            "navigation": self.navigation.to_payload(),
            "save_status": self.save_status.to_payload(),
        }
