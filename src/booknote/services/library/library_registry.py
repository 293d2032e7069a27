# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the library registry unit so this responsibility stays isolated, testable, and easy to evolve."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from pydantic import ValidationError

from booknote.models.entities import LibrarySnapshot, empty_snapshot
from booknote.services.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
)


def normalize_library_name(name: str | None) -> str:
    """Trim a library name; raise BadRequestError when nothing is left."""
    cleaned = (name or "").strip()
    if not cleaned:
        raise BadRequestError("Library name is required")
    return cleaned


class LibraryRegistry:
    """Insertion-ordered mapping of library name to its stored snapshot.

    The registry never sees the active store directly. Callers pass the
    current snapshot in explicitly whenever it has to be flushed.
    """

    def __init__(self, libraries: Mapping[str, LibrarySnapshot] | None = None):
        self._libraries: Dict[str, LibrarySnapshot] = {}
        for name, snapshot in (libraries or {}).items():
            self._libraries[name] = snapshot.model_copy(deep=True)

    def __contains__(self, name: object) -> bool:
        return name in self._libraries

    def __len__(self) -> int:
        return len(self._libraries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LibraryRegistry):
            return NotImplemented
        return self.to_document() == other.to_document()

    @classmethod
    def initial_setup(cls, name: str) -> tuple["LibraryRegistry", str]:
        """First-run registry holding one empty library."""
        cleaned = normalize_library_name(name)
        return cls({cleaned: empty_snapshot()}), cleaned

    def list_library_names(self) -> List[str]:
        return list(self._libraries.keys())

    def first_library_name(self) -> str | None:
        return next(iter(self._libraries), None)

    def get(self, name: str) -> LibrarySnapshot:
        """Return a detached copy of a stored library."""
        try:
            return self._libraries[name].model_copy(deep=True)
        except KeyError:
            raise NotFoundError(f"Library '{name}' does not exist") from None

    def flush(self, name: str, snapshot: LibrarySnapshot) -> None:
        """Fold a snapshot into the entry for ``name`` (creating it if needed)."""
        self._libraries[name] = snapshot.model_copy(deep=True)

    def switch_library(
        self,
        current_name: str,
        current_snapshot: LibrarySnapshot,
        target_name: str,
    ) -> LibrarySnapshot:
        """Flush the library being left, then hand back the target's snapshot.

        An unknown target raises NotFoundError before anything is flushed.
        """
        if target_name not in self._libraries:
            raise NotFoundError(f"Library '{target_name}' does not exist")
        if current_name:
            self.flush(current_name, current_snapshot)
        return self.get(target_name)

    def create_library(
        self,
        name: str,
        current_name: str,
        current_snapshot: LibrarySnapshot,
    ) -> str:
        """Register a new empty library after flushing the current one.

        Returns the trimmed name. Empty names and exact duplicates are rejected
        without touching the registry.
        """
        cleaned = normalize_library_name(name)
        if cleaned in self._libraries:
            raise ConflictError(f"Library '{cleaned}' already exists")
        if current_name:
            self.flush(current_name, current_snapshot)
        self._libraries[cleaned] = empty_snapshot()
        return cleaned

    def to_document(self) -> Dict[str, Any]:
        """The persisted mapping: library name -> four collections."""
        return {name: snap.to_document() for name, snap in self._libraries.items()}

    @classmethod
    def from_document(cls, document: Any) -> "LibraryRegistry":
        """Parse a persisted mapping; raise ValueError when it is malformed."""
        if not isinstance(document, Mapping):
            raise ValueError("Stored library document must be a mapping")
        libraries: Dict[str, LibrarySnapshot] = {}
        for name, payload in document.items():
            if not isinstance(name, str) or not isinstance(payload, Mapping):
                raise ValueError(f"Malformed library entry: {name!r}")
            try:
                libraries[name] = LibrarySnapshot.model_validate(payload)
            except ValidationError as exc:
                raise ValueError(f"Malformed library '{name}': {exc}") from exc
        return cls(libraries)
