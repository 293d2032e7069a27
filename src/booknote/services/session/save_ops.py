# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the save ops unit so this responsibility stays isolated, testable, and easy to evolve."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Dict, Optional

from booknote.services.library.library_registry import LibraryRegistry
from booknote.services.storage.storage_backend import StorageBackend

STATUS_IDLE = "idle"
STATUS_SAVING = "saving"
STATUS_SAVED = "saved"


class SaveStatus:
    """Transient save indicator: idle, saving, then saved for a short while.

    The "saved" state is cosmetic and expires on its own after
    ``feedback_s`` seconds; it is computed from the clock, not a timer.
    """

    def __init__(
        self,
        feedback_s: float = 1.5,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.feedback_s = feedback_s
        self._clock = clock
        self._state = STATUS_IDLE
        self._saved_at: float | None = None
        self._pending = 0
        self.error: str | None = None

    @property
    def state(self) -> str:
        if self._pending:
            return STATUS_SAVING
        if self._state == STATUS_SAVED and self._saved_at is not None:
            if self._clock() - self._saved_at < self.feedback_s:
                return STATUS_SAVED
        return STATUS_IDLE

    def begin(self) -> None:
        self._pending += 1
        self.error = None

    def succeed(self) -> None:
        self._pending = max(0, self._pending - 1)
        self._state = STATUS_SAVED
        self._saved_at = self._clock()

    def fail(self, detail: str) -> None:
        self._pending = max(0, self._pending - 1)
        self._state = STATUS_IDLE
        self._saved_at = None
        self.error = detail

    def to_payload(self) -> Dict[str, Any]:
        return {"state": self.state, "error": self.error}


class SaveCoordinator:
    """Serializes saves so the latest call's snapshot is the one that sticks.

    Each call captures the full document when it is made. Writes happen one
    at a time in call order; a call that was overtaken by a newer one before
    its turn skips the write and shares the outcome of the write that
    replaced it, so it fails when that write fails.
    """

    def __init__(self, backend: StorageBackend):
        self.backend = backend
        self._lock = asyncio.Lock()
        self._generation = 0
        self._next_write: Optional[asyncio.Future] = None
        self.last_written_generation = 0

    async def save(self, registry: LibraryRegistry) -> bool:
        """Persist a registry snapshot. Returns False when superseded.

        Raises whatever the write carrying this snapshot's successor raised.
        """
        self._generation += 1
        generation = self._generation
        document = registry.to_document()
        if self._next_write is None:
            self._next_write = asyncio.get_running_loop().create_future()
        outcome = self._next_write

        async with self._lock:
            if generation == self._generation:
                # later calls queue up behind a fresh outcome
                self._next_write = None
                try:
                    await self.backend.save_document(document)
                except asyncio.CancelledError:
                    outcome.cancel()
                    raise
                except Exception as exc:
                    outcome.set_exception(exc)
                    # mark retrieved; superseded callers may not exist
                    outcome.exception()
                    raise
                self.last_written_generation = generation
                outcome.set_result(True)
                return True

        await outcome
        return False
