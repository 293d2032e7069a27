# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Session-level flows: first run, library switching, saving and feedback, deletes and spelling."""

import asyncio
import itertools
from unittest import TestCase

from booknote.models.entities import Book, LibrarySnapshot
from booknote.services.exceptions import BadRequestError, NotFoundError, UpstreamError
from booknote.services.library.library_registry import LibraryRegistry
from booknote.services.session.app_session import AppSession
from booknote.services.session.save_ops import SaveStatus
from booknote.services.storage.storage_backend import StorageBackend


class MemoryBackend(StorageBackend):
    name = "memory"

    def __init__(self, document=None, delay_s: float = 0):
        self.document = document
        self.writes = []
        self.delay_s = delay_s
        self.fail = False

    async def load_document(self):
        return self.document

    async def save_document(self, document):
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.fail:
            raise UpstreamError("remote storage unavailable")
        self.writes.append(document)
        self.document = document


class FirstWriteOnlyBackend(MemoryBackend):
    """Accepts one write, then behaves like an unreachable remote."""

    async def save_document(self, document):
        self.fail = bool(self.writes)
        await super().save_document(document)


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def _session(backend, **kwargs) -> AppSession:
    kwargs.setdefault("spell_check_delay_s", 0)
    return AppSession(backend, id_factory=itertools.count(1).__next__, **kwargs)


def _stored(*names) -> dict:
    return LibraryRegistry({n: LibrarySnapshot() for n in names}).to_document()


class AppSessionLifecycleTest(TestCase):
    def test_empty_storage_needs_setup(self):
        session = _session(MemoryBackend())
        self.assertTrue(session.loading)
        self.assertFalse(asyncio.run(session.load()))
        self.assertFalse(session.loading)
        self.assertTrue(session.needs_setup)

    def test_load_activates_first_library(self):
        session = _session(MemoryBackend(_stored("Alice", "Bob")))
        self.assertTrue(asyncio.run(session.load()))
        self.assertFalse(session.needs_setup)
        self.assertEqual(session.current_library, "Alice")
        self.assertEqual(session.list_library_names(), ["Alice", "Bob"])

    def test_setup_persists_single_library(self):
        backend = MemoryBackend()
        session = _session(backend)
        asyncio.run(session.load())
        self.assertEqual(asyncio.run(session.setup(" Alice ")), "Alice")
        self.assertEqual(list(backend.document), ["Alice"])
        self.assertFalse(session.needs_setup)

    def test_setup_survives_failed_first_save(self):
        backend = MemoryBackend()
        backend.fail = True
        session = _session(backend)
        asyncio.run(session.load())
        asyncio.run(session.setup("Alice"))
        self.assertEqual(session.current_library, "Alice")
        self.assertEqual(session.save_status.error, "remote storage unavailable")

    def test_commands_before_setup_are_rejected(self):
        session = _session(MemoryBackend())
        asyncio.run(session.load())
        with self.assertRaises(BadRequestError):
            session.create_library("Bob")
        with self.assertRaises(BadRequestError):
            asyncio.run(session.save())

    def test_switch_keeps_unsaved_edits_of_library_left(self):
        session = _session(MemoryBackend(_stored("Alice", "Bob")))
        asyncio.run(session.load())
        book = session.store.create_book()
        session.store.rename_book(book.id, "Dune")

        session.switch_library("Bob")
        self.assertEqual(session.store.books, [])
        session.switch_library("Alice")
        self.assertEqual([b.title for b in session.store.books], ["Dune"])

    def test_create_library_activates_it_and_resets_navigation(self):
        session = _session(MemoryBackend(_stored("Alice")))
        asyncio.run(session.load())
        book = session.store.create_book()
        session.navigation.open_book(book)

        self.assertEqual(session.create_library("Bob"), "Bob")
        self.assertEqual(session.current_library, "Bob")
        self.assertEqual(session.navigation.view, "shelf")
        self.assertEqual(len(session.registry.get("Alice").books), 1)


class AppSessionSaveTest(TestCase):
    def test_save_writes_every_library(self):
        backend = MemoryBackend(_stored("Alice", "Bob"))
        session = _session(backend)
        asyncio.run(session.load())
        session.store.create_book()
        asyncio.run(session.save())
        self.assertEqual(list(backend.document), ["Alice", "Bob"])
        self.assertEqual(len(backend.document["Alice"]["books"]), 1)

    def test_failed_save_keeps_memory_and_reports(self):
        backend = MemoryBackend(_stored("Alice"))
        clock = FakeClock()
        session = _session(backend, clock=clock)
        asyncio.run(session.load())
        session.store.create_book()
        backend.fail = True
        with self.assertRaises(UpstreamError):
            asyncio.run(session.save())
        self.assertEqual(len(session.store.books), 1)
        self.assertEqual(session.save_status.state, "idle")
        self.assertEqual(session.save_status.error, "remote storage unavailable")
        self.assertEqual(backend.writes, [])

    def test_overlapping_saves_persist_latest_snapshot(self):
        backend = MemoryBackend(_stored("Alice"), delay_s=0.01)
        session = _session(backend)

        async def scenario():
            await session.load()
            first = session.store.create_book()
            session.store.rename_book(first.id, "first")
            one = asyncio.ensure_future(session.save())
            await asyncio.sleep(0)
            session.store.rename_book(first.id, "second")
            two = asyncio.ensure_future(session.save())
            await asyncio.sleep(0)
            session.store.rename_book(first.id, "third")
            three = asyncio.ensure_future(session.save())
            await asyncio.sleep(0)
            return await asyncio.gather(one, two, three)

        written = asyncio.run(scenario())
        self.assertEqual(written, [True, False, True])
        self.assertEqual(backend.document["Alice"]["books"][0]["title"], "third")
        self.assertEqual(
            [w["Alice"]["books"][0]["title"] for w in backend.writes],
            ["first", "third"],
        )

    def test_overtaken_save_fails_with_the_save_that_replaced_it(self):
        backend = FirstWriteOnlyBackend(_stored("Alice"), delay_s=0.01)
        session = _session(backend)

        async def scenario():
            await session.load()
            book = session.store.create_book()
            calls = []
            for title in ("first", "A", "B"):
                session.store.rename_book(book.id, title)
                calls.append(asyncio.ensure_future(session.save()))
                await asyncio.sleep(0)
            return await asyncio.gather(*calls, return_exceptions=True)

        first, overtaken, latest = asyncio.run(scenario())
        self.assertIs(first, True)
        self.assertIsInstance(overtaken, UpstreamError)
        self.assertIsInstance(latest, UpstreamError)
        self.assertEqual(backend.document["Alice"]["books"][0]["title"], "first")
        self.assertEqual(session.save_status.state, "idle")
        self.assertEqual(session.save_status.error, "remote storage unavailable")

    def test_saved_feedback_expires(self):
        clock = FakeClock()
        status = SaveStatus(1.5, clock)
        self.assertEqual(status.state, "idle")
        status.begin()
        self.assertEqual(status.state, "saving")
        status.succeed()
        self.assertEqual(status.state, "saved")
        clock.now += 1.4
        self.assertEqual(status.state, "saved")
        clock.now += 0.2
        self.assertEqual(status.state, "idle")


class AppSessionEditingTest(TestCase):
    def setUp(self):
        self.session = _session(MemoryBackend(_stored("Alice")))
        asyncio.run(self.session.load())
        store = self.session.store
        self.book = store.create_book()
        self.chapter = store.create_chapter(self.book.id)
        self.detail = store.create_detail(self.chapter.id)
        store.update_detail(self.detail.id, content="어떡해 재밋다", title="Day 1")

    def test_delete_open_book_returns_to_shelf_and_keeps_orphans(self):
        nav = self.session.navigation
        nav.open_book(self.session.store.get_book(self.book.id))
        nav.open_chapter(self.session.store.get_chapter(self.chapter.id))

        self.session.delete_book(self.book.id)

        self.assertEqual(nav.view, "shelf")
        self.assertEqual(self.session.store.books, [])
        self.assertEqual(len(self.session.store.chapters), 1)
        self.assertEqual(len(self.session.store.details), 1)
        with self.assertRaises(NotFoundError):
            self.session.delete_book(self.book.id)

    def test_spell_check_then_apply_in_editor(self):
        nav = self.session.navigation
        nav.open_book(self.session.store.get_book(self.book.id))
        nav.open_chapter(self.session.store.get_chapter(self.chapter.id))
        nav.open_detail(self.session.store.get_detail(self.detail.id))

        result = asyncio.run(self.session.check_spelling())
        self.assertEqual(result.corrected, "어떻게 해 재밌다")
        updated, message = self.session.apply_correction(result.corrected)

        self.assertEqual(message, "✅ 적용 완료!")
        self.assertEqual(updated.content, "어떻게 해 재밌다")
        self.assertEqual(nav.detail.content, "어떻게 해 재밌다")

    def test_spell_check_by_title_outside_editor(self):
        result = asyncio.run(self.session.check_spelling("Day 1"))
        self.assertTrue(result.changed)
        with self.assertRaises(BadRequestError):
            self.session.apply_correction(result.corrected)

    def test_spell_check_without_target_is_rejected(self):
        with self.assertRaises(BadRequestError):
            asyncio.run(self.session.check_spelling("Nope"))

    def test_state_payload(self):
        payload = self.session.state_payload()
        self.assertEqual(payload["current_library"], "Alice")
        self.assertEqual(payload["libraries"], ["Alice"])
        self.assertFalse(payload["needs_setup"])
        self.assertEqual(payload["navigation"]["view"], "shelf")
