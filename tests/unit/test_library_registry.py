# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

import json
from unittest import TestCase

from booknote.models.entities import Book, Chapter, Detail, LibrarySnapshot
from booknote.services.exceptions import BadRequestError, ConflictError, NotFoundError
from booknote.services.library.library_registry import LibraryRegistry


def _snapshot(title: str) -> LibrarySnapshot:
    return LibrarySnapshot(
        books=[Book(id=1, title=title, author="A", category=["SF"])],
        chapters=[Chapter(id=2, book_id=1, index="1", title="C1")],
        details=[
            Detail(
                id=3,
                chapter_id=2,
                index="1",
                title="D1",
                start_page=3,
                end_page=9,
                content="text",
                video_url="https://youtu.be/dQw4w9WgXcQ",
            )
        ],
        custom_genres=["SF", "Essay"],
    )


class LibraryRegistryTest(TestCase):
    def test_initial_setup_trims_and_rejects_blank(self):
        registry, name = LibraryRegistry.initial_setup("  Alice ")
        self.assertEqual(name, "Alice")
        self.assertEqual(registry.list_library_names(), ["Alice"])
        with self.assertRaises(BadRequestError):
            LibraryRegistry.initial_setup("   ")

    def test_create_library_flushes_then_adds_empty(self):
        registry, _ = LibraryRegistry.initial_setup("Alice")
        name = registry.create_library(" Bob ", "Alice", _snapshot("Dune"))
        self.assertEqual(name, "Bob")
        self.assertEqual(registry.list_library_names(), ["Alice", "Bob"])
        self.assertEqual(registry.get("Alice").books[0].title, "Dune")
        self.assertEqual(registry.get("Bob"), LibrarySnapshot())

    def test_create_library_rejects_duplicates_and_blank_without_change(self):
        registry, _ = LibraryRegistry.initial_setup("Alice")
        before = registry.to_document()
        with self.assertRaises(ConflictError):
            registry.create_library("Alice", "Alice", _snapshot("Lost"))
        with self.assertRaises(BadRequestError):
            registry.create_library(" ", "Alice", _snapshot("Lost"))
        self.assertEqual(registry.to_document(), before)

    def test_names_are_case_sensitive(self):
        registry, _ = LibraryRegistry.initial_setup("Alice")
        registry.create_library("alice", "Alice", LibrarySnapshot())
        self.assertEqual(registry.list_library_names(), ["Alice", "alice"])

    def test_switch_flushes_before_reading_target(self):
        registry = LibraryRegistry(
            {"A": _snapshot("A-old"), "B": _snapshot("B-book")}
        )
        target = registry.switch_library("A", _snapshot("A-new"), "B")
        self.assertEqual(target.books[0].title, "B-book")
        self.assertEqual(registry.get("A").books[0].title, "A-new")

    def test_switch_to_self_keeps_current_edits(self):
        registry = LibraryRegistry({"A": _snapshot("old")})
        target = registry.switch_library("A", _snapshot("new"), "A")
        self.assertEqual(target.books[0].title, "new")

    def test_switch_to_unknown_library_flushes_nothing(self):
        registry = LibraryRegistry({"A": _snapshot("old")})
        with self.assertRaises(NotFoundError):
            registry.switch_library("A", _snapshot("new"), "Nobody")
        self.assertEqual(registry.get("A").books[0].title, "old")

    def test_switch_away_and_back_restores_state(self):
        registry = LibraryRegistry({"A": LibrarySnapshot(), "B": LibrarySnapshot()})
        a_state = _snapshot("mine")
        b_state = registry.switch_library("A", a_state, "B")
        back = registry.switch_library("B", b_state, "A")
        self.assertEqual(back, a_state)

    def test_returned_snapshots_are_detached(self):
        registry = LibraryRegistry({"A": _snapshot("kept")})
        copy = registry.get("A")
        copy.books[0].title = "mutated"
        self.assertEqual(registry.get("A").books[0].title, "kept")


class LibraryDocumentTest(TestCase):
    def test_round_trip_through_json(self):
        registry = LibraryRegistry({"Alice": _snapshot("Dune"), "Bob": LibrarySnapshot()})
        text = json.dumps(registry.to_document(), ensure_ascii=False)
        restored = LibraryRegistry.from_document(json.loads(text))
        self.assertEqual(restored, registry)
        self.assertEqual(restored.list_library_names(), ["Alice", "Bob"])

    def test_document_uses_saved_field_names(self):
        doc = LibraryRegistry({"Alice": _snapshot("Dune")}).to_document()
        lib = doc["Alice"]
        self.assertEqual(set(lib), {"books", "chapters", "details", "customGenres"})
        self.assertEqual(
            set(lib["books"][0]),
            {"id", "title", "author", "totalPages", "status", "category", "coverUrl", "videoUrl"},
        )
        self.assertEqual(
            set(lib["chapters"][0]), {"id", "bookId", "index", "title", "videoUrl"}
        )
        self.assertEqual(
            set(lib["details"][0]),
            {"id", "chapterId", "index", "title", "startPage", "endPage", "content", "videoUrl"},
        )

    def test_missing_collections_and_scalar_category_load(self):
        restored = LibraryRegistry.from_document(
            {"Alice": {"books": [{"id": 5, "title": "T", "category": "Poetry"}]}}
        )
        snap = restored.get("Alice")
        self.assertEqual(snap.books[0].category, ["Poetry"])
        self.assertEqual(snap.chapters, [])
        self.assertEqual(snap.custom_genres, [])

    def test_malformed_documents_raise_value_error(self):
        for bad in (
            [],
            "text",
            {"Alice": []},
            {"Alice": {"books": [{"title": "no id"}]}},
            {"Alice": {"details": [{"id": 1, "chapterId": "x"}]}},
        ):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    LibraryRegistry.from_document(bad)
