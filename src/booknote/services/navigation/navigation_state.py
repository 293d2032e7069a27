# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Which view is showing and which book, chapter and detail are open.

Views form one path: shelf -> chapters -> details -> editor. Each deeper view
needs the matching selection; moving up clears everything below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from booknote.models.entities import Book, Chapter, Detail
from booknote.models.search import SearchResult
from booknote.services.exceptions import BadRequestError, NotFoundError
from booknote.services.library.entity_store import EntityStore

VIEW_SHELF = "shelf"
VIEW_CHAPTERS = "chapters"
VIEW_DETAILS = "details"
VIEW_EDITOR = "editor"

VIEWS = (VIEW_SHELF, VIEW_CHAPTERS, VIEW_DETAILS, VIEW_EDITOR)


@dataclass
class NavigationState:
    view: str = VIEW_SHELF
    book: Optional[Book] = None
    chapter: Optional[Chapter] = None
    detail: Optional[Detail] = None

    @property
    def depth(self) -> int:
        return VIEWS.index(self.view)

    def reset(self) -> None:
        self.view = VIEW_SHELF
        self.book = None
        self.chapter = None
        self.detail = None

    def open_book(self, book: Book) -> None:
        self.book = book
        self.chapter = None
        self.detail = None
        self.view = VIEW_CHAPTERS

    def open_chapter(self, chapter: Chapter) -> None:
        if self.book is None:
            raise BadRequestError("Open a book before opening a chapter")
        if chapter.book_id != self.book.id:
            raise BadRequestError("Chapter does not belong to the open book")
        self.chapter = chapter
        self.detail = None
        self.view = VIEW_DETAILS

    def open_detail(self, detail: Detail) -> None:
        if self.chapter is None:
            raise BadRequestError("Open a chapter before opening a note")
        if detail.chapter_id != self.chapter.id:
            raise BadRequestError("Note does not belong to the open chapter")
        self.detail = detail
        self.view = VIEW_EDITOR

    def go_to(self, view: str) -> None:
        """Breadcrumb jump to the same or a shallower view."""
        if view not in VIEWS:
            raise BadRequestError(f"Unknown view: {view}")
        target = VIEWS.index(view)
        if target > self.depth:
            raise BadRequestError(f"Cannot jump forward to {view}")
        if target < VIEWS.index(VIEW_EDITOR):
            self.detail = None
        if target < VIEWS.index(VIEW_DETAILS):
            self.chapter = None
        if target < VIEWS.index(VIEW_CHAPTERS):
            self.book = None
        self.view = view

    def back(self) -> None:
        if self.depth > 0:
            self.go_to(VIEWS[self.depth - 1])

    def jump_to_result(self, result: SearchResult, store: EntityStore) -> None:
        """Open the deepest view for a search hit, resolving every ancestor.

        A stale id anywhere on the chain raises NotFoundError and leaves the
        current navigation as it was.
        """
        book: Optional[Book] = None
        chapter: Optional[Chapter] = None
        detail: Optional[Detail] = None

        if result.target == "book":
            book = store.get_book(result.id)
        elif result.target == "chapter":
            chapter = store.get_chapter(result.id)
            if chapter is None:
                raise NotFoundError(f"Chapter {result.id} no longer exists")
            book = store.get_book(chapter.book_id)
        else:
            detail = store.get_detail(result.id)
            if detail is None:
                raise NotFoundError(f"Note {result.id} no longer exists")
            chapter = store.get_chapter(detail.chapter_id)
            if chapter is None:
                raise NotFoundError(f"Chapter {detail.chapter_id} no longer exists")
            book = store.get_book(chapter.book_id)

        if book is None:
            raise NotFoundError("Book for this result no longer exists")

        self.book, self.chapter, self.detail = book, chapter, detail
        if detail is not None:
            self.view = VIEW_EDITOR
        elif chapter is not None:
            self.view = VIEW_DETAILS
        else:
            self.view = VIEW_CHAPTERS

    def refresh(self, store: EntityStore) -> None:
        """Re-read the open entities so they mirror the latest edits.

        If the open book is gone (deleted), fall back to the shelf.
        """
        if self.book is not None:
            self.book = store.get_book(self.book.id)
            if self.book is None:
                self.reset()
                return
        if self.chapter is not None:
            self.chapter = store.get_chapter(self.chapter.id)
        if self.detail is not None:
            self.detail = store.get_detail(self.detail.id)

    def to_payload(self) -> dict:
        return {
            "view": self.view,
            "bookId": self.book.id if self.book else None,
            "chapterId": self.chapter.id if self.chapter else None,
            "detailId": self.detail.id if self.detail else None,
        }
