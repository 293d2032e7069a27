# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""In-memory collections of the active library and the queries derived from them.

The store keeps books, chapters, details and custom genre names as plain
ordered lists. Edits are full replace-by-id, creation appends, and only books
can be deleted. Chapters and details point at their parent by id; nothing here
enforces that the parent still exists.
"""

from __future__ import annotations

import math
import time
from typing import Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from booknote.models.entities import (
    Book,
    Chapter,
    Detail,
    LibrarySnapshot,
)
from booknote.models.search import (
    CHAPTER_DESC,
    DETAIL_DESC,
    TYPE_LABELS,
    SearchResult,
)
from booknote.services.exceptions import BadRequestError, NotFoundError

Entity = Union[Book, Chapter, Detail]

KIND_BOOK = "book"
KIND_CHAPTER = "chapter"
KIND_DETAIL = "detail"

DELETE_POLICIES = ("orphan", "cascade")


def _now_ms() -> int:
    return int(time.time() * 1000)


class IdGenerator:
    """Timestamp-derived ids, strictly increasing within the process."""

    def __init__(self, clock: Callable[[], int] = _now_ms):
        self._clock = clock
        self._last = 0

    def __call__(self) -> int:
        candidate = int(self._clock())
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return candidate


_default_ids = IdGenerator()


def _js_round(value: float) -> int:
    """Round half up, the way the saved documents were always rounded."""
    return int(math.floor(value + 0.5))


class EntityStore:
    def __init__(
        self,
        books: Optional[List[Book]] = None,
        chapters: Optional[List[Chapter]] = None,
        details: Optional[List[Detail]] = None,
        custom_genres: Optional[List[str]] = None,
        *,
        id_factory: Callable[[], int] = _default_ids,
        delete_policy: str = "orphan",
    ):
        if delete_policy not in DELETE_POLICIES:
            raise BadRequestError(f"Unknown delete policy: {delete_policy}")
        self.books: List[Book] = list(books or [])
        self.chapters: List[Chapter] = list(chapters or [])
        self.details: List[Detail] = list(details or [])
        self.custom_genres: List[str] = list(custom_genres or [])
        self._next_id = id_factory
        self.delete_policy = delete_policy

    @classmethod
    def from_snapshot(cls, snapshot: LibrarySnapshot, **kwargs) -> "EntityStore":
        snap = snapshot.model_copy(deep=True)
        return cls(
            snap.books, snap.chapters, snap.details, snap.custom_genres, **kwargs
        )

    def snapshot(self) -> LibrarySnapshot:
        """Deep copy of the four collections, detached from this store."""
        return LibrarySnapshot(
            books=[b.model_copy(deep=True) for b in self.books],
            chapters=[c.model_copy(deep=True) for c in self.chapters],
            details=[d.model_copy(deep=True) for d in self.details],
            custom_genres=list(self.custom_genres),
        )

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------

    def _collection(self, kind: str) -> List[Entity]:
        collections: Dict[str, List] = {
            KIND_BOOK: self.books,
            KIND_CHAPTER: self.chapters,
            KIND_DETAIL: self.details,
        }
        try:
            return collections[kind]
        except KeyError:
            raise BadRequestError(f"Unknown entity kind: {kind}") from None

    def get_book(self, book_id: int) -> Optional[Book]:
        return next((b for b in self.books if b.id == book_id), None)

    def get_chapter(self, chapter_id: int) -> Optional[Chapter]:
        return next((c for c in self.chapters if c.id == chapter_id), None)

    def get_detail(self, detail_id: int) -> Optional[Detail]:
        return next((d for d in self.details if d.id == detail_id), None)

    def _require_book(self, book_id: int) -> Book:
        book = self.get_book(book_id)
        if book is None:
            raise NotFoundError(f"Book {book_id} not found")
        return book

    def _require_chapter(self, chapter_id: int) -> Chapter:
        chapter = self.get_chapter(chapter_id)
        if chapter is None:
            raise NotFoundError(f"Chapter {chapter_id} not found")
        return chapter

    def _require_detail(self, detail_id: int) -> Detail:
        detail = self.get_detail(detail_id)
        if detail is None:
            raise NotFoundError(f"Detail {detail_id} not found")
        return detail

    def list_children(self, kind: str, parent_id: int) -> List[Entity]:
        """Children of a parent by foreign key, in insertion order.

        ``kind`` names the child collection: chapters of a book or details of
        a chapter. The ``index`` field is display-only and never sorts.
        """
        if kind == KIND_CHAPTER:
            return [c for c in self.chapters if c.book_id == parent_id]
        if kind == KIND_DETAIL:
            return [d for d in self.details if d.chapter_id == parent_id]
        raise BadRequestError(f"{kind} has no parent collection")

    def chapters_of(self, book_id: int) -> List[Chapter]:
        return self.list_children(KIND_CHAPTER, book_id)  # type: ignore[return-value]

    def details_of(self, chapter_id: int) -> List[Detail]:
        return self.list_children(KIND_DETAIL, chapter_id)  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # mutation
    # ------------------------------------------------------------------

    def upsert(self, kind: str, entity: Entity) -> Entity:
        """Replace the element whose id matches, keeping its position."""
        collection = self._collection(kind)
        for pos, existing in enumerate(collection):
            if existing.id == entity.id:
                collection[pos] = entity
                return entity
        raise NotFoundError(f"{kind.capitalize()} {entity.id} not found")

    def _update(self, kind: str, current: Entity, changes: dict) -> Entity:
        changes = {k: v for k, v in changes.items() if k != "id"}
        data = current.model_dump()
        data.update(changes)
        try:
            updated = type(current).model_validate(data)
        except ValidationError as exc:
            detail = exc.errors()[0]["msg"]
            raise BadRequestError(f"Invalid {kind} fields: {detail}") from exc
        return self.upsert(kind, updated)

    def update_book(self, book_id: int, **changes) -> Book:
        return self._update(KIND_BOOK, self._require_book(book_id), changes)  # type: ignore[return-value]

    def update_chapter(self, chapter_id: int, **changes) -> Chapter:
        return self._update(KIND_CHAPTER, self._require_chapter(chapter_id), changes)  # type: ignore[return-value]

    def update_detail(self, detail_id: int, **changes) -> Detail:
        return self._update(KIND_DETAIL, self._require_detail(detail_id), changes)  # type: ignore[return-value]

    def rename_book(self, book_id: int, title: str) -> Book:
        return self.update_book(book_id, title=title)

    def create_book(self) -> Book:
        book = Book(id=self._next_id())
        self.books.append(book)
        return book

    def create_chapter(self, book_id: int) -> Chapter:
        self._require_book(book_id)
        # count + 1, so a number freed by a deletion can come back
        n = len(self.chapters_of(book_id)) + 1
        chapter = Chapter(
            id=self._next_id(),
            book_id=book_id,
            index=str(n),
            title=f"새로운 챕터 {n}",
        )
        self.chapters.append(chapter)
        return chapter

    def create_detail(self, chapter_id: int) -> Detail:
        self._require_chapter(chapter_id)
        n = len(self.details_of(chapter_id)) + 1
        detail = Detail(
            id=self._next_id(),
            chapter_id=chapter_id,
            index=str(n),
            title=f"세부 항목 {n}",
            start_page=1,
            end_page=10,
            content="",
        )
        self.details.append(detail)
        return detail

    def delete_book(self, book_id: int) -> bool:
        """Remove a book. Returns False when no book had that id.

        With the ``orphan`` policy its chapters and details stay in their
        collections; ``cascade`` removes them as well.
        """
        remaining = [b for b in self.books if b.id != book_id]
        if len(remaining) == len(self.books):
            return False
        self.books = remaining
        if self.delete_policy == "cascade":
            chapter_ids = {c.id for c in self.chapters if c.book_id == book_id}
            self.chapters = [c for c in self.chapters if c.book_id != book_id]
            self.details = [d for d in self.details if d.chapter_id not in chapter_ids]
        return True

    # ------------------------------------------------------------------
    # genres
    # ------------------------------------------------------------------

    def add_genre(self, name: str) -> bool:
        genre = (name or "").strip()
        if not genre or genre in self.custom_genres:
            return False
        self.custom_genres.append(genre)
        return True

    def used_genres(self) -> List[str]:
        """Custom genres plus every genre a book is filed under, first seen first."""
        seen: List[str] = []
        candidates = list(self.custom_genres)
        for book in self.books:
            candidates.extend(book.category)
        for genre in candidates:
            if genre and genre not in seen:
                seen.append(genre)
        return seen

    def move_book_to_genre(self, book_id: int, genre: str) -> Book:
        return self.update_book(book_id, category=[genre])

    def books_in_genre(self, genre: Optional[str]) -> List[Book]:
        if genre is None:
            return [b for b in self.books if b.is_uncategorized]
        return [b for b in self.books if genre in b.category]

    # ------------------------------------------------------------------
    # derived queries
    # ------------------------------------------------------------------

    def compute_progress(self, book_id: int) -> int:
        """Percent of the book's pages covered by details that have content."""
        book = self.get_book(book_id)
        if book is None or not book.total_pages or book.total_pages <= 0:
            return 0
        chapter_ids = {c.id for c in self.chapters_of(book_id)}
        written = sum(
            d.page_span
            for d in self.details
            if d.chapter_id in chapter_ids and d.has_content
        )
        ratio = written / book.total_pages * 100
        if not math.isfinite(ratio):
            return 0
        return max(0, min(_js_round(ratio), 100))

    def search(self, query: str) -> List[SearchResult]:
        if not query or not query.strip():
            return []
        q = query.lower()
        results: List[SearchResult] = []
        for b in self.books:
            if q in b.title.lower() or q in b.author.lower():
                results.append(
                    SearchResult(
                        target=KIND_BOOK,
                        type=TYPE_LABELS[KIND_BOOK],
                        title=b.title,
                        desc=b.author,
                        id=b.id,
                    )
                )
        for c in self.chapters:
            if q in c.title.lower():
                results.append(
                    SearchResult(
                        target=KIND_CHAPTER,
                        type=TYPE_LABELS[KIND_CHAPTER],
                        title=c.title,
                        desc=CHAPTER_DESC,
                        id=c.id,
                        book_id=c.book_id,
                    )
                )
        for d in self.details:
            if q in d.title.lower() or q in d.content.lower():
                results.append(
                    SearchResult(
                        target=KIND_DETAIL,
                        type=TYPE_LABELS[KIND_DETAIL],
                        title=d.title,
                        desc=DETAIL_DESC,
                        id=d.id,
                        chapter_id=d.chapter_id,
                    )
                )
        return results
