# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the entities unit so this responsibility stays isolated, testable, and easy to evolve.

Pydantic models for the library tree (books, chapters, details) and the
per-library snapshot that is persisted. Field names serialize in the camelCase
shape of the saved document.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_BOOK_TITLE = "새로운 책"
DEFAULT_BOOK_STATUS = "대기 중"
DEFAULT_TOTAL_PAGES = 300


class EntityModel(BaseModel):
    """Base for stored entities: camelCase on the wire, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class Book(EntityModel):
    id: int
    title: str = DEFAULT_BOOK_TITLE
    author: str = ""
    total_pages: int = DEFAULT_TOTAL_PAGES
    status: str = DEFAULT_BOOK_STATUS
    category: list[str] = []
    cover_url: str = ""
    video_url: str = ""

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> list[str]:
        # Older saves stored a single genre string.
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value else []
        return value

    @field_validator("total_pages", mode="before")
    @classmethod
    def _blank_pages_to_zero(cls, value: Any) -> Any:
        if value is None or value == "":
            return 0
        return value

    @property
    def is_uncategorized(self) -> bool:
        return not any(self.category)


class Chapter(EntityModel):
    id: int
    book_id: int
    index: str = "1"
    title: str = ""
    video_url: str = ""

    @field_validator("index", mode="before")
    @classmethod
    def _index_as_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class Detail(EntityModel):
    id: int
    chapter_id: int
    index: str = "1"
    title: str = ""
    start_page: int = 1
    end_page: int = 10
    content: str = ""
    video_url: str = ""

    @field_validator("index", mode="before")
    @classmethod
    def _index_as_str(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("content", mode="before")
    @classmethod
    def _none_content(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def has_content(self) -> bool:
        return bool(self.content.strip())

    @property
    def page_span(self) -> int:
        return self.end_page - self.start_page + 1


class LibrarySnapshot(EntityModel):
    """The four collections of one library, always read and written together."""

    books: list[Book] = []
    chapters: list[Chapter] = []
    details: list[Detail] = []
    custom_genres: list[str] = []

    @field_validator("books", "chapters", "details", "custom_genres", mode="before")
    @classmethod
    def _missing_collection(cls, value: Any) -> Any:
        return [] if value is None else value


def empty_snapshot() -> LibrarySnapshot:
    return LibrarySnapshot()
