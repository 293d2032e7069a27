# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# Purpose: Defines the library unit so this responsibility stays isolated, testable, and easy to evolve.

"""
Pydantic models for library, entity edit, navigation and spelling API requests and responses.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LibraryNameRequest(BaseModel):
    name: str


class LibraryListResponse(BaseModel):
    """Response body for ``GET /api/v1/libraries``."""

    current: str
    libraries: list[str]


class BookUpdate(CamelModel):
    """Request body for editing book fields; unset fields stay unchanged."""

    title: Optional[str] = None
    author: Optional[str] = None
    total_pages: Optional[int] = None
    status: Optional[str] = None
    category: Optional[list[str]] = None
    cover_url: Optional[str] = None
    video_url: Optional[str] = None


class ChapterUpdate(CamelModel):
    index: Optional[str] = None
    title: Optional[str] = None
    video_url: Optional[str] = None


class DetailUpdate(CamelModel):
    index: Optional[str] = None
    title: Optional[str] = None
    start_page: Optional[int] = None
    end_page: Optional[int] = None
    content: Optional[str] = None
    video_url: Optional[str] = None


class GenreRequest(BaseModel):
    name: str


class BookGenreRequest(BaseModel):
    genre: str


class ProgressResponse(CamelModel):
    book_id: int
    progress: int


class NavigationOpenRequest(BaseModel):
    target: Literal["book", "chapter", "detail"]
    id: int


class NavigationGoRequest(BaseModel):
    view: str


class SpellCheckRequest(CamelModel):
    target_name: str = ""


class SpellApplyRequest(BaseModel):
    corrected: str


class SpellCheckResponse(BaseModel):
    original: str
    corrected: str
    changed: bool
    message: str
