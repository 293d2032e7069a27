# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# Purpose: Defines the search unit so this responsibility stays isolated, testable, and easy to evolve.

"""
Pydantic models for search hits over the active library.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

SearchTarget = Literal["book", "chapter", "detail"]

TYPE_LABELS: dict[str, str] = {"book": "책", "chapter": "챕터", "detail": "노트"}
CHAPTER_DESC = "소속 불명"
DETAIL_DESC = "위치 불명"


class SearchResult(BaseModel):
    """One hit; carries the foreign key needed to rebuild the selection path."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    target: SearchTarget
    type: str
    title: str
    desc: str
    id: int
    book_id: int | None = None
    chapter_id: int | None = None


class SearchResponse(BaseModel):
    """Response body for ``GET /api/v1/search``."""

    query: str
    results: list[SearchResult]
