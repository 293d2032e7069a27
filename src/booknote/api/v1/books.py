# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the books unit so this responsibility stays isolated, testable, and easy to evolve."""

from typing import Optional

from fastapi import APIRouter, Depends, Path as FastAPIPath
from fastapi.responses import JSONResponse

from booknote.api.v1.deps import get_library_session
from booknote.api.v1.http_responses import ok_json
from booknote.models.library import (
    BookGenreRequest,
    BookUpdate,
    GenreRequest,
    ProgressResponse,
)
from booknote.services.session.app_session import AppSession

router = APIRouter(tags=["Books"])


@router.get("/books")
async def api_books(
    genre: Optional[str] = None,
    uncategorized: bool = False,
    session: AppSession = Depends(get_library_session),
) -> JSONResponse:
    store = session.store
    if uncategorized:
        books = store.books_in_genre(None)
    elif genre:
        books = store.books_in_genre(genre)
    else:
        books = store.books
    return ok_json(
        books=books,
        progress={str(b.id): store.compute_progress(b.id) for b in books},
    )


@router.post("/books")
async def api_create_book(
    session: AppSession = Depends(get_library_session),
) -> JSONResponse:
    book = session.store.create_book()
    return ok_json(book=book)


@router.put("/books/{book_id}")
async def api_update_book(
    body: BookUpdate,
    book_id: int = FastAPIPath(...),
    session: AppSession = Depends(get_library_session),
) -> JSONResponse:
    book = session.store.update_book(book_id, **body.model_dump(exclude_unset=True))
    session.after_edit()
    return ok_json(book=book)


@router.delete("/books/{book_id}")
async def api_delete_book(
    book_id: int = FastAPIPath(...),
    session: AppSession = Depends(get_library_session),
) -> JSONResponse:
    session.delete_book(book_id)
    return ok_json(navigation=session.navigation.to_payload())


@router.get("/books/{book_id}/progress", response_model=ProgressResponse)
async def api_book_progress(
    book_id: int = FastAPIPath(...),
    session: AppSession = Depends(get_library_session),
) -> ProgressResponse:
    return ProgressResponse(
        book_id=book_id, progress=session.store.compute_progress(book_id)
    )


@router.post("/books/{book_id}/genre")
async def api_move_book_to_genre(
    body: BookGenreRequest,
    book_id: int = FastAPIPath(...),
    session: AppSession = Depends(get_library_session),
) -> JSONResponse:
    book = session.store.move_book_to_genre(book_id, body.genre)
    session.after_edit()
    return ok_json(book=book)


@router.get("/genres")
async def api_genres(session: AppSession = Depends(get_library_session)) -> dict:
    return {
        "custom": list(session.store.custom_genres),
        "used": session.store.used_genres(),
    }


@router.post("/genres")
async def api_add_genre(
    body: GenreRequest, session: AppSession = Depends(get_library_session)
) -> JSONResponse:
    added = session.store.add_genre(body.name)
    return ok_json(added=added, used=session.store.used_genres())
