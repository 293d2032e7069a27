# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the chapters unit so this responsibility stays isolated, testable, and easy to evolve.

Chapter and detail (note) endpoints. Children are listed by foreign key in
insertion order; every edit replaces the entity by id.
"""

from fastapi import APIRouter, Depends, Path as FastAPIPath
from fastapi.responses import JSONResponse

from booknote.api.v1.deps import get_library_session
from booknote.api.v1.http_responses import ok_json
from booknote.models.library import ChapterUpdate, DetailUpdate
from booknote.services.exceptions import NotFoundError
from booknote.services.session.app_session import AppSession
from booknote.utils.video_links import embed_url, get_youtube_id

router = APIRouter(tags=["Chapters"])


@router.get("/books/{book_id}/chapters")
async def api_chapters(
    book_id: int = FastAPIPath(...),
    session: AppSession = Depends(get_library_session),
) -> JSONResponse:
    return ok_json(chapters=session.store.chapters_of(book_id))


@router.post("/books/{book_id}/chapters")
async def api_create_chapter(
    book_id: int = FastAPIPath(...),
    session: AppSession = Depends(get_library_session),
) -> JSONResponse:
    chapter = session.store.create_chapter(book_id)
    return ok_json(chapter=chapter)


@router.put("/chapters/{chapter_id}")
async def api_update_chapter(
    body: ChapterUpdate,
    chapter_id: int = FastAPIPath(...),
    session: AppSession = Depends(get_library_session),
) -> JSONResponse:
    chapter = session.store.update_chapter(
        chapter_id, **body.model_dump(exclude_unset=True)
    )
    session.after_edit()
    return ok_json(chapter=chapter)


@router.get("/chapters/{chapter_id}/details")
async def api_details(
    chapter_id: int = FastAPIPath(...),
    session: AppSession = Depends(get_library_session),
) -> JSONResponse:
    return ok_json(details=session.store.details_of(chapter_id))


@router.post("/chapters/{chapter_id}/details")
async def api_create_detail(
    chapter_id: int = FastAPIPath(...),
    session: AppSession = Depends(get_library_session),
) -> JSONResponse:
    detail = session.store.create_detail(chapter_id)
    return ok_json(detail=detail)


@router.put("/details/{detail_id}")
async def api_update_detail(
    body: DetailUpdate,
    detail_id: int = FastAPIPath(...),
    session: AppSession = Depends(get_library_session),
) -> JSONResponse:
    detail = session.store.update_detail(
        detail_id, **body.model_dump(exclude_unset=True)
    )
    session.after_edit()
    return ok_json(detail=detail)


@router.get("/details/{detail_id}/video")
async def api_detail_video(
    detail_id: int = FastAPIPath(...),
    session: AppSession = Depends(get_library_session),
) -> dict:
    detail = session.store.get_detail(detail_id)
    if detail is None:
        raise NotFoundError(f"Detail {detail_id} not found")
    return {
        "videoUrl": detail.video_url,
        "videoId": get_youtube_id(detail.video_url),
        "embedUrl": embed_url(detail.video_url),
    }
