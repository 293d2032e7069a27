# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the navigation unit so this responsibility stays isolated, testable, and easy to evolve."""

from fastapi import APIRouter, Depends

from booknote.api.v1.deps import get_library_session
from booknote.models.library import NavigationGoRequest, NavigationOpenRequest
from booknote.models.search import SearchResult
from booknote.services.exceptions import NotFoundError
from booknote.services.session.app_session import AppSession

router = APIRouter(prefix="/navigation", tags=["Navigation"])


@router.get("")
async def api_navigation(session: AppSession = Depends(get_library_session)) -> dict:
    return session.navigation.to_payload()


@router.post("/open")
async def api_navigation_open(
    body: NavigationOpenRequest, session: AppSession = Depends(get_library_session)
) -> dict:
    store, nav = session.store, session.navigation
    if body.target == "book":
        book = store.get_book(body.id)
        if book is None:
            raise NotFoundError(f"Book {body.id} not found")
        nav.open_book(book)
    elif body.target == "chapter":
        chapter = store.get_chapter(body.id)
        if chapter is None:
            raise NotFoundError(f"Chapter {body.id} not found")
        nav.open_chapter(chapter)
    else:
        detail = store.get_detail(body.id)
        if detail is None:
            raise NotFoundError(f"Detail {body.id} not found")
        nav.open_detail(detail)
    return nav.to_payload()


@router.post("/go")
async def api_navigation_go(
    body: NavigationGoRequest, session: AppSession = Depends(get_library_session)
) -> dict:
    session.navigation.go_to(body.view)
    return session.navigation.to_payload()


@router.post("/back")
async def api_navigation_back(
    session: AppSession = Depends(get_library_session),
) -> dict:
    session.navigation.back()
    return session.navigation.to_payload()


@router.post("/jump")
async def api_navigation_jump(
    body: SearchResult, session: AppSession = Depends(get_library_session)
) -> dict:
    session.navigation.jump_to_result(body, session.store)
    return session.navigation.to_payload()
