# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# Purpose: Defines the search unit so this responsibility stays isolated, testable, and easy to evolve.

from fastapi import APIRouter, Depends

from booknote.api.v1.deps import get_library_session
from booknote.models.search import SearchResponse
from booknote.services.session.app_session import AppSession

router = APIRouter(tags=["Search"])


@router.get("/search", response_model=SearchResponse)
async def api_search(
    q: str = "", session: AppSession = Depends(get_library_session)
) -> SearchResponse:
    return SearchResponse(query=q, results=session.store.search(q))
