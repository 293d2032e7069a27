# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# Purpose: Defines the libraries unit so this responsibility stays isolated, testable, and easy to evolve.

"""
API endpoints for the library registry: first-run setup, listing, creating,
switching and the explicit save of every library.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from booknote.api.v1.deps import get_library_session, get_session
from booknote.api.v1.http_responses import error_json, ok_json
from booknote.models.library import LibraryListResponse, LibraryNameRequest
from booknote.services.session.app_session import AppSession

router = APIRouter(tags=["Libraries"])


@router.get("/state")
async def api_state(session: AppSession = Depends(get_session)) -> dict:
    return session.state_payload()


@router.get("/libraries", response_model=LibraryListResponse)
async def api_libraries(
    session: AppSession = Depends(get_session),
) -> LibraryListResponse:
    return LibraryListResponse(
        current=session.current_library, libraries=session.list_library_names()
    )


@router.post("/libraries/setup")
async def api_libraries_setup(
    body: LibraryNameRequest, session: AppSession = Depends(get_session)
) -> JSONResponse:
    if session.registry is not None:
        return error_json("Libraries already exist", status_code=409)
    name = await session.setup(body.name)
    return ok_json(current=name, libraries=session.list_library_names())


@router.post("/libraries/create")
async def api_libraries_create(
    body: LibraryNameRequest, session: AppSession = Depends(get_library_session)
) -> JSONResponse:
    name = session.create_library(body.name)
    return ok_json(current=name, libraries=session.list_library_names())


@router.post("/libraries/select")
async def api_libraries_select(
    body: LibraryNameRequest, session: AppSession = Depends(get_library_session)
) -> JSONResponse:
    session.switch_library(body.name)
    return ok_json(current=session.current_library)


@router.post("/save")
async def api_save(session: AppSession = Depends(get_library_session)) -> JSONResponse:
    await session.save()
    return ok_json(save_status=session.save_status.to_payload())
