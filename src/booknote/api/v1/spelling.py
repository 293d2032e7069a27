# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# Purpose: Defines the spelling unit so this responsibility stays isolated, testable, and easy to evolve.

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from booknote.api.v1.deps import get_library_session
from booknote.api.v1.http_responses import ok_json
from booknote.models.library import (
    SpellApplyRequest,
    SpellCheckRequest,
    SpellCheckResponse,
)
from booknote.services.session.app_session import AppSession

router = APIRouter(prefix="/spelling", tags=["Spelling"])


@router.post("/check", response_model=SpellCheckResponse)
async def api_spelling_check(
    body: SpellCheckRequest, session: AppSession = Depends(get_library_session)
) -> SpellCheckResponse:
    result = await session.check_spelling(body.target_name)
    return SpellCheckResponse(
        original=result.original,
        corrected=result.corrected,
        changed=result.changed,
        message=result.message,
    )


@router.post("/apply")
async def api_spelling_apply(
    body: SpellApplyRequest, session: AppSession = Depends(get_library_session)
) -> JSONResponse:
    detail, message = session.apply_correction(body.corrected)
    return ok_json(detail=detail, message=message)
