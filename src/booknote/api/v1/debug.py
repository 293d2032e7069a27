# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Read or clear the recent storage loads and saves kept in memory."""

from fastapi import APIRouter

from booknote.services.storage.storage_logging import storage_logs

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/storage_logs")
async def list_storage_logs() -> list:
    """Newest last; credential headers are already masked."""
    return storage_logs


@router.delete("/storage_logs")
async def clear_storage_logs():
    storage_logs.clear()
    return {"status": "ok"}
