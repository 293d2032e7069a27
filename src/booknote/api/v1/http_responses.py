# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the http responses unit so this responsibility stays isolated, testable, and easy to evolve."""

from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel


def _encode(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


def ok_json(status_code: int = 200, **extra: object) -> JSONResponse:
    body: dict[str, object] = {"ok": True}
    body.update({k: _encode(v) for k, v in extra.items()})
    return JSONResponse(status_code=status_code, content=body)


def error_json(detail: str, status_code: int = 400, **extra: object) -> JSONResponse:
    body: dict[str, object] = {"ok": False, "detail": detail}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)
