# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
# Purpose: Defines the deps unit so this responsibility stays isolated, testable, and easy to evolve.

from fastapi import Depends, Request

from booknote.services.exceptions import BadRequestError
from booknote.services.session.app_session import AppSession


def get_session(request: Request) -> AppSession:
    return request.app.state.session


def get_library_session(session: AppSession = Depends(get_session)) -> AppSession:
    """Session that already has a library to work on."""
    if session.registry is None:
        raise BadRequestError("Create a library first")
    return session
