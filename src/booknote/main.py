# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Defines the main unit so this responsibility stays isolated, testable, and easy to evolve.

Main application entry point for the BookNote API server.
Includes session setup, error handling, and router registration.
"""

from __future__ import annotations

import argparse
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, APIRouter, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware

from booknote.core.config import STATIC_DIR, load_storage_settings
from booknote.services.exceptions import ServiceError
from booknote.services.session.app_session import AppSession

# Import API routers
from booknote.api.v1.libraries import router as libraries_router  # noqa: E402
from booknote.api.v1.books import router as books_router  # noqa: E402
from booknote.api.v1.chapters import router as chapters_router  # noqa: E402
from booknote.api.v1.search import router as search_router  # noqa: E402
from booknote.api.v1.navigation import router as navigation_router  # noqa: E402
from booknote.api.v1.spelling import router as spelling_router  # noqa: E402
from booknote.api.v1.debug import router as debug_router  # noqa: E402


def create_app(session: Optional[AppSession] = None) -> FastAPI:
    """Create the FastAPI app.

    Uvicorn's reload mode requires an import string; using an app factory keeps
    route registration consistent across reload subprocesses. The registry is
    loaded from storage once, when the app starts.
    """

    if session is None:
        session = AppSession.from_settings(load_storage_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.session.loading:
            await app.state.session.load()
        yield

    app = FastAPI(title="BookNote", lifespan=lifespan)
    app.state.session = session

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"http://(localhost|127\.0\.0\.1)(:\d+)?",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # The SPA bundle is optional; the API works without it
    if STATIC_DIR.is_dir():
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    api_v1_router = APIRouter(prefix="/api/v1")
    api_v1_router.include_router(libraries_router)
    api_v1_router.include_router(books_router)
    api_v1_router.include_router(chapters_router)
    api_v1_router.include_router(search_router)
    api_v1_router.include_router(navigation_router)
    api_v1_router.include_router(spelling_router)
    api_v1_router.include_router(debug_router)

    api_v1_router.add_api_route(
        "/health", endpoint=lambda: {"status": "ok"}, methods=["GET"]
    )

    app.include_router(api_v1_router)

    # --------------- global exception handler ---------------
    @app.exception_handler(ServiceError)
    async def _service_error_handler(
        _request: Request, exc: ServiceError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "detail": exc.detail},
        )

    return app


app = create_app()


def build_arg_parser() -> argparse.ArgumentParser:
    """Build Arg Parser."""
    parser = argparse.ArgumentParser(
        prog="booknote",
        description="Run the BookNote FastAPI server",
    )
    parser.add_argument(
        "--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port", type=int, default=8000, help="Port to bind (default: 8000)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload (development only)",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Log level for the server (default: info)",
    )
    parser.add_argument(
        "--storage",
        choices=["local", "remote"],
        default=None,
        help="Storage backend (overrides BOOKNOTE_STORAGE_BACKEND)",
    )
    parser.add_argument(
        "--storage-dump",
        action="store_true",
        help="Dump every storage load/save to a log file",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entrypoint to run the server via a normal Python invocation.

    Examples:
      python -m booknote.main --help
      python -m booknote.main --storage remote --port 8000
    """
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.storage:
        os.environ["BOOKNOTE_STORAGE_BACKEND"] = args.storage
    if args.storage_dump:
        os.environ["BOOKNOTE_STORAGE_DUMP"] = "1"

    # Import uvicorn lazily so that importing this module doesn't require it for tests/tools
    import uvicorn  # type: ignore

    # Settings are read when the app is built, so always go through the factory.
    # There is exactly one in-memory session, hence no multi-worker mode.
    uvicorn.run(
        "booknote.main:create_app",
        host=args.host,
        port=args.port,
        reload=bool(args.reload),
        log_level=args.log_level,
        factory=True,
    )


if __name__ == "__main__":
    main()
