"""
FastAPI application entry point for the catalog backend.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog_backend import __version__
from catalog_backend.config import get_settings
from catalog_backend.errors import ConflictError, MediaError
from catalog_backend.routes import router

logger = logging.getLogger(__name__)


class UploadStaticFiles(StaticFiles):
    """Serves uploaded assets; dotfiles and sidecar metadata stay private."""

    def __init__(self, *, hidden: Iterable[str] = (), **kwargs):
        super().__init__(**kwargs)
        self.hidden = set(hidden)

    async def get_response(self, path, scope):
        parts = [part for part in path.replace(os.sep, "/").split("/") if part]
        if any(part.startswith(".") or part in self.hidden for part in parts):
            raise StarletteHTTPException(status_code=404)
        return await super().get_response(path, scope)


async def media_error_handler(request: Request, exc: MediaError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    content = {"detail": exc.message}
    if isinstance(exc, ConflictError):
        content["usage"] = exc.usage
    return JSONResponse(status_code=exc.status_code, content=content)


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Equipment Catalog Backend", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(MediaError, media_error_handler)
    app.include_router(router, prefix=settings.api_prefix)

    Path(settings.upload_root).mkdir(parents=True, exist_ok=True)
    app.mount(
        f"/{settings.upload_url_base.strip('/')}",
        UploadStaticFiles(
            directory=settings.upload_root, hidden=(settings.sidecar_filename,)
        ),
        name="uploads",
    )
    return app


app = create_app()
