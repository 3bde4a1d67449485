"""
Media library routes.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse

from catalog_backend.dependencies import get_media_manager
from catalog_backend.media import ALL_FOLDERS, MediaManager
from catalog_backend.routes.common import read_uploads
from catalog_backend.schemas import (
    FavoritePayload,
    MediaListResponse,
    MediaMetaPayload,
    MediaMetaUpdateResponse,
    MediaUploadResponse,
    MessageResponse,
    UsageResponse,
)
from catalog_backend.security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/media", tags=["media"])


@router.get("", response_model=MediaListResponse)
def list_media(
    category: str = Query(ALL_FOLDERS),
    search: str = Query(""),
    page: int = Query(1),
    limit: int | None = Query(None),
    media: MediaManager = Depends(get_media_manager),
):
    result = media.list_media(category=category, search=search, page=page, limit=limit)
    return MediaListResponse(
        total=result.total,
        page=result.page,
        limit=result.limit,
        items=[item.as_dict() for item in result.items],
    )


@router.post("/upload", response_model=MediaUploadResponse, status_code=201)
async def upload_media(
    cat: str = Query(...),
    files: list[UploadFile] | None = File(None),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")
    stored = await run_in_threadpool(media.upload, cat, await read_uploads(files))
    return MediaUploadResponse(folder=cat, files=stored)


@router.post("/meta/{name}", response_model=MediaMetaUpdateResponse)
def update_media_meta(
    name: str,
    payload: MediaMetaPayload,
    cat: str = Query(...),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    meta = media.update_metadata(cat, name, payload.model_dump(exclude_none=True))
    return MediaMetaUpdateResponse(meta=meta.as_dict())


@router.post("/favorite/{name}", response_model=MediaMetaUpdateResponse)
def toggle_media_favorite(
    name: str,
    payload: FavoritePayload,
    cat: str = Query(...),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    meta = media.set_favorite(cat, name, payload.favorite)
    return MediaMetaUpdateResponse(meta=meta.as_dict())


@router.get("/download/{name}")
def download_media(
    name: str,
    cat: str = Query(...),
    media: MediaManager = Depends(get_media_manager),
):
    path = media.download_path(cat, name)
    return FileResponse(path, filename=name)


@router.get("/usage/{folder}/{file}", response_model=UsageResponse)
def media_usage(
    folder: str,
    file: str,
    media: MediaManager = Depends(get_media_manager),
):
    return UsageResponse(**media.usage(folder, file).as_dict())


@router.delete("/{name}", response_model=MessageResponse)
def delete_media(
    name: str,
    cat: str = Query(...),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    media.delete(cat, name)
    return MessageResponse(message="Deleted")
