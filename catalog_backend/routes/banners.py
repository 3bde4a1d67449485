"""
Homepage banner routes.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from catalog_backend.config import get_settings
from catalog_backend.db import BANNERS, DbClient
from catalog_backend.dependencies import get_db_client, get_media_manager
from catalog_backend.media import MediaManager
from catalog_backend.routes.common import store_image
from catalog_backend.schemas import MessageResponse, ReorderRequest
from catalog_backend.security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/banners", tags=["banners"])

FOLDER = "banners"


def _text_mode(value: Optional[str]) -> str:
    return "light" if value == "light" else "dark"


def _get_or_404(db: DbClient, banner_id: str) -> dict:
    banner = db.get(BANNERS, banner_id)
    if not banner:
        raise HTTPException(status_code=404, detail="Banner not found")
    return banner


@router.post("", status_code=201)
async def create_banner(
    title: str = Form(""),
    subtitle: str = Form(""),
    textMode: Optional[str] = Form(None),
    desktopImage: Optional[UploadFile] = File(None),
    mobileImage: Optional[UploadFile] = File(None),
    db: DbClient = Depends(get_db_client),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    if desktopImage is None or not desktopImage.filename:
        raise HTTPException(status_code=400, detail="Desktop image is required")
    banner = db.insert(
        BANNERS,
        {
            "title": title,
            "subtitle": subtitle,
            "image": await store_image(media, FOLDER, desktopImage),
            "mobileImage": await store_image(media, FOLDER, mobileImage),
            "textMode": _text_mode(textMode),
            "active": False,
            "order": 0,
        },
    )
    return {"success": True, "banner": banner}


@router.get("")
def list_banners(db: DbClient = Depends(get_db_client)):
    return db.find(BANNERS, order_by="-created_at")


@router.get("/active")
def active_banners(db: DbClient = Depends(get_db_client)):
    return db.find(BANNERS, where={"active": True}, order_by="order")


@router.put("/reorder", response_model=MessageResponse)
def reorder_banners(
    payload: ReorderRequest,
    db: DbClient = Depends(get_db_client),
    admin: dict = Depends(require_admin),
):
    # One update per banner; a failure part way leaves earlier positions applied.
    for position, banner_id in enumerate(payload.order):
        if db.update(BANNERS, banner_id, {"order": position}) is None:
            logger.warning("Reorder skipped unknown banner %s", banner_id)
    return MessageResponse(message="Order updated")


@router.put("/{banner_id}/activate")
def activate_banner(
    banner_id: str,
    db: DbClient = Depends(get_db_client),
    admin: dict = Depends(require_admin),
):
    banner = _get_or_404(db, banner_id)
    if banner.get("active"):
        return banner
    limit = get_settings().max_active_banners
    if db.count(BANNERS, where={"active": True}) >= limit:
        raise HTTPException(
            status_code=400, detail=f"Only {limit} banners can be active at a time"
        )
    return db.update(BANNERS, banner_id, {"active": True})


@router.put("/{banner_id}/deactivate")
def deactivate_banner(
    banner_id: str,
    db: DbClient = Depends(get_db_client),
    admin: dict = Depends(require_admin),
):
    _get_or_404(db, banner_id)
    return db.update(BANNERS, banner_id, {"active": False})


@router.put("/{banner_id}")
async def update_banner(
    banner_id: str,
    title: Optional[str] = Form(None),
    subtitle: Optional[str] = Form(None),
    textMode: Optional[str] = Form(None),
    desktopImage: Optional[UploadFile] = File(None),
    mobileImage: Optional[UploadFile] = File(None),
    db: DbClient = Depends(get_db_client),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    banner = _get_or_404(db, banner_id)
    changes: dict = {}
    if title is not None:
        changes["title"] = title
    if subtitle is not None:
        changes["subtitle"] = subtitle
    if textMode is not None:
        changes["textMode"] = _text_mode(textMode)

    replaced = []
    for field_name, upload in (("image", desktopImage), ("mobileImage", mobileImage)):
        new_path = await store_image(media, FOLDER, upload)
        if new_path:
            changes[field_name] = new_path
            replaced.append(banner.get(field_name))

    updated = db.update(BANNERS, banner_id, changes)
    for old_path in replaced:
        await run_in_threadpool(media.release, old_path)
    return {"success": True, "banner": updated}


@router.delete("/{banner_id}", response_model=MessageResponse)
def delete_banner(
    banner_id: str,
    db: DbClient = Depends(get_db_client),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    banner = db.delete(BANNERS, banner_id)
    if not banner:
        raise HTTPException(status_code=404, detail="Banner not found")
    media.release(banner.get("image"))
    media.release(banner.get("mobileImage"))
    return MessageResponse(message="Banner deleted successfully")
