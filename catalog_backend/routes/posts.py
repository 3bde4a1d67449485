"""
Blog post routes.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from catalog_backend.db import POSTS, DbClient
from catalog_backend.dependencies import get_db_client, get_media_manager
from catalog_backend.media import MediaManager
from catalog_backend.routes.common import store_image
from catalog_backend.schemas import MessageResponse
from catalog_backend.security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])

FOLDER = "posts"


@router.post("", status_code=201)
async def create_post(
    title: str = Form(...),
    shortDescription: str = Form(...),
    longDescription: str = Form(...),
    date: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: DbClient = Depends(get_db_client),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    if image is None or not image.filename:
        raise HTTPException(status_code=400, detail="Image is required")
    image_path = await store_image(media, FOLDER, image)
    return db.insert(
        POSTS,
        {
            "title": title.strip(),
            "shortDescription": shortDescription.strip(),
            "longDescription": longDescription,
            "date": date,
            "image": image_path,
        },
    )


@router.get("")
def list_posts(db: DbClient = Depends(get_db_client)):
    return db.find(POSTS, order_by="-created_at")


@router.get("/{post_id}")
def get_post(post_id: str, db: DbClient = Depends(get_db_client)):
    post = db.get(POSTS, post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.put("/{post_id}")
async def update_post(
    post_id: str,
    title: Optional[str] = Form(None),
    shortDescription: Optional[str] = Form(None),
    longDescription: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: DbClient = Depends(get_db_client),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    post = db.get(POSTS, post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")

    changes = {
        key: value
        for key, value in {
            "title": title,
            "shortDescription": shortDescription,
            "longDescription": longDescription,
            "date": date,
        }.items()
        if value is not None
    }
    new_image = await store_image(media, FOLDER, image)
    if new_image:
        changes["image"] = new_image
    updated = db.update(POSTS, post_id, changes)
    if new_image:
        await run_in_threadpool(media.release, post.get("image"))
    return updated


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: str,
    db: DbClient = Depends(get_db_client),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    post = db.delete(POSTS, post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    media.release(post.get("image"))
    return MessageResponse(message="Post deleted successfully")
