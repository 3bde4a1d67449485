"""
Category routes.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from catalog_backend.db import CATEGORIES, DbClient
from catalog_backend.dependencies import get_db_client, get_media_manager
from catalog_backend.media import MediaManager
from catalog_backend.routes.common import store_image
from catalog_backend.schemas import CategorySearchRequest, IdRequest, MessageResponse
from catalog_backend.security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/category", tags=["categories"])

FOLDER = "categories"


def _name_taken(db: DbClient, name: str, exclude_id: Optional[str] = None) -> bool:
    existing = db.find_one(CATEGORIES, where={"category_name": name})
    return bool(existing) and existing["id"] != exclude_id


@router.post("/add")
async def add_category(
    category_name: str = Form(""),
    image: Optional[UploadFile] = File(None),
    db: DbClient = Depends(get_db_client),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    name = category_name.strip()
    if not name or image is None or not image.filename:
        raise HTTPException(status_code=400, detail="All fields required")
    if _name_taken(db, name):
        raise HTTPException(status_code=400, detail="Category already exists")

    image_path = await store_image(media, FOLDER, image)
    category = db.insert(
        CATEGORIES, {"category_name": name, "category_image": image_path}
    )
    return {
        "success": True,
        "message": "Category added successfully",
        "category": category,
    }


@router.post("/view")
def view_categories(db: DbClient = Depends(get_db_client)):
    return {"success": True, "categories": db.find(CATEGORIES, order_by="-created_at")}


@router.get("/userview")
def user_view_categories(db: DbClient = Depends(get_db_client)):
    return {"success": True, "categories": db.find(CATEGORIES, order_by="category_name")}


@router.post("/search")
def search_categories(
    payload: CategorySearchRequest, db: DbClient = Depends(get_db_client)
):
    categories = db.find(
        CATEGORIES, contains={"category_name": payload.category_name}
    )
    return {"success": True, "categories": categories}


@router.put("/update/{category_id}")
async def update_category(
    category_id: str,
    category_name: str = Form(""),
    image: Optional[UploadFile] = File(None),
    db: DbClient = Depends(get_db_client),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    name = category_name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Category name is required")
    category = db.get(CATEGORIES, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    if _name_taken(db, name, exclude_id=category_id):
        raise HTTPException(status_code=400, detail="Category already exists")

    old_image = category.get("category_image")
    changes = {"category_name": name}
    new_image = await store_image(media, FOLDER, image)
    if new_image:
        changes["category_image"] = new_image
    category = db.update(CATEGORIES, category_id, changes)
    if new_image:
        await run_in_threadpool(media.release, old_image)
    return {
        "success": True,
        "message": "Category updated successfully",
        "category": category,
    }


@router.post("/delete", response_model=MessageResponse)
def delete_category(
    payload: IdRequest,
    db: DbClient = Depends(get_db_client),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    if not payload.id:
        raise HTTPException(status_code=400, detail="Category ID required")
    category = db.delete(CATEGORIES, payload.id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    media.release(category.get("category_image"))
    return MessageResponse(message="Category deleted successfully")
