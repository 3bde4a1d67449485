"""
Product routes: catalog entries, their image galleries and public listings.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile

from catalog_backend.db import CATEGORIES, PRODUCT_IMAGES, PRODUCTS, DbClient
from catalog_backend.dependencies import get_db_client, get_media_manager
from catalog_backend.media import MediaManager
from catalog_backend.routes.common import store_images
from catalog_backend.schemas import (
    CategoryFilterRequest,
    IdRequest,
    MessageResponse,
    ProductPayload,
    ProductSearchRequest,
)
from catalog_backend.security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/product", tags=["products"])

FOLDER = "products"
UNCATEGORIZED = "Uncategorized"


def _main_image(db: DbClient, product_id: str) -> Optional[dict]:
    return db.find_one(
        PRODUCT_IMAGES, where={"PRODUCT_ID": product_id, "is_main": True}
    ) or db.find_one(
        PRODUCT_IMAGES, where={"PRODUCT_ID": product_id}, order_by="-created_at"
    )


def _category_name(db: DbClient, category_id: Optional[str]) -> str:
    category = db.get(CATEGORIES, category_id) if category_id else None
    return category["category_name"] if category else UNCATEGORIZED


def _with_main_image(db: DbClient, product: dict) -> dict:
    main = _main_image(db, product["id"])
    return {
        **product,
        "category": _category_name(db, product.get("CAT_ID")),
        "main_image": main["image_path"] if main else None,
    }


def _summary(db: DbClient, product: dict) -> dict:
    enriched = _with_main_image(db, product)
    return {
        "id": product["id"],
        "prod_id": product.get("prod_id"),
        "product_name": product.get("product_name"),
        "description": product.get("description"),
        "product_info": product.get("product_info") or [],
        "category": enriched["category"],
        "main_image": enriched["main_image"],
    }


@router.get("/latest")
def latest_products(
    limit: int = Query(10, ge=1, le=100), db: DbClient = Depends(get_db_client)
):
    products = db.find(PRODUCTS, order_by="-created_at", limit=limit)
    return {"success": True, "products": [_summary(db, p) for p in products]}


@router.get("/userview")
def user_view_products(db: DbClient = Depends(get_db_client)):
    products = db.find(PRODUCTS, order_by="-created_at")
    return {"success": True, "products": [_summary(db, p) for p in products]}


@router.get("/category/{category_name}")
def products_by_category_name(category_name: str, db: DbClient = Depends(get_db_client)):
    wanted = category_name.lower()
    category_ids = {
        c["id"]
        for c in db.find(CATEGORIES, fields=("category_name",))
        if (c.get("category_name") or "").lower() == wanted
    }
    products = [
        p for p in db.find(PRODUCTS, order_by="-created_at") if p.get("CAT_ID") in category_ids
    ]
    return {
        "success": True,
        "category": category_name,
        "products": [_summary(db, p) for p in products],
    }


@router.get("/userview/{product_id}")
def user_view_product(product_id: str, request: Request, db: DbClient = Depends(get_db_client)):
    product = db.get(PRODUCTS, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    images = db.find(PRODUCT_IMAGES, where={"PRODUCT_ID": product_id}, order_by="created_at")
    main = next((img for img in images if img.get("is_main")), None)
    base_url = str(request.base_url)
    return {
        "success": True,
        "product": {
            "id": product["id"],
            "prod_id": product.get("prod_id"),
            "name": product.get("product_name"),
            "description": product.get("description"),
            "product_info": product.get("product_info") or [],
            "category": _category_name(db, product.get("CAT_ID")),
            "main_image": f"{base_url}{main['image_path']}" if main else None,
            "gallery": [
                f"{base_url}{img['image_path']}" for img in images if not img.get("is_main")
            ],
        },
    }


@router.get("/images/{product_id}")
def product_images(product_id: str, db: DbClient = Depends(get_db_client)):
    images = db.find(PRODUCT_IMAGES, where={"PRODUCT_ID": product_id}, order_by="created_at")
    return {"success": True, "images": images}


@router.put("/setMainImage/{image_id}")
def set_main_image(
    image_id: str,
    db: DbClient = Depends(get_db_client),
    admin: dict = Depends(require_admin),
):
    image = db.get(PRODUCT_IMAGES, image_id)
    if not image:
        raise HTTPException(status_code=404, detail="Image not found")
    db.update_where(PRODUCT_IMAGES, {"PRODUCT_ID": image["PRODUCT_ID"]}, {"is_main": False})
    image = db.update(PRODUCT_IMAGES, image_id, {"is_main": True})
    return {"success": True, "message": "Main image updated successfully", "image": image}


@router.post("/add", status_code=201)
def add_product(
    payload: ProductPayload,
    db: DbClient = Depends(get_db_client),
    admin: dict = Depends(require_admin),
):
    prod_id = (payload.prod_id or "").strip()
    product_name = (payload.product_name or "").strip()
    if not prod_id or not product_name or not payload.CAT_ID or not payload.description:
        raise HTTPException(status_code=400, detail="All required fields must be filled")
    if db.find_one(PRODUCTS, where={"prod_id": prod_id}):
        raise HTTPException(status_code=400, detail="Product ID already exists")
    if not db.get(CATEGORIES, payload.CAT_ID):
        raise HTTPException(status_code=400, detail="Category not found")

    product = db.insert(
        PRODUCTS,
        {
            "prod_id": prod_id,
            "product_name": product_name,
            "CAT_ID": payload.CAT_ID,
            "description": payload.description,
            "product_info": [entry.model_dump() for entry in payload.product_info],
        },
    )
    return {"success": True, "message": "Product added successfully", "product": product}


@router.post("/upload-images/{product_id}")
async def upload_product_images(
    product_id: str,
    images: Optional[list[UploadFile]] = File(None),
    mainIndex: Optional[int] = Form(None),
    db: DbClient = Depends(get_db_client),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    if not images:
        raise HTTPException(status_code=400, detail="No images uploaded")
    if not db.get(PRODUCTS, product_id):
        raise HTTPException(status_code=404, detail="Product not found")

    paths = await store_images(media, FOLDER, images)
    if mainIndex is not None and 0 <= mainIndex < len(paths):
        db.update_where(PRODUCT_IMAGES, {"PRODUCT_ID": product_id}, {"is_main": False})
    db.insert_many(
        PRODUCT_IMAGES,
        [
            {"PRODUCT_ID": product_id, "image_path": path, "is_main": index == mainIndex}
            for index, path in enumerate(paths)
        ],
    )
    return {"success": True, "message": "Images uploaded successfully", "images": paths}


@router.get("/viewallProducts")
def view_all_products(db: DbClient = Depends(get_db_client)):
    products = db.find(PRODUCTS, order_by="-created_at")
    return {"success": True, "products": [_with_main_image(db, p) for p in products]}


@router.post("/view-by-category")
def view_products_by_category(
    payload: CategoryFilterRequest, db: DbClient = Depends(get_db_client)
):
    if not payload.CAT_ID:
        raise HTTPException(status_code=400, detail="Category ID is required")
    products = db.find(PRODUCTS, where={"CAT_ID": payload.CAT_ID}, order_by="-created_at")
    return {"success": True, "products": [_with_main_image(db, p) for p in products]}


@router.post("/searchProducts")
def search_products(payload: ProductSearchRequest, db: DbClient = Depends(get_db_client)):
    where = {"CAT_ID": payload.CAT_ID} if payload.CAT_ID else None
    contains = {"product_name": payload.product_name} if payload.product_name else None
    products = db.find(PRODUCTS, where=where, contains=contains, order_by="-created_at")
    return {"success": True, "products": [_with_main_image(db, p) for p in products]}


@router.post("/delete", response_model=MessageResponse)
def delete_product(
    payload: IdRequest,
    db: DbClient = Depends(get_db_client),
    media: MediaManager = Depends(get_media_manager),
    admin: dict = Depends(require_admin),
):
    if not payload.id:
        raise HTTPException(status_code=400, detail="Product ID required")
    if not db.get(PRODUCTS, payload.id):
        raise HTTPException(status_code=404, detail="Product not found")

    images = db.find(PRODUCT_IMAGES, where={"PRODUCT_ID": payload.id})
    db.delete_where(PRODUCT_IMAGES, {"PRODUCT_ID": payload.id})
    db.delete(PRODUCTS, payload.id)
    for image in images:
        media.release(image.get("image_path"))
    return MessageResponse(message="Product deleted successfully")


@router.get("/{product_id}")
def get_product(product_id: str, db: DbClient = Depends(get_db_client)):
    product = db.get(PRODUCTS, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    product["images"] = db.find(
        PRODUCT_IMAGES, where={"PRODUCT_ID": product_id}, order_by="created_at"
    )
    return {"success": True, "product": product}


@router.put("/update/{product_id}")
def update_product(
    product_id: str,
    payload: ProductPayload,
    db: DbClient = Depends(get_db_client),
    admin: dict = Depends(require_admin),
):
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None
    }
    if "prod_id" in changes:
        existing = db.find_one(PRODUCTS, where={"prod_id": changes["prod_id"]})
        if existing and existing["id"] != product_id:
            raise HTTPException(status_code=400, detail="Product ID already exists")
    product = db.update(PRODUCTS, product_id, changes)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"success": True, "message": "Product updated successfully", "product": product}
