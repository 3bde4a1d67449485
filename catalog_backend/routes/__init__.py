"""
HTTP routes for the catalog backend API.
"""

from __future__ import annotations

from fastapi import APIRouter

from catalog_backend.routes import admin, banners, categories, contact, media, posts, products

router = APIRouter()
for module in (media, admin, categories, products, posts, banners, contact):
    router.include_router(module.router)

__all__ = ["router"]
