"""
Pydantic schemas for the catalog backend.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class MediaMetaPayload(BaseModel):
    title: Optional[str] = None
    alt: Optional[str] = None
    caption: Optional[str] = None
    description: Optional[str] = None


class MediaMetaResponse(BaseModel):
    title: str
    alt: str
    caption: str
    description: str
    favorite: bool


class MediaItemResponse(BaseModel):
    name: str
    folder: str
    url: str
    download_url: str
    meta: MediaMetaResponse


class MediaListResponse(BaseModel):
    total: int
    page: int
    limit: int
    items: list[MediaItemResponse]


class MediaUploadResponse(BaseModel):
    ok: bool = True
    folder: str
    files: list[str]


class MediaMetaUpdateResponse(BaseModel):
    ok: bool = True
    meta: MediaMetaResponse


class FavoritePayload(BaseModel):
    favorite: bool


class UsageResponse(BaseModel):
    folder: str
    file: str
    path: str
    in_use: bool
    complete: bool
    failed_lookups: list[str]
    products: list[dict]
    product_images: list[dict]
    categories: list[dict]
    posts: list[dict]
    banners: list[dict]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class LoginRequest(BaseModel):
    username: str
    password: str


class AdminInfo(BaseModel):
    username: str
    email: str


class LoginResponse(BaseModel):
    success: bool = True
    message: str
    admin: AdminInfo
    access_token: str
    token_type: str = "bearer"


class AdminUpdateRequest(BaseModel):
    currentUsername: Optional[str] = None
    newUsername: Optional[str] = None
    newPassword: Optional[str] = None


class ProductInfoEntry(BaseModel):
    key: str = ""
    value: str = ""


class ProductPayload(BaseModel):
    prod_id: Optional[str] = None
    product_name: Optional[str] = None
    CAT_ID: Optional[str] = None
    description: Optional[str] = None
    product_info: list[ProductInfoEntry] = Field(default_factory=list)


class ProductSearchRequest(BaseModel):
    product_name: Optional[str] = None
    CAT_ID: Optional[str] = None


class CategoryFilterRequest(BaseModel):
    CAT_ID: Optional[str] = None


class CategorySearchRequest(BaseModel):
    category_name: str = ""


class IdRequest(BaseModel):
    id: Optional[str] = None


class ReorderRequest(BaseModel):
    order: list[str]


class ContactRequest(BaseModel):
    name: str = Field(..., max_length=200)
    email: EmailStr
    phone: str = Field(default="", max_length=50)
    message: str = Field(..., max_length=5000)
    product_name: Optional[str] = None
    prod_id: Optional[str] = None


class ContactResponse(BaseModel):
    success: bool
    message: str
