"""
Shared admin credential: seed, login and account update.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from catalog_backend.config import get_settings
from catalog_backend.db import ADMINS, DbClient
from catalog_backend.dependencies import get_db_client
from catalog_backend.schemas import (
    AdminInfo,
    AdminUpdateRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
)
from catalog_backend.security import (
    create_access_token,
    hash_password,
    require_admin,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: DbClient = Depends(get_db_client)):
    logger.info("Login request for %s", payload.username)
    admin = db.find_one(ADMINS, where={"username": payload.username})
    if not admin:
        raise HTTPException(status_code=400, detail="Invalid username")
    if not verify_password(payload.password, admin.get("password_hash", "")):
        raise HTTPException(status_code=400, detail="Invalid password")
    return LoginResponse(
        message="Login successful",
        admin=AdminInfo(username=admin["username"], email=admin.get("email", "")),
        access_token=create_access_token(admin["id"], admin["username"]),
    )


@router.post("/seed", response_model=MessageResponse, status_code=201)
def seed_admin(db: DbClient = Depends(get_db_client)):
    settings = get_settings()
    if db.find_one(ADMINS, where={"username": settings.admin_seed_username}):
        raise HTTPException(status_code=400, detail="Admin already exists")
    db.insert(
        ADMINS,
        {
            "username": settings.admin_seed_username,
            "email": settings.admin_seed_email,
            "password_hash": hash_password(settings.admin_seed_password),
        },
    )
    return MessageResponse(message="Admin created successfully")


@router.post("/update", response_model=MessageResponse)
def update_admin(
    payload: AdminUpdateRequest,
    db: DbClient = Depends(get_db_client),
    current: dict = Depends(require_admin),
):
    if not payload.currentUsername:
        raise HTTPException(status_code=400, detail="Current username required")
    admin = db.find_one(ADMINS, where={"username": payload.currentUsername})
    if not admin:
        raise HTTPException(status_code=404, detail="Admin not found")
    if payload.newUsername and payload.newUsername != admin["username"]:
        if db.find_one(ADMINS, where={"username": payload.newUsername}):
            raise HTTPException(status_code=400, detail="Username already taken")

    changes: dict = {}
    if payload.newUsername:
        changes["username"] = payload.newUsername
    if payload.newPassword:
        changes["password_hash"] = hash_password(payload.newPassword)
    if changes:
        db.update(ADMINS, admin["id"], changes)
    return MessageResponse(message="Account updated successfully")
