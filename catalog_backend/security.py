"""Password hashing and admin token helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from catalog_backend.config import get_settings
from catalog_backend.db import ADMINS, DbClient
from catalog_backend.dependencies import get_db_client

bearer = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash plain text password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain text password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(admin_id: str, username: str, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.admin_token_expire_minutes)
    )
    payload = {"sub": admin_id, "username": username, "exp": expire}
    return jwt.encode(payload, settings.admin_token_secret, algorithm=settings.admin_token_algorithm)


def decode_access_token(token: str) -> str:
    """Return the admin id carried by a valid token."""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.admin_token_secret, algorithms=[settings.admin_token_algorithm]
        )
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials") from exc
    admin_id = payload.get("sub")
    if not admin_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return admin_id


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: DbClient = Depends(get_db_client),
) -> dict:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    admin = db.get(ADMINS, decode_access_token(credentials.credentials))
    if admin is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin not found")
    return admin
