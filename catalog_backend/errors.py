"""
Domain errors raised by the media library and mapped to HTTP responses in app.py.
"""

from __future__ import annotations

from typing import Optional


class MediaError(Exception):
    """Base class for media library failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(MediaError):
    status_code = 404


class InvalidPathError(MediaError):
    status_code = 400


class ConflictError(MediaError):
    """Delete refused because catalog entities still reference the asset."""

    status_code = 409

    def __init__(self, message: str, usage: Optional[dict] = None):
        super().__init__(message)
        self.usage = usage or {}


class UpstreamError(MediaError):
    """Filesystem or document-store operation failed."""

    status_code = 502
