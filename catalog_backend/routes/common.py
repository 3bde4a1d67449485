"""
Helpers shared by the route modules.
"""

from __future__ import annotations

from typing import Optional, Sequence

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from catalog_backend.media import MediaManager


async def read_uploads(files: Sequence[UploadFile]) -> list[tuple[Optional[str], bytes]]:
    payloads = []
    for upload in files:
        try:
            payloads.append((upload.filename, await upload.read()))
        finally:
            await upload.close()
    return payloads


async def store_images(
    media: MediaManager, folder: str, files: Sequence[UploadFile]
) -> list[str]:
    """Upload entity images through the media library; returns stored paths."""
    names = await run_in_threadpool(media.upload, folder, await read_uploads(files))
    return [media.stored_path(folder, name) for name in names]


async def store_image(
    media: MediaManager, folder: str, upload: Optional[UploadFile]
) -> Optional[str]:
    if upload is None or not upload.filename:
        return None
    return (await store_images(media, folder, [upload]))[0]
