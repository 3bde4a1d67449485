"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from catalog_backend.config import Settings, get_settings
from catalog_backend.db import DbClient, InMemoryDbClient, PostgresDbClient
from catalog_backend.mailer import ContactMailer
from catalog_backend.media import AssetStore, MediaManager, ReferenceIndex, SidecarStore

_db_client: DbClient | None = None
_media_manager: MediaManager | None = None
_mailer: ContactMailer | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton document store so catalog state persists across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = PostgresDbClient(settings.database_url)
    return _db_client


def build_media_manager(settings: Settings, db: DbClient) -> MediaManager:
    return MediaManager(
        AssetStore(
            settings.upload_root,
            settings.media_folders,
            hidden=(settings.sidecar_filename,),
        ),
        SidecarStore(settings.upload_root, settings.sidecar_filename),
        ReferenceIndex(db, base=settings.upload_url_base),
        url_base=settings.upload_url_base,
        api_prefix=settings.api_prefix,
        page_size=settings.media_page_size,
    )


def get_media_manager() -> MediaManager:
    global _media_manager
    if _media_manager:
        return _media_manager
    _media_manager = build_media_manager(get_settings(), get_db_client())
    return _media_manager


def get_mailer() -> ContactMailer:
    global _mailer
    if _mailer:
        return _mailer
    _mailer = ContactMailer.from_settings(get_settings())
    return _mailer
