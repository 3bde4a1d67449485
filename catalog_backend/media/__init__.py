"""
Media library: uploaded assets, their sidecar metadata and the usage guard.
"""

from catalog_backend.media.assets import AssetStore
from catalog_backend.media.manager import ALL_FOLDERS, MediaItem, MediaManager, MediaPage
from catalog_backend.media.references import ReferenceIndex, UsageReport
from catalog_backend.media.sidecar import MediaMetadata, SidecarStore

__all__ = [
    "ALL_FOLDERS",
    "AssetStore",
    "MediaItem",
    "MediaManager",
    "MediaMetadata",
    "MediaPage",
    "ReferenceIndex",
    "SidecarStore",
    "UsageReport",
]
