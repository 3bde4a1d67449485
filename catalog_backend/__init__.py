"""
Backend package for the equipment catalog website.

Provides a FastAPI application with a document-store abstraction for the
catalog (products, categories, posts, banners) and a filesystem media library
whose deletes are guarded by a cross-collection usage check.
"""

__version__ = "0.1.0"
