"""
Routers Package
===============

Routers direct incoming requests to the right place.
"""

from .ingest import router as ingest_router, set_pipeline, get_pipeline

__all__ = [
    "ingest_router",
    "set_pipeline",
    "get_pipeline",
]
