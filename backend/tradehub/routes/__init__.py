"""API routes."""

from .abn import router as abn_router
from .admin import router as admin_router
from .jobs import router as jobs_router
from .me import router as me_router
from .tenders import router as tenders_router

__all__ = [
    "abn_router",
    "admin_router",
    "jobs_router",
    "me_router",
    "tenders_router",
]
