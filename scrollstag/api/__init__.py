"""ScrollStag preview API - mountable FastAPI application."""

from .app import create_app
from .hero import router as hero_router

__all__ = ["create_app", "hero_router"]
