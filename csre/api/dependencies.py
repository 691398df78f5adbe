"""
CSRE API Dependencies
=====================

FastAPI dependency injection for the engine context and settings.

The context is built once in the application lifespan and stored on
``app.state``; handlers receive it explicitly through ``Depends``.

Author: CSRE Team
Version: 1.0.0
"""

from fastapi import HTTPException, Request

from csre.config import Settings, get_settings
from csre.engine.context import EngineContext


def get_engine(request: Request) -> EngineContext:
    """Return the loaded engine context, or 503 while it is unavailable."""
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Model artifact not loaded")
    return engine


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()

