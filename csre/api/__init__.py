"""
CSRE API Package
================

FastAPI REST API exposing the inference engine.

Author: CSRE Team
Version: 1.0.0
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
