"""
Routes package for the lifecycle engine API.
Import all routers here for use in main.py.
"""

from lifecycle_engine.routes.achievements import router as achievements_router
from lifecycle_engine.routes.workflow import router as workflow_router
from lifecycle_engine.routes.cards import router as cards_router

__all__ = [
    "achievements_router",
    "workflow_router",
    "cards_router",
]
