"""
API routes for Tocsin.
"""

from tocsin.presentation.api.routes.health import router as health_router
from tocsin.presentation.api.routes.publish import router as publish_router
from tocsin.presentation.api.routes.websocket import create_websocket_router

__all__ = ["create_websocket_router", "health_router", "publish_router"]
