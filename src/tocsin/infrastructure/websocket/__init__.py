"""
WebSocket infrastructure for Tocsin.
"""

from tocsin.infrastructure.websocket.hub import BroadcastHub

__all__ = ["BroadcastHub"]
