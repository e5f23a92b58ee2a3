"""
Schemas for the statistics endpoint.
"""

from typing import Dict

from pydantic import BaseModel, Field


class StatsResponse(BaseModel):
    """
    Runtime statistics response schema.
    """

    uptime_seconds: float = Field(..., description="Server uptime in seconds")
    live_connections: int = Field(..., description="Open WebSocket connections")
    registered_clients: int = Field(..., description="Registry entries")
    admin_connections: int = Field(..., description="Admin connections")
    events_published: int = Field(..., description="Accepted POST /publish calls")
    events_published_by_type: Dict[str, int] = Field(default_factory=dict)
    publish_rejections: int = Field(..., description="POST /publish calls with a bad key")
    connections_refused: int = Field(
        ..., description="WebSockets refused during shutdown"
    )
    shutting_down: bool = False
