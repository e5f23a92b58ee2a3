"""
WebSocket endpoint with production logging.

All protocol handling lives in the BroadcastHub; this module only owns
the transport loop.
"""

import time

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from tocsin.di import Container
from tocsin.presentation.api.dependencies import get_container


def create_websocket_router(ws_path: str = "/ws") -> APIRouter:
    """
    Build the router serving the realtime endpoint at ``ws_path``.

    Args:
        ws_path: Configured WebSocket path

    Returns:
        APIRouter with one WebSocket route
    """
    router = APIRouter(tags=["websocket"])
    router.add_api_websocket_route(ws_path, websocket_endpoint)
    return router


async def websocket_endpoint(
    websocket: WebSocket,
    container: Container = Depends(get_container),
):
    """
    Realtime endpoint for report, analytics and notification events.

    Connections start unauthenticated and identify themselves in-band
    with USER_AUTH or ADMIN_AUTH. New connections are refused with
    1001 during graceful shutdown.

    Connection example:
        - ws://localhost:8080/ws
    """
    reporter = container.reporter

    if container.shutdown_manager.is_shutting_down():
        container.increment_stat("connections_refused")
        reporter.warning(
            "Connection rejected: server shutting down",
            context="WebSocket",
        )
        await websocket.close(
            code=status.WS_1001_GOING_AWAY,
            reason="Server is shutting down",
        )
        return

    await websocket.accept()

    hub = container.hub
    connection = await hub.connect(websocket)

    connection_start_time = time.time()
    frames_received = 0

    try:
        while True:
            message = await websocket.receive()

            if message["type"] == "websocket.disconnect":
                break

            raw = message.get("text")
            if raw is None:
                payload = message.get("bytes") or b""
                raw = payload.decode("utf-8", errors="replace")

            frames_received += 1
            await hub.handle_message(connection, raw)

    except WebSocketDisconnect:
        reporter.info(
            f"Client disconnected [conn={connection.id}]",
            context="WebSocket",
        )

    except Exception as e:
        if not connection.is_closed():
            reporter.error(
                f"WebSocket connection error [conn={connection.id}]: "
                f"{type(e).__name__}: {str(e)}",
                context="WebSocket",
            )

    finally:
        hub.disconnect(connection)

        reporter.debug(
            f"Connection finished [conn={connection.id}] "
            f"[duration={time.time() - connection_start_time:.2f}s] "
            f"[frames={frames_received}]",
            context="WebSocket",
            verbose_level=2,
        )
