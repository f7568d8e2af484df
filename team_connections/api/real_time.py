"""
Real-time communication endpoint.

Every browser tab opens one WebSocket here and speaks the session protocol
over it.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket

from ..config import get_config
from ..dependencies import get_websocket_services
from ..realtime.context import RealtimeServices
from ..realtime.websocket_handler import handle_websocket_connection

realtime_router = APIRouter(tags=["realtime"])


@realtime_router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket, services: Annotated[RealtimeServices, Depends(get_websocket_services)]
) -> None:
    """WebSocket endpoint for the session synchronization protocol."""
    config = get_config()
    await handle_websocket_connection(websocket, services, max_message_size=config.session.max_message_size)
