"""
Dependency providers for the HTTP and WebSocket endpoints.

The session core lives on ``app.state`` for the lifetime of the application;
endpoints reach it only through these functions.
"""

from typing import Annotated

from fastapi import Depends, Request, WebSocket
from starlette.requests import HTTPConnection

from .realtime.context import RealtimeServices
from .services.session_service import SessionService


def get_realtime_services(connection: HTTPConnection) -> RealtimeServices:
    """
    Get the services bundle created by the application lifespan.

    Raises:
        RuntimeError: If the lifespan has not run
    """
    services = getattr(connection.app.state, "realtime", None)
    if services is None:
        raise RuntimeError("Realtime services not found in app.state - ensure the lifespan has started")
    return services


def get_session_service(request: Request) -> SessionService:
    return get_realtime_services(request).session_service


def get_websocket_services(websocket: WebSocket) -> RealtimeServices:
    return get_realtime_services(websocket)


RealtimeServicesDep = Annotated[RealtimeServices, Depends(get_realtime_services)]
SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
