"""
HTTP exception handlers.

Translate session-core exceptions raised inside HTTP endpoints into the
standard error body from ``error_types.create_standard_error_response``.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .error_types import ErrorType, create_standard_error_response
from .exceptions import TeamConnectionsError

STATUS_CODE_MAPPINGS = {
    ErrorType.SESSION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorType.MISSING_SESSION_ID: status.HTTP_400_BAD_REQUEST,
    ErrorType.UNAUTHORIZED_ACTION: status.HTTP_403_FORBIDDEN,
    ErrorType.INVALID_FORMAT: status.HTTP_400_BAD_REQUEST,
}


async def team_connections_error_handler(request: Request, exc: TeamConnectionsError) -> JSONResponse:
    status_code = STATUS_CODE_MAPPINGS.get(exc.error_type, status.HTTP_400_BAD_REQUEST)
    content = create_standard_error_response(exc.error_type, exc.message, exc.user_friendly, exc.details)
    return JSONResponse(status_code=status_code, content=content)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TeamConnectionsError, team_connections_error_handler)
