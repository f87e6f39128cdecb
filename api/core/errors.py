"""
Error taxonomy shared by every endpoint.

Internally each failure keeps its own class so callers and tests can tell an
authorization denial from a missing row. Only `status_code` and `message`
ever reach the client.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Coroutine

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadInput(ApiError):
    status_code = 400


class Unauthenticated(ApiError):
    status_code = 403


class Forbidden(ApiError):
    # Authorization denials are reported as "not found" to clients.
    status_code = 404


class NotFound(ApiError):
    status_code = 404


class StoreFailure(ApiError):
    status_code = 500


class ErrorBoundaryRoute(APIRoute):
    """
    Route class that lets nothing but an `ApiError` (or a framework error
    FastAPI already knows how to answer) escape an endpoint.
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()
        endpoint_name = self.name

        async def boundary(request: Request) -> Response:
            try:
                return await handler(request)
            except (ApiError, HTTPException, RequestValidationError):
                raise
            except Exception as exc:
                logger.exception("unhandled_error endpoint=%s path=%s", endpoint_name, request.url.path)
                raise StoreFailure(str(exc) or exc.__class__.__name__) from exc

        return boundary
