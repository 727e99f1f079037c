import logging
import time
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from cmr_broker.clients import TOKEN_HEADER

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"
SESSION_ID_HEADER = "X-Session-Id"
SESSION_COOKIE = "broker_session"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware to copy the caller's token, user and session onto
    `request.state` and log how long each request took.

    Authentication happens upstream of the broker; these values are taken
    as given.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request.state.token = request.headers.get(TOKEN_HEADER)
        request.state.user_id = request.headers.get(USER_ID_HEADER)
        request.state.session_id = request.headers.get(
            SESSION_ID_HEADER
        ) or request.cookies.get(SESSION_COOKIE)

        start = time.perf_counter()
        try:
            return await call_next(request)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "%s %s completed in %.1fms", request.method, request.url.path, elapsed_ms
            )
