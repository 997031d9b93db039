"""Middleware for logging HTTP requests and responses."""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from common.core.request_context import RequestContext
from common.utils.utils import get_logger

logger = get_logger()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs request start, completion status and timing.
    Bodies are never logged: deposit bodies carry usernames and webhook bodies carry payment data.
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        client_host = request.client.host if request.client else "unknown"
        request_path = request.url.path
        request_method = request.method

        log_data = {
            "type": "request_started",
            "client_ip": client_host,
            "method": request_method,
            "path": request_path,
        }
        # GET traffic is liveness probes; keep it out of INFO
        if request_method == "GET":
            logger.debug(f"Request started: {request_method} {request_path}", **log_data)
        else:
            logger.info(f"Request started: {request_method} {request_path}", **log_data)

        start_time = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {request_method} {request_path}",
                type="request_failed",
                method=request_method,
                path=request_path,
                error=str(e),
                process_time_ms=int((time.perf_counter() - start_time) * 1000),
                exc_info=True,
            )
            raise

        response_log_data = {
            "type": "request_completed",
            "method": request_method,
            "path": request_path,
            "status_code": response.status_code,
            "process_time_ms": int((time.perf_counter() - start_time) * 1000),
        }
        if request_method == "GET" and 200 <= response.status_code < 300:
            logger.debug(f"Request completed: {request_method} {request_path} - {response.status_code}", **response_log_data)
        else:
            logger.info(f"Request completed: {request_method} {request_path} - {response.status_code}", **response_log_data)
        return response


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a fresh ``RequestContext`` for the lifetime of each request."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        with RequestContext.context() as request_context:
            request_context.endpoint = request.url.path
            return await call_next(request)
