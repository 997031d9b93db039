from __future__ import annotations

from fastapi import FastAPI, Request, Response, status
from fastapi.exception_handlers import http_exception_handler as _http_exception_handler
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

from common.core.app_error import AppException, Errors
from common.utils.utils import get_logger

logger = get_logger()


def install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # pyright: ignore
        logger.warning("Validation error", path=request.url.path, errors=exc.errors())
        error = Errors.Generic.INVALID_INPUT.create()
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error.to_response().to_dict(mode="json"))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> Response:  # pyright: ignore
        # Only 5xx are server errors worth a stack trace
        if exc.status_code >= 500:
            logger.exception("HTTP error", path=request.url.path, exc_info=exc)
        else:
            logger.warning("HTTP client error", status_code=exc.status_code, detail=exc.detail, path=request.url.path)
        return await _http_exception_handler(request, exc)

    @app.exception_handler(AppException)
    async def app_error_exception_handler(request: Request, exc: AppException) -> JSONResponse:  # pyright: ignore
        return _app_error_response(request, exc)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # pyright: ignore
        if isinstance(exc, AppException):
            return _app_error_response(request, exc)
        logger.exception("Unhandled exception", method=request.method, path=request.url.path, exc_info=exc)
        error = Errors.Generic.INTERNAL_ERROR.create(cause=exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=error.to_response().to_dict(mode="json"))


def _app_error_response(request: Request, exc: AppException) -> JSONResponse:
    http_status = exc.http_status or status.HTTP_500_INTERNAL_SERVER_ERROR
    # Internal details go to the log only; clients get the generic message and code
    if http_status >= 500:
        logger.exception("App error", path=request.url.path, error=exc.details, exc_info=exc)
    else:
        logger.warning("App client error", path=request.url.path, error=exc.details)
    return JSONResponse(status_code=http_status, content=exc.to_response().to_dict(mode="json"))
