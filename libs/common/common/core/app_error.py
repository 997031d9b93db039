from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from common.utils.json_model import JsonModel


class ErrorDetails(JsonModel):
    scope: str
    code: str
    message: str
    # Server-side diagnostics only, never rendered to clients
    details: dict[str, Any] | None = None


class ErrorResponse(JsonModel):
    error: str
    code: str


class ErrorConfig(JsonModel):
    scope: str
    code: str
    default_message: str
    http_status: int | None = None
    retryable: bool = False

    def create(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        http_status: int | None = None,
        cause: BaseException | None = None,
        retryable: bool | None = None,
    ) -> AppException:
        app_error = AppError(
            details=ErrorDetails(
                scope=self.scope,
                code=self.code,
                message=message if message is not None else self.default_message,
                details=details,
            ),
            http_status=http_status if http_status is not None else self.http_status,
            retryable=self.retryable if retryable is None else retryable,
            cause=cause,
        )
        return AppException(app_error)

    def is_(self, error: BaseException) -> bool:
        return AppException.is_(error, self)


class Errors:
    class Generic:
        INVALID_INPUT = ErrorConfig(scope="generic", code="invalid_input", default_message="Invalid input", http_status=400)
        INTERNAL_ERROR = ErrorConfig(scope="generic", code="internal_error", default_message="Internal error", http_status=500)

    class Payment:
        INVALID_AMOUNT = ErrorConfig(
            scope="payment", code="invalid_amount", default_message="Invalid amount or user information.", http_status=400
        )
        INVALID_REQUEST = ErrorConfig(
            scope="payment", code="invalid_request", default_message="Invalid amount or user information.", http_status=400
        )
        CONFIGURATION_ERROR = ErrorConfig(
            scope="payment", code="configuration_error", default_message="Payment processing is not configured.", http_status=500
        )
        PROVIDER_REJECTED = ErrorConfig(
            scope="payment", code="provider_rejected", default_message="Could not create payment session.", http_status=500
        )
        PROVIDER_UNREACHABLE = ErrorConfig(
            scope="payment", code="provider_unreachable", default_message="Could not create payment session.", http_status=500, retryable=True
        )

    class Webhook:
        SIGNATURE_INVALID = ErrorConfig(scope="webhook", code="signature_invalid", default_message="Invalid signature", http_status=400)
        MALFORMED_PAYLOAD = ErrorConfig(scope="webhook", code="malformed_payload", default_message="Invalid payload", http_status=400)
        # The two below are acknowledged to the provider and reconciled by hand
        MALFORMED_EVENT = ErrorConfig(scope="webhook", code="malformed_event", default_message="Event could not be interpreted")
        UNATTRIBUTABLE_EVENT = ErrorConfig(scope="webhook", code="unattributable_event", default_message="Event has no username to credit")


class AppError(BaseModel):
    model_config = {"arbitrary_types_allowed": True}

    details: ErrorDetails = Field(..., description="Error details")
    http_status: int | None = Field(default=None, description="HTTP status code")
    retryable: bool = Field(default=False, description="Whether the error is retryable")
    cause: BaseException | None = Field(default=None, description="Underlying cause")

    @staticmethod
    def is_(error: BaseException, error_config: ErrorConfig) -> bool:
        return isinstance(error, AppError) and error.details.scope == error_config.scope and error.details.code == error_config.code


class AppException(Exception):
    """Exception wrapper for AppError that can be raised."""

    def __init__(self, app_error: AppError) -> None:
        self.app_error = app_error
        super().__init__(app_error.details.message)
        if app_error.cause is not None:
            self.__cause__ = app_error.cause

    @property
    def details(self) -> ErrorDetails:
        return self.app_error.details

    @property
    def http_status(self) -> int | None:
        return self.app_error.http_status

    @property
    def retryable(self) -> bool:
        return self.app_error.retryable

    @property
    def cause(self) -> BaseException | None:
        return self.app_error.cause

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.details.message, code=self.details.code)

    @staticmethod
    def is_any_of(error: BaseException, *errors: ErrorConfig) -> bool:
        return any(AppException.is_(error, e) for e in errors)

    @staticmethod
    def is_(error: BaseException, error_config: ErrorConfig) -> bool:
        if isinstance(error, AppException):
            return error.details.scope == error_config.scope and error.details.code == error_config.code
        return AppError.is_(error, error_config)
