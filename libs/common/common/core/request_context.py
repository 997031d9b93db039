from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4

from pydantic import Field

from common.utils import ContextVarManager, JsonModel, use_context_var


class RequestContext(JsonModel):
    """Per-request values attached to every log line emitted while handling the request."""

    request_id: str = Field(default_factory=lambda: uuid4().hex)
    endpoint: str | None = None
    username: str | None = None
    event_id: str | None = None

    @staticmethod
    def get_or_none() -> RequestContext | None:
        return _context_var.get(None)

    @staticmethod
    def context() -> ContextVarManager[RequestContext]:
        return use_context_var(_context_var, RequestContext())

    @staticmethod
    def update(**values: str | None) -> None:
        """Set fields on the active context; a no-op outside a request."""
        request_context = _context_var.get(None)
        if request_context is None:
            return
        for key, value in values.items():
            setattr(request_context, key, value)


_context_var: ContextVar[RequestContext] = ContextVar("request_context")
