from __future__ import annotations

import atexit
import logging
import os
import sys
from datetime import datetime
from enum import Enum
from logging import Filter, Handler, LogRecord
from logging.handlers import QueueHandler, QueueListener
from queue import Queue
from typing import Any, cast

import structlog
from pydantic import BaseModel
from structlog.typing import EventDict, Processor, WrappedLogger

from common.core.request_context import RequestContext
from common.utils import encode_json, is_dict

# Never let credentials reach a log sink, even when passed as structured context
_REDACTED_KEYS = {"api_key", "authorization", "webhook_secret", "signature", "secret"}
_REDACTED = "***"

_active_handler_name = "standard"


def _should_use_json_logging() -> bool:
    """Use JSON logs outside local/dev, while allowing opt-in locally via flag."""

    app_env = os.getenv("APP_ENV", "local").lower()
    if app_env not in ("development", "local", "test", "testing"):
        return True
    return os.getenv("LOG_JSON_FORMAT", "").lower() in {"true", "1", "t", "yes"}


def _get_formatter_name() -> str:
    return "json" if _should_use_json_logging() else "plain"


def _get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


class LoggingQueueListener(QueueListener):
    """``QueueListener`` that starts on creation and stops at interpreter exit."""

    def __init__(self, queue: Queue[LogRecord], *handlers: Handler, respect_handler_level: bool = False) -> None:
        super().__init__(queue, *handlers, respect_handler_level=respect_handler_level)
        self.start()
        _ = atexit.register(self.stop)


def _process_values(
    _logger: WrappedLogger,
    _name: str,
    event_dict: EventDict,
) -> EventDict:
    """Attach the request context, redact secrets and flatten pydantic models and enums."""

    request_context = RequestContext.get_or_none()
    if request_context is not None:
        event_dict["requestContext"] = request_context.to_dict(mode="json")

    for key, value in list(event_dict.items()):
        _process_value(event_dict, key, value)

    return event_dict


def _process_value(event_dict: dict[str, Any], key: str, value: Any) -> None:
    if value is None:
        event_dict.pop(key, None)
        return

    if key.lower() in _REDACTED_KEYS:
        event_dict[key] = _REDACTED
        return

    processed_value = value
    if isinstance(value, BaseModel):
        processed_value = value.model_dump(exclude_none=True, by_alias=True, mode="json")
    elif isinstance(value, Enum):
        processed_value = value.value

    if is_dict(processed_value):
        processed_value = dict(processed_value)
        for k, v in list(processed_value.items()):
            _process_value(processed_value, k, v)

    event_dict[key] = processed_value


def json_serializer(value: EventDict, **_: Any) -> str:
    return encode_json(value).decode("utf-8")


class NoHealthFilter(Filter):
    def filter(self, record: LogRecord) -> bool:
        message = record.getMessage()
        return "GET /health" not in message


def _ensure_event_dict(_logger: WrappedLogger, _name: str, event_dict: Any) -> EventDict:
    """Wrap pre-formatted stdlib messages in an event dict."""
    if isinstance(event_dict, dict):
        return cast(EventDict, event_dict)
    return {"event": "" if event_dict is None else str(event_dict)}


def _filter_console_fields(_logger: WrappedLogger, _name: str, event_dict: EventDict) -> EventDict:
    """Drop metadata that only clutters console output."""
    for field in ("filename", "func_name", "lineno", "pathname", "module", "process", "thread", "thread_name", "process_name", "color_message", "message"):
        event_dict.pop(field, None)
    return event_dict


_LEVEL_COLORS = {
    "DEBUG": "\033[90m",
    "INFO": "\033[92m",
    "WARNING": "\033[93m",
    "ERROR": "\033[91m",
    "CRITICAL": "\033[1m\033[91m",
}


def _human_readable_renderer(_logger: WrappedLogger, _name: str, event_dict: EventDict) -> str:
    """Render ``HH:MM:SS [level] logger message (key=value, ...)``, with colors on a TTY."""

    use_colors = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
    reset = "\033[0m" if use_colors else ""
    gray = "\033[90m" if use_colors else ""
    cyan = "\033[96m" if use_colors else ""

    level_str = str(event_dict.pop("level", "info")).upper()
    level_color = _LEVEL_COLORS.get(level_str, "") if use_colors else ""
    logger_name = str(event_dict.pop("logger", ""))
    event = str(event_dict.pop("event", ""))
    timestamp = str(event_dict.pop("timestamp", ""))
    exception = event_dict.pop("exception", None)

    short_time = timestamp
    if timestamp:
        try:
            short_time = datetime.fromisoformat(timestamp.replace("Z", "+00:00")).strftime("%H:%M:%S")
        except ValueError:
            pass

    parts: list[str] = []
    if short_time:
        parts.append(f"{gray}{short_time}{reset}")
    parts.append(f"{level_color}[{level_str:<5}]{reset}")
    if logger_name:
        parts.append(f"{cyan}{logger_name[-20:]:<20}{reset}")
    if event:
        parts.append(event)

    extra_parts: list[str] = []
    for key, value in event_dict.items():
        value_str = encode_json(value).decode("utf-8") if isinstance(value, dict | list) else str(value)
        extra_parts.append(f"{key}={value_str}")

    result = " ".join(parts)
    if extra_parts:
        result += f" {gray}({', '.join(extra_parts)}){reset}"
    if exception:
        result += f"\n{level_color}{exception}{reset}"
    return result


class SafeProcessorFormatter(structlog.stdlib.ProcessorFormatter):
    """ProcessorFormatter that tolerates non-dict ``record.msg`` from stdlib loggers."""

    def format(self, record: LogRecord) -> str:
        if not isinstance(record.msg, dict):
            record.msg = {"event": record.getMessage()}
            record.args = ()
        return super().format(record)


class StdLoggingConfig:
    foreign_pre_chain_processors: list[Processor] = [
        _ensure_event_dict,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _process_values,
    ]

    structlog_processors: list[Processor] = [*foreign_pre_chain_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter]

    # Compact JSON, one entry per line, for log shippers
    json_renderer: list[Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(sort_keys=True, serializer=json_serializer),
    ]

    console_renderer: list[Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        structlog.processors.format_exc_info,
        _filter_console_fields,
        _human_readable_renderer,
    ]

    formatters = {
        "json": {
            "()": SafeProcessorFormatter,
            "processors": json_renderer,
            "foreign_pre_chain": foreign_pre_chain_processors,
        },
        "plain": {
            "()": SafeProcessorFormatter,
            "processors": console_renderer,
            "foreign_pre_chain": foreign_pre_chain_processors,
        },
    }

    filters = {
        "no_health": {
            "()": NoHealthFilter,
        },
    }

    logger_factory = structlog.stdlib.LoggerFactory()

    handlers: dict[str, Any] = {}


def _get_handlers() -> dict[str, Any]:
    """Console handler behind a queue so request handlers never block on stdout."""
    level = _get_log_level()
    global _active_handler_name
    _active_handler_name = "standard"
    return {
        "console": {
            "class": logging.StreamHandler,
            "level": level,
            "stream": sys.stdout,
            "formatter": _get_formatter_name(),
            "filters": ["no_health"],
        },
        "standard": {
            "class": QueueHandler,
            "level": level,
            "listener": LoggingQueueListener,
            "handlers": ["console"],
        },
    }


StdLoggingConfig.handlers = _get_handlers()


common_logger_config: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": StdLoggingConfig.formatters,
    "handlers": StdLoggingConfig.handlers,
    "filters": StdLoggingConfig.filters,
    "root": {
        "handlers": [_active_handler_name],
        "level": _get_log_level(),
    },
    "loggers": {
        "httpx": {"handlers": [_active_handler_name], "propagate": False, "level": "WARNING"},
        "httpcore": {"handlers": [_active_handler_name], "propagate": False, "level": "WARNING"},
        "sqlalchemy.engine": {"handlers": [_active_handler_name], "propagate": False, "level": "WARNING"},
        "stripe": {"handlers": [_active_handler_name], "propagate": False, "level": "WARNING"},
        "uvicorn": {"handlers": [_active_handler_name], "propagate": False, "level": "INFO"},
        "uvicorn.error": {"handlers": [_active_handler_name], "propagate": False, "level": "INFO"},
        "uvicorn.access": {"handlers": [_active_handler_name], "propagate": False, "level": "WARNING"},
    },
}
