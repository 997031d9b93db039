from logging.config import dictConfig
from typing import Any

import structlog

from common.logging.std_logging_config import StdLoggingConfig, common_logger_config
from common.utils.utils import deep_merge


def setup_logging(logging_config: dict[str, Any] | None = None) -> None:
    """Route stdlib and structlog records through one queue-backed handler."""
    dictConfig(deep_merge(common_logger_config, logging_config or {}))

    structlog.configure(
        processors=StdLoggingConfig.structlog_processors,
        # Mirrors the ``logging.Logger`` API so both styles share handlers
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=StdLoggingConfig.logger_factory,
        cache_logger_on_first_use=True,
    )
