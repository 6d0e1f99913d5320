"""Логирование (JSON через structlog).

Пакет сам логирование не настраивает: приложение вызывает
`llm_suite.configure_logging()` один раз при старте.
"""

import logging
import sys

import structlog

from llm_suite.settings import get_settings


def configure_logging(level: str | None = None) -> None:
    """Настраивает stdlib logging + structlog."""
    name = level or get_settings().log_level
    log_level = getattr(logging, name.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
