"""Logging for the bakery back office.

Handlers live on the standard library root logger: stdout, ``logs/bakery.log``
and ``logs/bakery_error.log`` (errors only), both rotated at 10 MB. structlog
sits on top and renders JSON in production/staging, coloured console output
elsewhere.

Ledger and order events are logged as key/value pairs, e.g.::

    logger.info("payment_recorded", order_id=..., amount=12.5)
"""

import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

_LEVELS_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
_JSON_ENVS = ("production", "staging")
_QUIET_LOGGERS = ("protean", "urllib3", "asyncio", "uvicorn.access")


@dataclass(frozen=True)
class LogSettings:
    environment: str
    level: str
    directory: Path = Path("logs")
    max_bytes: int = 10 * 1024 * 1024
    backups: int = 5
    quiet: tuple[str, ...] = field(default=_QUIET_LOGGERS)

    @classmethod
    def from_env(cls) -> "LogSettings":
        environment = (
            os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development"
        ).lower()
        level = os.getenv("LOG_LEVEL") or _LEVELS_BY_ENV.get(environment, "INFO")
        return cls(environment=environment, level=level.upper())

    @property
    def renders_json(self) -> bool:
        return self.environment in _JSON_ENVS


def _file_handler(settings: LogSettings, filename: str, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        settings.directory / filename,
        maxBytes=settings.max_bytes,
        backupCount=settings.backups,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def _install_handlers(settings: LogSettings) -> None:
    settings.directory.mkdir(exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(settings.level)

    root = logging.getLogger()
    root.setLevel(settings.level)
    root.handlers = [
        console,
        _file_handler(settings, "bakery.log", settings.level),
        _file_handler(settings, "bakery_error.log", logging.ERROR),
    ]

    for name in settings.quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


def _renderer(settings: LogSettings):
    if settings.renders_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=2),
    )


def _configure_structlog(settings: LogSettings) -> None:
    callsite = structlog.processors.CallsiteParameterAdder(
        parameters=[
            structlog.processors.CallsiteParameter.MODULE,
            structlog.processors.CallsiteParameter.FUNC_NAME,
            structlog.processors.CallsiteParameter.LINENO,
        ]
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            callsite,
            _renderer(settings),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(settings: LogSettings | None = None) -> LogSettings:
    settings = settings or LogSettings.from_env()
    _install_handlers(settings)
    _configure_structlog(settings)
    return settings


def bind_request_context(**values: Any) -> None:
    """Attach request-scoped values (path, staff id) to every log line that follows."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
