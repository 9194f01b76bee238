"""structlog setup.

All events pass through one processor chain whichever handler renders them:
request context merge, app identity, credential masking, then level, logger
name and timestamp. The console renders JSON or the dev layout according to
``log_format``; the optional log file always gets JSON lines.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


if TYPE_CHECKING:
    from threadboard.config.settings import Settings


SENSITIVE_KEYS = frozenset(
    {
        "password",
        "passwd",
        "secret",
        "token",
        "api_key",
        "apikey",
        "authorization",
        "credentials",
    }
)

# Characters left visible at each end of a masked value
_VISIBLE_EDGE = 2

_QUIET_LOGGERS = ("uvicorn.access", "cassandra", "httpx", "httpcore")


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_KEYS)


def mask_value(key: str, value: Any) -> Any:
    """Hide a credential-looking value; nested dicts are walked key by key."""
    if isinstance(value, dict):
        return {k: mask_value(k, v) for k, v in value.items()}
    if not isinstance(value, str) or not _is_sensitive(key):
        return value
    if len(value) <= 2 * _VISIBLE_EDGE:
        return "***"
    hidden = "*" * (len(value) - 2 * _VISIBLE_EDGE)
    return f"{value[:_VISIBLE_EDGE]}{hidden}{value[-_VISIBLE_EDGE:]}"


def mask_sensitive(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    return {key: mask_value(key, value) for key, value in event_dict.items()}


def app_identity(settings: "Settings") -> Processor:
    """Processor stamping each event with the app name, version and environment."""
    identity = {
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }

    def add_identity(
        logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.update(identity)
        return event_dict

    return add_identity


def build_processors(settings: "Settings") -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        app_identity(settings),
        mask_sensitive,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if settings.log_include_caller_info:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            )
        )
    return processors


def _console_renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def _attach(
    handler: logging.Handler,
    renderer: Processor,
    pre_chain: list[Processor],
    level: int,
) -> None:
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer, foreign_pre_chain=pre_chain
        )
    )
    logging.getLogger().addHandler(handler)


def configure_structlog(
    settings: "Settings",
    log_dir: Path | str | None = None,
) -> None:
    """Route structlog and stdlib logging through the shared chain.

    Args:
        settings: Application settings.
        log_dir: Directory for the rotating JSON log file. No file when None.
    """
    level = logging.getLevelName(settings.log_level)
    processors = build_processors(settings)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    _attach(
        logging.StreamHandler(sys.stdout),
        _console_renderer(settings.log_format),
        processors,
        level,
    )

    if log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        _attach(
            RotatingFileHandler(
                filename=str(directory / f"{settings.app_name}.log"),
                maxBytes=settings.log_file_max_bytes,
                backupCount=settings.log_file_backup_count,
                encoding="utf-8",
            ),
            structlog.processors.JSONRenderer(),
            processors,
            level,
        )

    structlog.configure(
        processors=[
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
