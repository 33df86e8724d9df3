# =============================================================================
# HOOKRUNNER - STRUCTURED LOGGING
# =============================================================================
"""
Structured Logging Module

Provides consistent, structured logging across all components.
Uses structlog's ProcessorFormatter on top of stdlib logging, so modules keep
using ``logging.getLogger(__name__)`` while their records go through the
structlog processor chain.

Features:
    - JSON or console output
    - Contextual information bound per delivery / synchronization
    - Sensitive data masking (secrets, tokens)
    - Optional rotating JSON log file
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from structlog.contextvars import bind_contextvars, merge_contextvars, unbind_contextvars


# =============================================================================
# SENSITIVE DATA MASKING
# =============================================================================

# Key fragments marking a value as a credential
SENSITIVE_KEYS = ("secret", "token", "authorization", "password")

MASK = "****"


def _is_sensitive(key: str) -> bool:
    return any(fragment in key.lower() for fragment in SENSITIVE_KEYS)


def _mask_value(value: Any) -> Any:
    """Hide a credential; long strings keep 4 chars at each end for recognition."""
    if value is None:
        return None
    if isinstance(value, str) and len(value) > 8:
        return f"{value[:4]}{MASK}{value[-4:]}"
    return MASK


def mask_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Copy of ``data`` with credential values masked, nested dicts included.

    Used for the resolved configuration dump and by the log processor.
    """
    return {
        key: _mask_value(value) if _is_sensitive(str(key))
        else mask_dict(value) if isinstance(value, dict)
        else value
        for key, value in data.items()
    }


def mask_sensitive_data(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Structlog processor masking credentials bound to a log event."""
    return mask_dict(event_dict)


# =============================================================================
# LOGGING SETUP
# =============================================================================


def _shared_processors(mask_sensitive: bool) -> list:
    processors: list = [
        merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if mask_sensitive:
        processors.append(mask_sensitive_data)
    return processors


def _formatter(renderer: Any, mask_sensitive: bool) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(mask_sensitive),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def setup_logging(
    level: str = "INFO",
    fmt: str = "text",
    log_file: Optional[str] = None,
    mask_sensitive: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        fmt: Console output format, ``"json"`` or ``"text"``.
        log_file: Optional log file; always written as JSON.
        mask_sensitive: Mask sensitive values in logs.
        max_bytes: Max file size before rotation.
        backup_count: Number of rotated files to keep.

    Returns:
        Root logger instance.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            *_shared_processors(mask_sensitive),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates on re-init
    root.handlers.clear()

    if fmt == "json":
        console_renderer = structlog.processors.JSONRenderer()
    else:
        console_renderer = structlog.dev.ConsoleRenderer(colors=False)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(numeric_level)
    console.setFormatter(_formatter(console_renderer, mask_sensitive))
    root.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            _formatter(structlog.processors.JSONRenderer(), mask_sensitive)
        )
        root.addHandler(file_handler)

    # Suppress noisy third-party loggers
    for name in ("urllib3", "aiohttp.access"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


# =============================================================================
# LOG CONTEXT MANAGER
# =============================================================================


class LogContext:
    """
    Context manager that binds key-value pairs to all logs emitted
    inside the block.

    Usage::

        with LogContext(repository="acme/widgets", reference="main"):
            logger.info("Cloning")
            # All logs include repository and reference
    """

    def __init__(self, **kwargs: Any):
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        unbind_contextvars(*self.context.keys())


@contextmanager
def log_context(**kwargs: Any):
    """Functional alias for :class:`LogContext`."""
    with LogContext(**kwargs) as ctx:
        yield ctx


__all__ = [
    # Setup
    "setup_logging",
    # Data masking
    "mask_sensitive_data",
    "mask_dict",
    # Context
    "LogContext",
    "log_context",
]
