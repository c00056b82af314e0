"""Structured logging setup and latency tracking."""
import inspect
import logging
import time
from functools import wraps
from typing import Callable, Optional

import structlog

from docqa import config


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure structlog on top of the stdlib logging module.

    Args:
        level: Log level name (default from config)
        fmt: "json" for machine-readable lines, anything else for console output
    """
    level = (level or config.LOG_LEVEL).upper()
    fmt = fmt or config.LOG_FORMAT

    logging.basicConfig(level=level, format="%(message)s")

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def log_latency(operation_name: str):
    """Log wall-clock latency and outcome of the decorated call."""

    def decorator(func: Callable):
        logger = structlog.get_logger(func.__module__)

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    "operation_failed",
                    operation=operation_name,
                    latency_ms=round((time.perf_counter() - start) * 1000, 2),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise
            logger.info(
                "operation_completed",
                operation=operation_name,
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return result

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    "operation_failed",
                    operation=operation_name,
                    latency_ms=round((time.perf_counter() - start) * 1000, 2),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise
            logger.info(
                "operation_completed",
                operation=operation_name,
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
