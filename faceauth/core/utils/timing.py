"""
Timing helpers for the authentication pipeline.
"""
import time
from contextlib import contextmanager
from typing import Any, Iterator

from faceauth.core.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def log_duration(operation: str, **context: Any) -> Iterator[None]:
    """Log how long the wrapped block took, in milliseconds.

    Works around awaited code as well, since only wall-clock time is measured.

    Args:
        operation: Name of the measured step
        **context: Extra key/value pairs for the log event
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            "Operation timing",
            operation=operation,
            duration_ms=round(duration_ms, 2),
            **context
        )
