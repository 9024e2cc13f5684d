"""Decorator utilities for cross-cutting concerns."""
import functools
import logging
import time
from typing import Any, Callable, TypeVar, cast

F = TypeVar('F', bound=Callable[..., Any])


def log_execution_time(func: F) -> F:
    """Log how long each call to ``func`` takes, on the logger of ``func``'s module.

    Used on the full-bucket scans, whose cost grows with the number of stored objects.
    """
    func_logger = logging.getLogger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            func_logger.error(f"{func.__qualname__} failed after {time.perf_counter() - started:.2f}s: {e}")
            raise
        func_logger.info(f"{func.__qualname__} completed in {time.perf_counter() - started:.2f}s")
        return result
    return cast(F, wrapper)
