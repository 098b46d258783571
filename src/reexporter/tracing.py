"""
Timing decorator for the top-level pipeline operations.
"""

import functools
import time
from typing import Any, Callable

from reexporter.logging_config import logger


def trace(func: Callable) -> Callable:
    """
    Decorator that logs function entry, exit, and execution time.

    Usage:
        @trace
        def generate(self):
            ...

    Exceptions are logged with the elapsed time and re-raised unchanged.
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        func_name = func.__qualname__
        logger.debug(f"TRACE_ENTER: {func_name}")
        start_time = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.debug(
                f"TRACE_EXIT: {func_name} failed after {duration:.4f}s with {type(e).__name__}"
            )
            raise

        duration = time.perf_counter() - start_time
        logger.debug(f"TRACE_EXIT: {func_name} completed in {duration:.4f}s")
        return result

    return wrapper
