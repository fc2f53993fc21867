"""Reusable decorators for training utilities."""

import functools
import logging
import time
from typing import Callable


def measure_time(func: Callable) -> Callable:
    """Log wall-clock time of ``func`` on the logger of the module defining it."""
    log = logging.getLogger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        # also reached when training raises
        finally:
            elapsed = time.perf_counter() - start
            log.info("%s finished after %.3f s", func.__qualname__, elapsed)

    return wrapper
