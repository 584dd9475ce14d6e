"""Timing helpers for file-level transform pipelines."""

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import wraps
from typing import ParamSpec, TypeVar

from loguru import logger

P = ParamSpec("P")
R = TypeVar("R")


@contextmanager
def elapsed(label: str, level: str = "INFO") -> Iterator[None]:
    """Log how long the enclosed block took, even if it raises."""
    start_time = time.perf_counter()
    try:
        yield
    finally:
        logger.log(level, f"[PROFILE] {label} took {time.perf_counter() - start_time:.3f}s")


def timed(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator logging the execution time of a pipeline function at INFO level.

    Usage:
        @timed
        def image_transform(...):
            ...
    """

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with elapsed(func.__qualname__):
            return func(*args, **kwargs)

    return wrapper
