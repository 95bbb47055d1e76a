"""
Performance timing for extraction calls.

The HV_DEBUG flag is read on every call, so enabling it through the CLI's
--debug option after import still turns timing on.
"""

import functools
import os
import sys
import time
from typing import Callable, Dict, ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")

# Most recent duration per function name, in milliseconds
last_timings: Dict[str, float] = {}


def timing_enabled() -> bool:
    return os.getenv("HV_DEBUG") == "1"


def timer(func: Callable[P, R]) -> Callable[P, R]:
    """
    Decorator that reports how long a call took when HV_DEBUG=1.

    Durations go to stderr and are kept in last_timings.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        if not timing_enabled():
            return func(*args, **kwargs)

        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            last_timings[func.__name__] = elapsed_ms
            print(f"[HV_DEBUG] {func.__name__}: {elapsed_ms:.2f}ms", file=sys.stderr)

    return wrapper
