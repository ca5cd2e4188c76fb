"""Epoch-millisecond clock used for stored timestamps and TTL checks."""

from collections.abc import Callable
from time import time
from typing import TypeAlias

Clock: TypeAlias = Callable[[], int]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time() * 1000)
