"""Small helpers shared across test modules."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timedelta


class MutableClock:
    """Callable clock for services that accept ``clock=``; tests move it by hand."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@contextmanager
def not_raises(exception: type[BaseException]):
    """Fail the test with a readable message if ``exception`` escapes the block."""
    try:
        yield
    except exception as exc:  # pragma: no cover
        raise AssertionError(f"Unexpected {type(exc).__name__}: {exc}") from exc
