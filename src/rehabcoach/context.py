# src/rehabcoach/context.py
"""
Scoped access to the engine of the current coaching session.

Collaborators that are handed no engine explicitly (display widgets,
exporters) look it up with get_engine() inside a coaching_session block.
Calling it anywhere else is a programming error and raises immediately.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

from .engine import MetricsEngine
from .exceptions import SessionContextError

_current_engine: ContextVar[Optional[MetricsEngine]] = ContextVar("rehabcoach_engine", default=None)


@contextmanager
def coaching_session(engine: MetricsEngine) -> Iterator[MetricsEngine]:
    token = _current_engine.set(engine)
    try:
        yield engine
    finally:
        _current_engine.reset(token)


def get_engine() -> MetricsEngine:
    engine = _current_engine.get()
    if engine is None:
        raise SessionContextError("get_engine() must be called inside a coaching_session() block")
    return engine
