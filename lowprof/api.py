"""Process-wide profiler: module-level emit functions and scoped helpers."""

from __future__ import annotations

import atexit
import functools
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TypeVar

from lowprof.engine import ProfilerEngine
from lowprof.events import EventBuffer

_F = TypeVar("_F", bound=Callable[..., object])

_engine: ProfilerEngine | None = None
_engine_lock = threading.Lock()


def get_engine() -> ProfilerEngine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    engine = _engine
    if engine is not None:
        return engine
    with _engine_lock:
        if _engine is None:
            _engine = ProfilerEngine()
            atexit.register(_engine.close)
        return _engine


def _active_buffer() -> EventBuffer | None:
    engine = get_engine()
    return engine.buffer() if engine.enabled else None


def profiler_enable() -> None:
    get_engine().enable()


def profiler_disable() -> None:
    get_engine().disable()


def profiler_flush(suffix: str | None = None) -> Path | None:
    """Write the collected events to a trace file in the working directory."""
    return get_engine().flush(suffix)


def emit_begin_event(name: str) -> None:
    buf = _active_buffer()
    if buf is not None:
        buf.begin(name)


def emit_end_event(name: str) -> None:
    buf = _active_buffer()
    if buf is not None:
        buf.end(name)


def emit_immediate_event(name: str) -> None:
    buf = _active_buffer()
    if buf is not None:
        buf.immediate(name)


def emit_endbegin_event(end_name: str, begin_name: str) -> None:
    """Close one region and open the next with a single clock read."""
    buf = _active_buffer()
    if buf is not None:
        buf.endbegin(end_name, begin_name)


def emit_begin_meta_event(name: str, metadata: int) -> None:
    buf = _active_buffer()
    if buf is not None:
        buf.begin_meta(name, metadata)


def emit_end_meta_event(name: str, metadata: int) -> None:
    buf = _active_buffer()
    if buf is not None:
        buf.end_meta(name, metadata)


def emit_immediate_meta_event(name: str, metadata: int) -> None:
    buf = _active_buffer()
    if buf is not None:
        buf.immediate_meta(name, metadata)


def emit_counter_event(name: str, count: int) -> None:
    buf = _active_buffer()
    if buf is not None:
        buf.counter(name, count)


def emit_flow_start_event(name: str, flow_id: int) -> None:
    buf = _active_buffer()
    if buf is not None:
        buf.flow_start(name, flow_id)


def emit_flow_finish_event(name: str, flow_id: int) -> None:
    buf = _active_buffer()
    if buf is not None:
        buf.flow_finish(name, flow_id)


@contextmanager
def scoped_profile(name: str) -> Iterator[None]:
    """Emit a begin event on entry and an end event on exit."""
    emit_begin_event(name)
    try:
        yield
    finally:
        emit_end_event(name)


@contextmanager
def meta_scoped_profile(name: str, meta: int) -> Iterator[None]:
    """Emit a begin event carrying metadata on entry and a plain end event on exit."""
    emit_begin_meta_event(name, meta)
    try:
        yield
    finally:
        emit_end_event(name)


def profile_func(func: _F) -> _F:
    """Decorate a function so every call is recorded as a region named after it."""
    name = f"{func.__module__}.{func.__qualname__}"

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with scoped_profile(name):
            return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]