"""A short demonstration session that writes a trace file to the working directory."""

from __future__ import annotations

import threading
import time
from collections.abc import Sequence

from lowprof.api import (
    emit_begin_event,
    emit_counter_event,
    emit_end_event,
    emit_endbegin_event,
    emit_flow_finish_event,
    emit_flow_start_event,
    profile_func,
    profiler_disable,
    profiler_enable,
    profiler_flush,
)

_SLEEP_SECONDS = 0.015


@profile_func
def some_sleeping_function() -> None:
    time.sleep(_SLEEP_SECONDS)


def _first_worker() -> None:
    emit_begin_event("thread1 sleeping")
    time.sleep(_SLEEP_SECONDS)
    emit_end_event("thread1 sleeping")
    emit_counter_event("some_resource", 2)


def _second_worker() -> None:
    emit_flow_finish_event("flow ... to actual thread2 start", 123)
    emit_counter_event("some_resource", 4)


def main(argv: Sequence[str] | None = None) -> int:
    profiler_enable()

    emit_counter_event("some_resource", 0)
    emit_begin_event("test part A")
    emit_counter_event("some_resource", 1)

    emit_begin_event("main thread is starting thread 1")
    t1 = threading.Thread(target=_first_worker)
    t1.start()
    emit_end_event("main thread is starting thread 1")

    emit_counter_event("some_resource", 3)
    emit_begin_event("main thread sleeping")
    time.sleep(_SLEEP_SECONDS)
    emit_end_event("main thread sleeping")
    emit_endbegin_event("test part A", "test part B")

    emit_flow_start_event("flow ... from thread2 create", 123)
    t2 = threading.Thread(target=_second_worker)
    t2.start()

    emit_counter_event("some_resource", 5)
    emit_begin_event("main thread waiting for threads 1 and 2")
    t1.join()
    t2.join()
    emit_end_event("main thread waiting for threads 1 and 2")
    emit_counter_event("some_resource", 6)

    emit_endbegin_event("test part B", "test part C")

    for _ in range(1000):
        emit_begin_event("loop iteration")
        emit_end_event("loop iteration")

    some_sleeping_function()

    emit_end_event("test part C")

    emit_counter_event("some_resource", 0)
    profiler_disable()
    profiler_flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())