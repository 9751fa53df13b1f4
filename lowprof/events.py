"""Per-thread event records and the buffer that collects them."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable

BUFFER_CAPACITY = 0x400000
"""Number of events a single buffer can hold before it must be drained."""

_U64_MASK = (1 << 64) - 1


class EventType(IntEnum):
    """Kinds of recorded events."""

    CALL_BEGIN = 0
    CALL_END = 1
    CALL_BEGIN_META = 2
    CALL_END_META = 3
    COUNTER_INT = 4
    FLOW_START = 5
    FLOW_FINISH = 6


@dataclass(frozen=True)
class Event:
    """A single recorded event with its raw clock timestamp."""

    timestamp: int
    name: str
    thread_id: int
    metadata: int
    type: EventType


class EventBuffer:
    """Collects events emitted by one thread, stamped by a tick clock."""

    def __init__(self, thread_id: int, clock: Callable[[], int]) -> None:
        self.thread_id = thread_id
        self._clock = clock
        self._events: list[Event] = []
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return BUFFER_CAPACITY

    def __len__(self) -> int:
        return len(self._events)

    def _record(self, *specs: tuple[int, str, int, EventType]) -> None:
        """Append events given as (tick offset, name, metadata, type) with one clock read."""
        with self._lock:
            if len(self._events) + len(specs) > BUFFER_CAPACITY:
                raise BufferError(
                    f"event buffer of thread {self.thread_id:x} is full "
                    f"({BUFFER_CAPACITY} events)"
                )
            now = self._clock()
            self._events.extend(
                Event(
                    timestamp=(now + offset) & _U64_MASK,
                    name=name,
                    thread_id=self.thread_id,
                    metadata=metadata & _U64_MASK,
                    type=kind,
                )
                for offset, name, metadata, kind in specs
            )

    def begin(self, name: str) -> None:
        self._record((0, name, 0, EventType.CALL_BEGIN))

    def end(self, name: str) -> None:
        self._record((0, name, 0, EventType.CALL_END))

    def endbegin(self, end_name: str, begin_name: str) -> None:
        """Close one region and open the next with a single clock read."""
        self._record(
            (0, end_name, 0, EventType.CALL_END),
            (1, begin_name, 0, EventType.CALL_BEGIN),
        )

    def immediate(self, name: str) -> None:
        self._record(
            (0, name, 0, EventType.CALL_END),
            (10, name, 0, EventType.CALL_BEGIN),
        )

    def begin_meta(self, name: str, metadata: int) -> None:
        self._record((0, name, metadata, EventType.CALL_BEGIN_META))

    def end_meta(self, name: str, metadata: int) -> None:
        self._record((0, name, metadata, EventType.CALL_END_META))

    def immediate_meta(self, name: str, metadata: int) -> None:
        self._record(
            (0, name, metadata, EventType.CALL_END_META),
            (10, name, metadata, EventType.CALL_BEGIN_META),
        )

    def counter(self, name: str, count: int) -> None:
        self._record((0, name, count, EventType.COUNTER_INT))

    def flow_start(self, name: str, flow_id: int) -> None:
        """Record a short region carrying the flow id with the flow start inside it."""
        self._record(
            (0, name, flow_id, EventType.CALL_BEGIN_META),
            (5, name, flow_id, EventType.FLOW_START),
            (10, name, 0, EventType.CALL_END),
        )

    def flow_finish(self, name: str, flow_id: int) -> None:
        """Record a short region carrying the flow id with the flow finish inside it."""
        self._record(
            (0, name, 0, EventType.CALL_BEGIN),
            (5, name, flow_id, EventType.FLOW_FINISH),
            (10, name, flow_id, EventType.CALL_END_META),
        )

    def drain(self) -> list[Event]:
        """Return all recorded events and empty the buffer."""
        with self._lock:
            events, self._events = self._events, []
        return events