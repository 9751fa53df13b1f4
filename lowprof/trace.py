"""Rendering of recorded events into the Chrome tracing JSON format."""

from __future__ import annotations

import json
from collections.abc import Iterable

from lowprof.events import Event, EventType

_HEADER = '{"displayTimeUnit": "ns", "traceEvents": [\n'
_FOOTER = "{}]}"


def format_timestamp(time_ns: int) -> str:
    """Format nanoseconds as microseconds with three decimal places."""
    time_ns = int(time_ns)
    if time_ns < 0:
        raise ValueError(f"timestamp must not be negative: {time_ns}")
    micros, nanos = divmod(time_ns, 1000)
    return f"{micros}.{nanos:03d}"


def trace_filename(pid: int, duration_ns: float, suffix: str | None = None) -> str:
    """Build the trace file name for a session of the given length."""
    duration_us = int(duration_ns / 1000)
    name = f"events_pid{pid}_ts{duration_us}"
    if suffix is not None:
        name += f"_{suffix}"
    name += ".json"
    return name.replace("/", "_").replace("\\", "_")


def _quote(name: str) -> str:
    return json.dumps(name, ensure_ascii=False)


def render_trace(events: Iterable[Event], pid: int, ticks_per_ns: float) -> str:
    """Render events as a trace document; counters are emitted last, sorted by time."""
    if ticks_per_ns <= 0:
        raise ValueError(f"ticks per nanosecond must be positive: {ticks_per_ns}")
    events = list(events)
    base = min((event.timestamp for event in events), default=0)

    def stamp(timestamp: int) -> str:
        return format_timestamp(int((timestamp - base) / ticks_per_ns))

    lines = [_HEADER]
    counters: dict[int, Event] = {}
    for event in events:
        kind = event.type
        if kind == EventType.COUNTER_INT:
            counters.setdefault(event.timestamp, event)
        elif kind in (EventType.CALL_BEGIN, EventType.CALL_END):
            phase = "B" if kind == EventType.CALL_BEGIN else "E"
            lines.append(
                f'{{"tid":"{event.thread_id:x}","pid":{pid},'
                f'"ts":{stamp(event.timestamp)},"name":{_quote(event.name)},'
                f'"ph":"{phase}"}},\n'
            )
        elif kind in (EventType.CALL_BEGIN_META, EventType.CALL_END_META):
            begin = kind == EventType.CALL_BEGIN_META
            phase = "B" if begin else "E"
            meta_name = "b_meta" if begin else "e_meta"
            lines.append(
                f'{{"tid":"{event.thread_id:x}","pid":{pid},'
                f'"ts":{stamp(event.timestamp)},"name":{_quote(event.name)},'
                f'"ph":"{phase}","args":{{"{meta_name}":"{event.metadata:x}"}}}},\n'
            )
        elif kind in (EventType.FLOW_START, EventType.FLOW_FINISH):
            phase = "s" if kind == EventType.FLOW_START else "f"
            lines.append(
                f'{{"tid":"{event.thread_id:x}","pid":{pid},'
                f'"ts":{stamp(event.timestamp)},"name":"flow",'
                f'"ph":"{phase}","bp":"e","id":{event.metadata},'
                f'"args":{{"flow_id":"{event.metadata:x}"}}}},\n'
            )
        else:
            raise ValueError(f"unknown event type: {kind!r}")

    for timestamp in sorted(counters):
        event = counters[timestamp]
        lines.append(
            f'{{"pid": {pid},"ts":{stamp(timestamp)},"name":{_quote(event.name)},'
            f'"ph":"C","args":{{"val":{event.metadata}}}}},\n'
        )

    lines.append(_FOOTER)
    return "".join(lines)