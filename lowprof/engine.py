"""The profiler engine: owns per-thread buffers and writes trace files."""

from __future__ import annotations

import os
import threading
import time
from collections.abc import Callable, Mapping
from pathlib import Path

from lowprof.events import BUFFER_CAPACITY, Event, EventBuffer
from lowprof.trace import render_trace, trace_filename

_CALIBRATION_SECONDS = 0.2
_LONG_RUN_NS = 1_000_000_000.0


class ProfilerEngine:
    """Collects events from all threads between enable() and disable()."""

    def __init__(
        self,
        clock: Callable[[], int] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._clock = clock if clock is not None else time.perf_counter_ns
        environ = os.environ if environ is None else environ
        self.enabled = False
        self.flushed = True
        self.running = False
        self.tsc_enable = 0
        self.tsc_disable = 0
        self.time_enable = 0
        self.time_disable = 0
        self.ticks_per_ns = 0.0
        self._buffers_lock = threading.Lock()
        self._buffers: list[EventBuffer] = []
        self._local = threading.local()

        disable_flag = environ.get("LOP_DISABLE")
        if disable_flag is None or int(disable_flag) == 0:
            self._calibrate()
            self.running = True

    def _calibrate(self) -> None:
        wall_start = time.time_ns()
        ticks_start = self._clock()
        time.sleep(_CALIBRATION_SECONDS)
        ticks_stop = self._clock()
        wall_stop = time.time_ns()
        self.ticks_per_ns = (ticks_stop - ticks_start) / (wall_stop - wall_start)
        print(f"Estimated TSC freq: {self.ticks_per_ns:f} GHz")
        print(f"                    {self.ticks_per_ns:f} ticks per nanosecond")

    def buffer(self) -> EventBuffer:
        """Return the calling thread's buffer, creating and registering it on first use."""
        buf = getattr(self._local, "buffer", None)
        if buf is None:
            buf = EventBuffer(threading.get_ident(), self._clock)
            self._local.buffer = buf
            with self._buffers_lock:
                self._buffers.append(buf)
        return buf

    def enable(self) -> None:
        if self.running and not self.enabled:
            self.flushed = False
            self.enabled = True
            buf = self.buffer()
            buf.begin("lop_engine_enable")
            self.time_enable = time.time_ns()
            self.tsc_enable = self._clock()
            buf.end_meta("lop_engine_enable", self.time_enable)

    def disable(self) -> None:
        if self.running and self.enabled:
            buf = self.buffer()
            buf.begin("lop_engine_disable")
            self.tsc_disable = self._clock()
            self.time_disable = time.time_ns()
            buf.end_meta("lop_engine_disable", self.time_disable)
            self.enabled = False

    def _collect(self) -> list[Event]:
        events: list[Event] = []
        with self._buffers_lock:
            for buf in self._buffers:
                drained = buf.drain()
                count = len(drained)
                print(
                    f"Got {count}/{BUFFER_CAPACITY} "
                    f"({count * 100 // BUFFER_CAPACITY}%) events in buffer of thread: "
                    f"{buf.thread_id:x}"
                )
                events.extend(drained)
        return events

    def flush(
        self, suffix: str | None = None, directory: str | os.PathLike[str] | None = None
    ) -> Path | None:
        """Write collected events to a trace file; return its path, or None if nothing was written."""
        pid = os.getpid()
        print(f"ProfilerEngine::flush at PID:{pid}")
        if suffix is not None:
            print(f'Flushing for suffix: "{suffix}"')

        if self.enabled:
            print("Tried to flush enabled LOP. Doing nothing.")
            return None
        if self.flushed:
            print("Tried to flush already flushed LOP. Doing nothing.")
            return None

        events = self._collect()
        print(f"TOTAL EVENTS: {len(events)}")

        path: Path | None = None
        if events:
            duration_ns = float(self.time_disable - self.time_enable)
            name = trace_filename(pid, duration_ns, suffix)
            if duration_ns > _LONG_RUN_NS:
                self.ticks_per_ns = (self.tsc_disable - self.tsc_enable) / duration_ns
                print("Long run detected. Will use frequency measured over time.")
                print(f"Measured {self.ticks_per_ns:f} ticks per nanosecond")
            content = render_trace(events, pid, self.ticks_per_ns)
            path = Path(directory if directory is not None else ".") / name
            print(f"Creating file: {name}")
            path.write_text(content, encoding="utf-8")

        self.flushed = True
        print("ProfilerEngine::flush finished")
        return path

    def close(self) -> Path | None:
        """Stop profiling and write out anything not yet flushed."""
        print(f"ProfilerEngine::close at PID:{os.getpid()}")
        path = None
        if self.running:
            self.disable()
            if not self.flushed:
                path = self.flush()
        print("ProfilerEngine::close finished")
        return path

    def __enter__(self) -> ProfilerEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()