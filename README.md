# lowprof

A small event profiler for instrumenting Python programs by hand. While
profiling is enabled, events are recorded into per-thread buffers; on demand
they are written out as a JSON file in the Chrome trace event format, which can
be opened in `chrome://tracing` or in Perfetto.

No third-party libraries are needed at run time.

## Quick start

```python
from lowprof.api import (
    profiler_enable,
    profiler_disable,
    profiler_flush,
    emit_begin_event,
    emit_end_event,
    emit_counter_event,
    scoped_profile,
    profile_func,
)

@profile_func
def work():
    ...

profiler_enable()

emit_counter_event("queue_depth", 0)
emit_begin_event("load")
...
emit_end_event("load")

with scoped_profile("compute"):
    work()

profiler_disable()
path = profiler_flush()
```

`profiler_flush()` writes a file named `events_pid<PID>_ts<DURATION_US>.json`
into the working directory, where the duration is the time between enabling
and disabling in microseconds, and returns its path. Pass a suffix, as in
`profiler_flush("run2")`, to produce several files from one process; it is
appended to the name, and any `/` or `\` in the name is replaced by `_`.

Flushing while the profiler is still enabled, or flushing again without
enabling in between, writes nothing and returns `None`. The engine prints short
progress messages to standard output as it flushes.

## Events

All functions live in `lowprof.api`. Events emitted while the profiler is
disabled are ignored.

| Function | What is recorded |
| --- | --- |
| `emit_begin_event(name)` / `emit_end_event(name)` | Start and end of a duration slice |
| `emit_endbegin_event(end_name, begin_name)` | Ends one slice and begins the next with a single clock read |
| `emit_immediate_event(name)` | An end and a begin event of the same name, 10 clock ticks apart |
| `emit_begin_meta_event(name, metadata)` / `emit_end_meta_event(name, metadata)` | Slice boundaries with the integer shown (in hex) in the slice arguments |
| `emit_immediate_meta_event(name, metadata)` | Like the immediate event, carrying the integer on both |
| `emit_counter_event(name, count)` | A sample of a counter track |
| `emit_flow_start_event(name, flow_id)` / `emit_flow_finish_event(name, flow_id)` | A short slice holding a flow arrow end, matched across threads by `flow_id` |

Counter samples are written after all other events, sorted by time.

Scoped helpers emit the begin and end events for you:

- `scoped_profile(name)` — a context manager for a named region.
- `meta_scoped_profile(name, meta)` — the same, with metadata on the begin event.
- `profile_func` — a decorator that records every call of a function as a
  region named `<module>.<qualified name>`.

## The engine

`get_engine()` returns the process-wide `lowprof.engine.ProfilerEngine` behind
these functions. It is created on first use, which takes about 0.2 s while the
clock rate is estimated, and is closed at interpreter exit, flushing anything
not yet written.

A `ProfilerEngine` can also be created directly, with its own clock function
and environment mapping. Its `buffer()` method returns the calling thread's
`lowprof.events.EventBuffer`; `flush(suffix, directory)` writes the trace into
the given directory; `close()` disables and flushes. It works as a context
manager that calls `close()` on exit.

Each thread's buffer holds at most 4,194,304 events between flushes; recording
past that raises `BufferError`.

The JSON text itself is built by `lowprof.trace.render_trace(events, pid,
ticks_per_ns)`, with `trace_filename` and `format_timestamp` as helpers.

## Turning it off

Set the environment variable `LOP_DISABLE` to a non-zero integer before the
engine is created, and the profiler stays inert: enabling has no effect and
nothing is recorded or written. A value that is not an integer makes engine
creation fail with `ValueError`.

## Example

A demonstration with two worker threads, counters, flows and a profiled
function is included. Run it from a directory where the trace file may be
written:

```
lowprof-example
```

## What it does not do

lowprof only records the events your code emits. It does not sample running
code, hook into the interpreter, or display traces; use a trace viewer to look
at the files it writes.