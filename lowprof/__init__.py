"""Event profiler writing Chrome trace JSON: events, trace rendering, engine and emit API."""

__version__ = "0.1.0"