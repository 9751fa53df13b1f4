import json

import pytest

from lowprof import api


def _events(path):
    document = json.loads(path.read_text(encoding="utf-8"))
    return [entry for entry in document["traceEvents"] if entry]


@pytest.fixture
def session(tmp_path, monkeypatch):
    """Run a body between enable and disable, flush, and return the parsed trace."""
    monkeypatch.chdir(tmp_path)

    def run(body, suffix=None):
        api.profiler_enable()
        try:
            body()
        finally:
            api.profiler_disable()
        path = api.profiler_flush(suffix)
        assert path is not None
        return path, _events(path)

    return run


def _named(events, name):
    return [event for event in events if event.get("name") == name]


def test_get_engine_records_emitted_events(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    api.profiler_enable()
    try:
        buffer = api.get_engine().buffer()
        before = len(buffer)
        api.emit_begin_event("probe")
        assert len(api.get_engine().buffer()) == before + 1
    finally:
        api.profiler_disable()
    path = api.profiler_flush()
    assert path is not None
    assert [e["ph"] for e in _named(_events(path), "probe")] == ["B"]


def test_begin_end_pair(session):
    def body():
        api.emit_begin_event("region")
        api.emit_end_event("region")

    _, events = session(body)
    assert [event["ph"] for event in _named(events, "region")] == ["B", "E"]


def test_engine_marks_enable_and_disable(session):
    _, events = session(lambda: None)
    assert [e["ph"] for e in _named(events, "lop_engine_enable")] == ["B", "E"]
    assert [e["ph"] for e in _named(events, "lop_engine_disable")] == ["B", "E"]


def test_events_while_disabled_are_dropped(session):
    api.emit_begin_event("ignored")
    api.emit_end_event("ignored")
    _, events = session(lambda: api.emit_immediate_event("kept"))
    assert _named(events, "ignored") == []
    assert len(_named(events, "kept")) == 2


def test_endbegin_orders_end_before_begin(session):
    def body():
        api.emit_begin_event("first")
        api.emit_endbegin_event("first", "second")
        api.emit_end_event("second")

    _, events = session(body)
    first = _named(events, "first")
    second = _named(events, "second")
    assert [e["ph"] for e in first] == ["B", "E"]
    assert [e["ph"] for e in second] == ["B", "E"]
    assert float(first[1]["ts"]) <= float(second[0]["ts"])


def test_meta_events_carry_hex_metadata(session):
    def body():
        api.emit_begin_meta_event("meta", 255)
        api.emit_end_meta_event("meta", 16)

    _, events = session(body)
    begin, end = _named(events, "meta")
    assert begin["args"] == {"b_meta": "ff"}
    assert end["args"] == {"e_meta": "10"}


def test_immediate_meta_event(session):
    _, events = session(lambda: api.emit_immediate_meta_event("point", 10))
    recorded = _named(events, "point")
    assert sorted(e["ph"] for e in recorded) == ["B", "E"]
    assert all("a" in next(iter(e["args"].values())) for e in recorded)


def test_counter_values(session):
    def body():
        api.emit_counter_event("resource", 7)
        api.emit_counter_event("resource", 9)

    _, events = session(body)
    counters = [e for e in events if e.get("ph") == "C"]
    assert [e["args"]["val"] for e in counters] == [7, 9]
    assert all(e["name"] == "resource" for e in counters)


def test_flow_start_and_finish_share_id(session):
    def body():
        api.emit_flow_start_event("handoff", 123)
        api.emit_flow_finish_event("handoff", 123)

    _, events = session(body)
    flows = [e for e in events if e.get("name") == "flow"]
    assert sorted(e["ph"] for e in flows) == ["f", "s"]
    assert all(e["id"] == 123 and e["args"]["flow_id"] == "7b" for e in flows)
    assert all(e["bp"] == "e" for e in flows)


def test_scoped_profile_closes_on_exception(session):
    def body():
        with pytest.raises(RuntimeError):
            with api.scoped_profile("scope"):
                raise RuntimeError("boom")

    _, events = session(body)
    assert [e["ph"] for e in _named(events, "scope")] == ["B", "E"]


def test_meta_scoped_profile_ends_without_metadata(session):
    def body():
        with api.meta_scoped_profile("mscope", 42):
            pass

    _, events = session(body)
    begin, end = _named(events, "mscope")
    assert begin["args"] == {"b_meta": "2a"}
    assert "args" not in end


def test_profile_func_keeps_result_and_records_name(session):
    @api.profile_func
    def add(a, b):
        return a + b

    results = []
    _, events = session(lambda: results.append(add(2, 3)))
    assert results == [5]
    assert add.__name__ == "add"
    names = {e["name"] for e in events if e.get("ph") in ("B", "E")}
    assert any(name.endswith("add") for name in names)


def test_flush_with_suffix_names_file(session):
    path, _ = session(lambda: api.emit_immediate_event("x"), suffix="run/one")
    assert path.name.startswith("events_pid")
    assert path.name.endswith("_run_one.json")
    assert path.exists()


def test_flush_while_enabled_does_nothing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    api.profiler_enable()
    try:
        assert api.profiler_flush() is None
    finally:
        api.profiler_disable()
    path = api.profiler_flush()
    assert path is not None
    assert api.profiler_flush() is None