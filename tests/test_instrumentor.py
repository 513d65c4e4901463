import json

from runeengine.instrumentor import (
    InstrumentationTimer,
    Instrumentor,
    ProfileResult,
    profile_function,
    profile_scope,
)


def read_events(path):
    return json.loads(path.read_text(encoding="utf-8"))["traceEvents"]


def test_exact_output_with_quote_replacement(tmp_path):
    path = tmp_path / "trace.json"
    inst = Instrumentor()
    inst.begin_session("Test", str(path))
    inst.write_profile(ProfileResult('a"b', 10, 25, 7))
    inst.end_session()
    assert path.read_text(encoding="utf-8") == (
        '{"otherData": {},"traceEvents":['
        '{"cat":"function","dur":15,"name":"a\'b","ph":"X","pid":0,"tid":7,"ts":10}]}'
    )


def test_empty_session_is_valid_json(tmp_path):
    path = tmp_path / "empty.json"
    inst = Instrumentor()
    inst.begin_session("Empty", str(path))
    inst.end_session()
    assert json.loads(path.read_text(encoding="utf-8")) == {"otherData": {}, "traceEvents": []}


def test_several_profiles_round_trip(tmp_path):
    path = tmp_path / "many.json"
    inst = Instrumentor()
    inst.begin_session("Many", str(path))
    inst.write_profile(ProfileResult("first", 100, 130, 1))
    inst.write_profile(ProfileResult("second", 200, 260, 2))
    inst.end_session()
    events = read_events(path)
    assert [e["name"] for e in events] == ["first", "second"]
    assert [e["dur"] for e in events] == [130 - 100, 260 - 200]
    assert [e["ts"] for e in events] == [100, 200]
    assert [e["tid"] for e in events] == [1, 2]


def test_session_name_tracks_state(tmp_path):
    inst = Instrumentor()
    inst.begin_session("Runtime", str(tmp_path / "r.json"))
    assert inst.session_name == "Runtime"
    inst.end_session()
    assert inst.session_name is None


def test_count_resets_between_sessions(tmp_path):
    inst = Instrumentor()
    first = tmp_path / "one.json"
    second = tmp_path / "two.json"
    inst.begin_session("One", str(first))
    inst.write_profile(ProfileResult("x", 0, 1, 0))
    inst.end_session()
    inst.begin_session("Two", str(second))
    inst.write_profile(ProfileResult("y", 0, 1, 0))
    inst.end_session()
    assert [e["name"] for e in read_events(second)] == ["y"]


def test_write_without_session_is_ignored(tmp_path):
    inst = Instrumentor()
    inst.write_profile(ProfileResult("lost", 0, 1, 0))
    path = tmp_path / "after.json"
    inst.begin_session("After", str(path))
    inst.write_profile(ProfileResult("kept", 0, 1, 0))
    inst.end_session()
    assert [e["name"] for e in read_events(path)] == ["kept"]


def test_begin_ends_previous_session(tmp_path):
    inst = Instrumentor()
    first = tmp_path / "a.json"
    inst.begin_session("A", str(first))
    inst.write_profile(ProfileResult("in_a", 0, 2, 0))
    inst.begin_session("B", str(tmp_path / "b.json"))
    inst.end_session()
    assert [e["name"] for e in read_events(first)] == ["in_a"]


def test_timer_context_writes_once(tmp_path):
    path = tmp_path / "timer.json"
    inst = Instrumentor()
    inst.begin_session("Timer", str(path))
    with InstrumentationTimer("scope", inst) as timer:
        timer.stop()
    assert timer.stopped is True
    inst.end_session()
    events = read_events(path)
    assert len(events) == 1
    assert events[0]["name"] == "scope"
    assert events[0]["dur"] >= 0
    assert events[0]["ph"] == "X"


def test_singleton_shares_session_state(tmp_path):
    first = Instrumentor.get()
    first.begin_session("Shared state", str(tmp_path / "singleton.json"))
    try:
        assert Instrumentor.get().session_name == "Shared state"
    finally:
        first.end_session()
    assert Instrumentor.get().session_name is None


def test_profile_function_and_scope_use_shared_instrumentor(tmp_path):
    path = tmp_path / "shared.json"

    @profile_function
    def work(a, b):
        return a + b

    inst = Instrumentor.get()
    inst.begin_session("Shared", str(path))
    try:
        result = work(2, 3)
        with profile_scope("Renderer Prep"):
            pass
    finally:
        inst.end_session()
    assert result == 5
    names = [e["name"] for e in read_events(path)]
    assert names == [work.__qualname__, "Renderer Prep"]
    assert work.__name__ == "work"