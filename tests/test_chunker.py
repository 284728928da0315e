"""Tests for daily_vibe.chunker."""

from datetime import datetime, timedelta, timezone

from daily_vibe import chunker
from daily_vibe.models import SessionEvent, SessionSummary, ToolRun

BASE = datetime(2025, 9, 1, 10, 0, tzinfo=timezone.utc)


def session(session_id, *contents, project="app"):
    events = [
        SessionEvent(
            id=f"{session_id}-{i}",
            timestamp=BASE + timedelta(minutes=i),
            role="assistant" if i % 2 else "user",
            content=content,
            session_id=session_id,
            project=project,
        )
        for i, content in enumerate(contents)
    ]
    return SessionSummary(session_id, project, events[0].timestamp, events[-1].timestamp, events)


def test_estimate_session_length():
    assert chunker.estimate_session_length(session("s", "abc", "de")) == 200 + (3 + 150) + (2 + 150)


def test_sessions_are_packed_in_order():
    sessions = [session(f"s{i}", "x" * 650) for i in range(3)]  # 1000 each
    chunks = chunker.split_sessions_into_chunks(sessions, max_length=2000)
    assert [[s.session_id for s in chunk] for chunk in chunks] == [["s0", "s1"], ["s2"]]


def test_oversized_session_gets_its_own_chunk():
    small = session("small", "x")
    big = session("big", "x" * 5000)
    chunks = chunker.split_sessions_into_chunks([small, big, small], max_length=1000)
    assert [[s.session_id for s in chunk] for chunk in chunks] == [["small"], ["big"], ["small"]]


def test_chunks_cover_every_session_once():
    sessions = [session(f"s{i}", "y" * (i * 400)) for i in range(1, 12)]
    chunks = chunker.split_sessions_into_chunks(sessions, max_length=3000)
    assert [s for chunk in chunks for s in chunk] == sessions
    assert all(chunk for chunk in chunks)


def test_no_sessions_no_chunks():
    assert chunker.split_sessions_into_chunks([]) == []


def test_format_event_truncates_long_content():
    event = session("s", "a" * 3500).events[0]
    line = chunker.format_event(event)
    assert line == "[2025-09-01T10:00:00.000Z] user: " + "a" * 3000 + chunker.TRUNCATION_MARKER


def test_format_event_tool_line():
    event = session("s", "running").events[0]
    event.tool_runs = [ToolRun(tool="shell", output="o" * 500), ToolRun(command="ls")]
    tools_line = chunker.format_event(event).split("\n")[1]
    assert tools_line == "  Tools: shell: " + "o" * 300 + "; ls: executed"


def test_format_session_layout():
    text = chunker.format_session(session("s1", "hello", "hi", project=None))
    assert text.split("\n") == [
        "Session: s1 (unknown project)",
        "Time: 2025-09-01T10:00:00.000Z - 2025-09-01T10:01:00.000Z",
        "[2025-09-01T10:00:00.000Z] user: hello",
        "[2025-09-01T10:01:00.000Z] assistant: hi",
        "---",
        "",
    ]


def test_format_session_caps_event_count():
    text = chunker.format_session(session("s1", *["e"] * 150))
    assert text.count("] user: e") + text.count("] assistant: e") == chunker.MAX_EVENTS_PER_SESSION
