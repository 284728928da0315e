"""Tests for daily_vibe.problems."""

from datetime import datetime, timedelta, timezone

from daily_vibe.models import SessionEvent, SessionSummary, ToolRun
from daily_vibe.problems import contains_error_pattern, extract_problem_solutions, has_failed_tool_run

BASE = datetime(2025, 9, 1, 10, 0, tzinfo=timezone.utc)


def make_session(turns, project="app"):
    events = [
        SessionEvent(id=str(i), timestamp=BASE + timedelta(minutes=i), role=role, content=content, session_id="s")
        for i, (role, content) in enumerate(turns)
    ]
    return SessionSummary("s", project, events[0].timestamp, events[-1].timestamp, events)


def test_contains_error_pattern():
    assert contains_error_pattern("Traceback (most recent call last)")
    assert contains_error_pattern("npm ERR! missing script")
    assert contains_error_pattern("connection REFUSED")
    assert not contains_error_pattern("all green, shipped it")


def test_has_failed_tool_run():
    event = SessionEvent(id="t", timestamp=BASE, role="tool", content="ran")
    assert not has_failed_tool_run(event)
    event.tool_runs = [ToolRun(command="make", exit_code=0)]
    assert not has_failed_tool_run(event)
    event.tool_runs = [ToolRun(command="make")]
    assert not has_failed_tool_run(event)
    event.tool_runs = [ToolRun(command="make", exit_code=2)]
    assert has_failed_tool_run(event)
    event.tool_runs = [ToolRun(command="make", error="no rule")]
    assert has_failed_tool_run(event)


def test_problem_paired_with_following_assistant_turns():
    session = make_session(
        [
            ("user", "I get a TypeError when importing"),
            ("assistant", "Check the version"),
            ("user", "ok"),
            ("assistant", "Pin it to 2.0"),
        ]
    )
    [problem] = extract_problem_solutions([session])
    assert problem.context == "app"
    assert problem.problem == "I get a TypeError when importing"
    assert problem.solution == "Check the version\nPin it to 2.0"
    assert [e.id for e in problem.events] == ["0", "1", "3"]


def test_solution_window_is_four_events():
    session = make_session(
        [("user", "build failed")] + [("user", "still there?")] * 4 + [("assistant", "too late")]
    )
    assert extract_problem_solutions([session]) == []


def test_problem_without_reply_is_dropped():
    assert extract_problem_solutions([make_session([("user", "fatal: not a git repository")])]) == []


def test_clean_sessions_have_no_problems():
    session = make_session([("user", "add a button"), ("assistant", "done")])
    assert extract_problem_solutions([session]) == []
