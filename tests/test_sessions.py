"""Tests for daily_vibe.sessions."""

from datetime import datetime, timedelta, timezone

from daily_vibe.models import SessionEvent
from daily_vibe.sessions import group_events_into_sessions

BASE = datetime(2025, 9, 1, 10, 0, tzinfo=timezone.utc)


def event(event_id, minutes, session_id="s1", project="app"):
    return SessionEvent(
        id=event_id,
        timestamp=BASE + timedelta(minutes=minutes),
        role="user",
        content=event_id,
        session_id=session_id,
        project=project,
    )


def test_groups_by_session_in_first_seen_order():
    events = [event("a", 5, "s2"), event("b", 0, "s1"), event("c", 1, "s2")]
    sessions = group_events_into_sessions(events)
    assert [s.session_id for s in sessions] == ["s2", "s1"]
    assert [e.id for e in sessions[0].events] == ["c", "a"]


def test_session_bounds_and_project():
    sessions = group_events_into_sessions([event("a", 30, project="late"), event("b", 0, project="early")])
    [session] = sessions
    assert session.start_time == BASE
    assert session.end_time == BASE + timedelta(minutes=30)
    assert session.project == "early"
    assert session.duration_minutes == 30


def test_equal_timestamps_keep_input_order():
    sessions = group_events_into_sessions([event("x", 0), event("y", 0), event("z", 0)])
    assert [e.id for e in sessions[0].events] == ["x", "y", "z"]


def test_missing_session_id_goes_to_unknown():
    sessions = group_events_into_sessions([event("a", 0, session_id=None)])
    assert sessions[0].session_id == "unknown"


def test_every_event_lands_in_exactly_one_session():
    events = [event(str(i), i % 7, f"s{i % 3}") for i in range(20)]
    sessions = group_events_into_sessions(events)
    assert sorted(e.id for s in sessions for e in s.events) == sorted(e.id for e in events)
    for session in sessions:
        stamps = [e.timestamp for e in session.events]
        assert stamps == sorted(stamps)


def test_no_events_no_sessions():
    assert group_events_into_sessions([]) == []
