"""Grouping of events into sessions."""

from .models import SessionEvent, SessionSummary

UNKNOWN_SESSION = "unknown"


def group_events_into_sessions(events: list[SessionEvent]) -> list[SessionSummary]:
    """Build one SessionSummary per session id, in first-seen order.

    Events are stably sorted by timestamp, so ties keep their input order.
    Events from different tools that share a session id end up together.
    """
    grouped: dict[str, list[SessionEvent]] = {}
    for event in events:
        grouped.setdefault(event.session_id or UNKNOWN_SESSION, []).append(event)

    sessions = []
    for session_id, session_events in grouped.items():
        ordered = sorted(session_events, key=lambda e: e.timestamp)
        sessions.append(
            SessionSummary(
                session_id=session_id,
                project=ordered[0].project,
                start_time=ordered[0].timestamp,
                end_time=ordered[-1].timestamp,
                events=ordered,
            )
        )
    return sessions
