"""Size-bounded batching of sessions and their text rendering for the LLM."""

from .models import SessionEvent, SessionSummary
from .timeutils import to_utc_iso

MAX_CHUNK_LENGTH = 80_000
SESSION_HEADER_ALLOWANCE = 200
EVENT_OVERHEAD = 150  # timestamp, role and formatting per event

MAX_EVENT_CONTENT_LENGTH = 3000
MAX_EVENTS_PER_SESSION = 100
MAX_TOOL_OUTPUT_LENGTH = 300
TRUNCATION_MARKER = "... [content truncated]"


def estimate_session_length(session: SessionSummary) -> int:
    return SESSION_HEADER_ALLOWANCE + sum(len(event.content) + EVENT_OVERHEAD for event in session.events)


def split_sessions_into_chunks(
    sessions: list[SessionSummary], max_length: int = MAX_CHUNK_LENGTH
) -> list[list[SessionSummary]]:
    """Pack sessions, in order, into chunks of at most ``max_length`` estimated characters.

    Sessions are never split: one larger than ``max_length`` gets a chunk to itself.
    """
    chunks: list[list[SessionSummary]] = []
    current: list[SessionSummary] = []
    current_length = 0

    for session in sessions:
        length = estimate_session_length(session)
        if current and current_length + length > max_length:
            chunks.append(current)
            current = [session]
            current_length = length
        else:
            current.append(session)
            current_length += length

    if current:
        chunks.append(current)
    return chunks


def format_event(event: SessionEvent) -> str:
    content = event.content
    if len(content) > MAX_EVENT_CONTENT_LENGTH:
        content = content[:MAX_EVENT_CONTENT_LENGTH] + TRUNCATION_MARKER

    line = f"[{to_utc_iso(event.timestamp)}] {event.role}: {content}"
    if event.tool_runs:
        tools = "; ".join(
            f"{run.tool or run.command}: {(run.output or run.error or 'executed')[:MAX_TOOL_OUTPUT_LENGTH]}"
            for run in event.tool_runs
        )
        line += f"\n  Tools: {tools}"
    return line


def format_session(session: SessionSummary) -> str:
    events = "\n".join(format_event(event) for event in session.events[:MAX_EVENTS_PER_SESSION])
    return (
        f"Session: {session.session_id} ({session.project or 'unknown project'})\n"
        f"Time: {to_utc_iso(session.start_time)} - {to_utc_iso(session.end_time)}\n"
        f"{events}\n---\n"
    )


def format_sessions_for_llm(sessions: list[SessionSummary]) -> str:
    return "\n".join(format_session(session) for session in sessions)
