"""Statistics for analysis results."""

from collections import Counter

import tiktoken

from .models import AnalysisStats, SessionSummary


def count_tokens(text: str, model: str = "cl100k_base") -> int:
    """Count tokens in text using tiktoken."""
    try:
        enc = tiktoken.get_encoding(model)
        return len(enc.encode(text))
    except Exception:
        # Fallback: rough estimate
        return len(text) // 4


def build_stats(sessions: list[SessionSummary], total_problems: int) -> AnalysisStats:
    return AnalysisStats(
        total_sessions=len(sessions),
        total_events=sum(len(s.events) for s in sessions),
        total_problems=total_problems,
    )


def get_top_sessions(sessions: list[SessionSummary], limit: int = 5) -> list[SessionSummary]:
    """Most active sessions by event count."""
    return sorted(sessions, key=lambda s: len(s.events), reverse=True)[:limit]


def get_project_distribution(sessions: list[SessionSummary]) -> dict[str, int]:
    """Event counts per project, busiest first."""
    counts: Counter[str] = Counter()
    for session in sessions:
        counts[session.project or "unknown"] += len(session.events)
    return dict(counts.most_common())


def get_daily_averages(stats: AnalysisStats, day_count: int) -> dict[str, float]:
    if day_count <= 0:
        return {"sessions_per_day": 0.0, "events_per_day": 0.0}
    return {
        "sessions_per_day": stats.total_sessions / day_count,
        "events_per_day": stats.total_events / day_count,
    }
