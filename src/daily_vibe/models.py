"""Data models for daily vibe."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

Role = Literal["user", "assistant", "system", "tool"]
FileOperation = Literal["create", "update", "delete"]


def _iso(value: datetime) -> str:
    return value.isoformat()


@dataclass
class ToolRun:
    """A shell or tool invocation attached to an event."""

    tool: str | None = None
    command: str | None = None
    input: str | None = None
    output: str | None = None
    error: str | None = None
    exit_code: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "command": self.command,
            "input": self.input,
            "output": self.output,
            "error": self.error,
            "exitCode": self.exit_code,
        }


@dataclass
class FileDiff:
    """A file change recorded alongside an event."""

    file: str
    operation: FileOperation = "update"
    before: str | None = None
    after: str | None = None
    content: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "operation": self.operation,
            "before": self.before,
            "after": self.after,
            "content": self.content,
        }


@dataclass
class SessionEvent:
    """One utterance or tool invocation in a coding session."""

    id: str
    timestamp: datetime
    role: Role
    content: str
    session_id: str | None = None
    project: str | None = None
    tool_runs: list[ToolRun] = field(default_factory=list)
    file_diffs: list[FileDiff] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": _iso(self.timestamp),
            "role": self.role,
            "content": self.content,
            "sessionId": self.session_id,
            "project": self.project,
            "toolRuns": [run.to_dict() for run in self.tool_runs],
            "fileDiffs": [diff.to_dict() for diff in self.file_diffs],
            "metadata": self.metadata,
        }


@dataclass
class SessionSummary:
    """A continuous conversation, events sorted by time."""

    session_id: str
    project: str | None
    start_time: datetime
    end_time: datetime
    events: list[SessionEvent] = field(default_factory=list)

    @property
    def duration_minutes(self) -> int:
        return round((self.end_time - self.start_time).total_seconds() / 60)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "project": self.project,
            "startTime": _iso(self.start_time),
            "endTime": _iso(self.end_time),
            "events": [event.to_dict() for event in self.events],
        }


@dataclass
class ProblemSolution:
    """An error followed by the assistant turns that answered it."""

    context: str
    problem: str
    solution: str
    events: list[SessionEvent] = field(default_factory=list)


@dataclass
class RedactionMatch:
    """A single sensitive substring found by the redaction engine."""

    match: str
    pattern: str
    replacement: str


@dataclass
class RedactionResult:
    """Outcome of redacting one piece of text."""

    original: str
    redacted: str
    matches: list[RedactionMatch] = field(default_factory=list)


@dataclass
class AnalysisStats:
    """Counts reported alongside an analysis."""

    total_sessions: int
    total_events: int
    total_problems: int

    def to_dict(self) -> dict[str, int]:
        return {
            "totalSessions": self.total_sessions,
            "totalEvents": self.total_events,
            "totalProblems": self.total_problems,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Terminal artifact of one analysis run."""

    date: str
    sessions: list[SessionSummary]
    daily_report: str
    knowledge: str
    stats: AnalysisStats

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "sessions": [session.to_dict() for session in self.sessions],
            "dailyReport": self.daily_report,
            "knowledge": self.knowledge,
            "stats": self.stats.to_dict(),
        }


@dataclass
class DataSource:
    """A place on disk where session logs may live."""

    name: str
    description: str
    type: Literal["claude-code", "codex-cli", "codex-vscode"]
    paths: list[str]
    files_found: int
    available: bool


@dataclass
class CollectedEvents:
    """Events gathered from one tool's log files."""

    events: list[SessionEvent] = field(default_factory=list)
    files_scanned: list[str] = field(default_factory=list)
