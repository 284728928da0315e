"""Heuristic mining of error -> fix sequences inside sessions."""

import re

from .models import ProblemSolution, SessionEvent, SessionSummary

ERROR_PATTERNS = [
    re.compile(r"error|exception|traceback|npm ERR!", re.IGNORECASE),
    re.compile(r"TypeError|ValueError|SyntaxError|ReferenceError", re.IGNORECASE),
    re.compile(r"panic|fatal|abort|crash", re.IGNORECASE),
    re.compile(r"failed|failure|unsuccessful", re.IGNORECASE),
    re.compile(r"cannot find|not found|undefined|null", re.IGNORECASE),
    re.compile(r"permission denied|access denied", re.IGNORECASE),
    re.compile(r"connection refused|timeout", re.IGNORECASE),
]

SOLUTION_WINDOW = 4


def contains_error_pattern(content: str) -> bool:
    return any(pattern.search(content) for pattern in ERROR_PATTERNS)


def has_failed_tool_run(event: SessionEvent) -> bool:
    return any(run.error or (run.exit_code is not None and run.exit_code != 0) for run in event.tool_runs)


def is_problem(event: SessionEvent) -> bool:
    return contains_error_pattern(event.content) or has_failed_tool_run(event)


def extract_problem_solutions(sessions: list[SessionSummary]) -> list[ProblemSolution]:
    """Pair each error-looking event with the assistant replies that follow it.

    Only the next ``SOLUTION_WINDOW`` events are considered; a problem with no
    assistant reply in that window is dropped.
    """
    problems = []
    for session in sessions:
        events = session.events
        for i, event in enumerate(events):
            if not is_problem(event):
                continue

            solutions = [e for e in events[i + 1 : i + 1 + SOLUTION_WINDOW] if e.role == "assistant"]
            if not solutions:
                continue

            problems.append(
                ProblemSolution(
                    context=session.project or "unknown",
                    problem=event.content,
                    solution="\n".join(e.content for e in solutions),
                    events=[event, *solutions],
                )
            )
    return problems
