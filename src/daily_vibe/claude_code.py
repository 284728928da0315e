"""Claude Code and SpecStory session log collection."""

import asyncio
import logging
import os
from datetime import datetime
from pathlib import Path

from .files import find_files
from .models import CollectedEvents, SessionEvent
from .normalize import (
    CLAUDE_ROLE_RULES,
    FieldMap,
    collect_jsonl_events,
    parse_markdown_conversation,
)

logger = logging.getLogger("daily_vibe.claude_code")

PROJECT_PATTERNS = ["projects/**/*.jsonl"]
SPECSTORY_PATTERNS = ["**/.specstory/history/**/*.md", "**/.specstory/history/**/*.jsonl"]

# ~/.claude/projects/<project-hash>/<session-id>.jsonl
CLAUDE_CODE_FIELDS = FieldMap(
    source="claude-code",
    timestamp_keys=("timestamp", "ts", "time"),
    id_keys=("uuid", "id"),
    role_keys=("type", "message.role"),
    content_keys=("content", "text", "data"),
    tool_run_keys=("toolRuns", "tool_runs"),
    file_diff_keys=("fileDiffs", "file_diffs"),
    tool_run_fields={
        "tool": ("tool", "name"),
        "command": ("command",),
        "input": ("input", "parameters"),
        "output": ("output", "result"),
        "error": ("error",),
        "exit_code": ("exitCode", "exit_code"),
    },
    file_diff_fields={
        "file": ("file", "path"),
        "operation": ("operation", "type"),
        "before": ("before",),
        "after": ("after",),
        "content": ("content",),
    },
    role_rules=CLAUDE_ROLE_RULES,
    metadata_keys={
        "cwd": "cwd",
        "gitBranch": "gitBranch",
        "version": "version",
        "model": "message.model",
        "usage": "message.usage",
    },
)

SPECSTORY_FIELDS = FieldMap(
    source="specstory",
    timestamp_keys=("timestamp", "ts", "time"),
    id_keys=("id",),
    role_keys=("role", "type"),
    content_keys=("content", "text", "data"),
    tool_run_keys=(),
    file_diff_keys=(),
    tool_run_fields={},
    file_diff_fields={},
    role_rules=CLAUDE_ROLE_RULES,
    id_prefix="specstory",
    fixed_project="specstory",
)


def get_claude_home() -> Path:
    env = os.environ.get("CLAUDE_HOME")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".claude"


def _collect_markdown(path: Path, start: datetime, end: datetime) -> list[SessionEvent]:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Cannot read %s: %s", path, e)
        return []
    return parse_markdown_conversation(text, path, start, end)


async def collect_claude_code_events(
    start: datetime,
    end: datetime,
    claude_home: Path | None = None,
    search_root: Path | None = None,
) -> CollectedEvents:
    """Collect Claude Code and SpecStory events inside ``start``..``end``.

    SpecStory exports are searched for under ``search_root`` (the current
    directory by default). The file scan runs in a worker thread.
    """
    return await asyncio.to_thread(scan_claude_code_events, start, end, claude_home, search_root)


def scan_claude_code_events(
    start: datetime,
    end: datetime,
    claude_home: Path | None = None,
    search_root: Path | None = None,
) -> CollectedEvents:
    result = CollectedEvents()

    project_files = find_files(PROJECT_PATTERNS, claude_home or get_claude_home())
    result.files_scanned.extend(str(p) for p in project_files)
    result.events.extend(collect_jsonl_events(project_files, CLAUDE_CODE_FIELDS, start, end))

    specstory_files = find_files(SPECSTORY_PATTERNS, search_root or Path.cwd())
    result.files_scanned.extend(str(p) for p in specstory_files)
    for path in specstory_files:
        if path.suffix == ".jsonl":
            result.events.extend(collect_jsonl_events([path], SPECSTORY_FIELDS, start, end))
        else:
            result.events.extend(_collect_markdown(path, start, end))

    logger.info("Claude Code: %d events from %d files", len(result.events), len(result.files_scanned))
    return result
