"""Codex CLI and Codex VS Code extension log collection."""

import asyncio
import logging
import os
import platform
import re
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from .files import find_files
from .models import CollectedEvents
from .normalize import CODEX_ROLE_RULES, FieldMap, collect_jsonl_events

logger = logging.getLogger("daily_vibe.codex")

SESSION_PATTERNS = ["sessions/**/*.jsonl"]
HISTORY_PATTERNS = ["history/**/*.jsonl"]
VSCODE_PATTERNS = [
    "**/openai*codex*/**/*.jsonl",
    "**/openai*chatgpt*/**/*.jsonl",
    "**/codex*/**/*.jsonl",
]

_ID_LIKE_RE = re.compile(r"^[0-9a-f-]+$", re.IGNORECASE)
_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_UUID_SUFFIX_RE = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
_NON_PROJECT_DIRS = {"sessions", "history", ".codex"}


def codex_session_id(file_path: str | Path) -> str:
    """Use the file stem when it looks like an id or date, else the parent directory."""
    path = Path(file_path)
    stem = path.stem or "unknown"
    if _ID_LIKE_RE.match(stem) or _DATE_PREFIX_RE.match(stem) or _UUID_SUFFIX_RE.search(stem):
        return stem
    return path.parent.name or stem


def codex_project(file_path: str | Path) -> str | None:
    """Nearest enclosing directory that is not part of the Codex layout."""
    for part in reversed(Path(file_path).parent.parts):
        if part and part not in _NON_PROJECT_DIRS and part != "/":
            return part
    return None


_TOOL_RUN_FIELDS = {
    "tool": ("type", "function.name"),
    "command": ("command", "name"),
    "input": ("input", "parameters", "arguments"),
    "output": ("output", "result", "response"),
    "error": ("error", "stderr"),
    "exit_code": ("exit_code", "status"),
}

_FILE_DIFF_FIELDS = {
    "file": ("file", "filename", "path"),
    "operation": ("operation", "action", "type"),
    "before": ("before", "old_content"),
    "after": ("after", "new_content"),
    "content": ("content", "new_content"),
}

CODEX_FIELDS = FieldMap(
    source="codex",
    timestamp_keys=("timestamp", "ts", "time", "created_at"),
    id_keys=("id", "message_id"),
    role_keys=("role", "type"),
    content_keys=("content", "message", "prompt", "text", "query", "response", "choices.0.text"),
    tool_run_keys=("tools", "tool_calls"),
    file_diff_keys=("file_changes", "diffs"),
    tool_run_fields=_TOOL_RUN_FIELDS,
    file_diff_fields=_FILE_DIFF_FIELDS,
    role_rules=CODEX_ROLE_RULES,
    id_prefix="codex",
    project_keys=("project",),
    metadata_keys={"model": "model", "tokens": "tokens", "usage": "usage"},
    unwrap_key="payload",
    session_id_fn=codex_session_id,
    project_fn=codex_project,
)

VSCODE_FIELDS = FieldMap(
    source="codex-vscode",
    timestamp_keys=CODEX_FIELDS.timestamp_keys,
    id_keys=CODEX_FIELDS.id_keys,
    role_keys=CODEX_FIELDS.role_keys,
    content_keys=CODEX_FIELDS.content_keys,
    tool_run_keys=CODEX_FIELDS.tool_run_keys,
    file_diff_keys=(),
    tool_run_fields=_TOOL_RUN_FIELDS,
    file_diff_fields=_FILE_DIFF_FIELDS,
    role_rules=CODEX_ROLE_RULES,
    id_prefix="vscode",
    fixed_project="vscode",
    metadata_keys={"file": "activeFile", "workspace": "workspace"},
    session_id_fn=codex_session_id,
)


def get_codex_home() -> Path:
    env = os.environ.get("CODEX_HOME")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".codex"


def get_vscode_storage() -> Path | None:
    """VS Code's globalStorage directory for this platform."""
    home = Path.home()
    system = platform.system()
    if system == "Darwin":
        return home / "Library" / "Application Support" / "Code" / "User" / "globalStorage"
    if system == "Linux":
        return home / ".config" / "Code" / "User" / "globalStorage"
    if system == "Windows":
        return home / "AppData" / "Roaming" / "Code" / "User" / "globalStorage"
    return None


def _with_source(field_map: FieldMap, source: str) -> FieldMap:
    return replace(field_map, source=source)


async def collect_codex_events(
    start: datetime,
    end: datetime,
    codex_home: Path | None = None,
    vscode_storage: Path | None = None,
) -> CollectedEvents:
    """Collect Codex CLI sessions, history and VS Code extension events."""
    return await asyncio.to_thread(scan_codex_events, start, end, codex_home, vscode_storage)


def scan_codex_events(
    start: datetime,
    end: datetime,
    codex_home: Path | None = None,
    vscode_storage: Path | None = None,
) -> CollectedEvents:
    home = codex_home or get_codex_home()
    result = CollectedEvents()

    for patterns, source in ((SESSION_PATTERNS, "codex-sessions"), (HISTORY_PATTERNS, "codex-history")):
        files = find_files(patterns, home)
        result.files_scanned.extend(str(p) for p in files)
        result.events.extend(collect_jsonl_events(files, _with_source(CODEX_FIELDS, source), start, end))

    storage = vscode_storage or get_vscode_storage()
    if storage is not None:
        files = find_files(VSCODE_PATTERNS, storage)
        result.files_scanned.extend(str(p) for p in files)
        result.events.extend(collect_jsonl_events(files, VSCODE_FIELDS, start, end))

    logger.info("Codex: %d events from %d files", len(result.events), len(result.files_scanned))
    return result
