"""Normalization of raw session log records into SessionEvents.

Each source describes its raw layout with a ``FieldMap``: every fallback chain
(``timestamp`` or ``ts`` or ``time`` ...) lives in one table so the mapping from
a raw record to a ``SessionEvent`` can be read and tested in one place.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from .files import read_jsonl
from .models import FileDiff, Role, SessionEvent, ToolRun
from .timeutils import is_within_range, parse_timestamp

logger = logging.getLogger("daily_vibe.normalize")

RoleRules = tuple[tuple[Role, tuple[str, ...]], ...]

# Checked in order, first substring hit wins.
CLAUDE_ROLE_RULES: RoleRules = (
    ("user", ("user", "human")),
    ("assistant", ("assistant", "claude")),
    ("tool", ("tool",)),
    ("system", ("system", "summary")),
)

CODEX_ROLE_RULES: RoleRules = (
    ("user", ("user", "human")),
    ("assistant", ("assistant", "bot", "ai")),
    ("tool", ("tool", "function")),
    ("system", ("system",)),
)

TEXT_BLOCK_TYPES = ("text", "input_text", "output_text")
FILE_OPERATIONS = ("create", "update", "delete")


def normalize_role(raw: Any, rules: RoleRules = CLAUDE_ROLE_RULES) -> Role:
    """Classify a raw role/type string; unknown or empty values become ``user``."""
    value = str(raw).lower() if raw else ""
    for role, keywords in rules:
        if any(keyword in value for keyword in keywords):
            return role
    return "user"


def to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def dig(record: dict, path: str) -> Any:
    """Look up a dotted key path (digits index lists), None when any step is missing."""
    value: Any = record
    for part in path.split("."):
        if isinstance(value, dict):
            value = value.get(part)
        elif isinstance(value, list) and part.isdigit():
            index = int(part)
            value = value[index] if index < len(value) else None
        else:
            return None
    return value


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def first_value(record: dict, keys: tuple[str, ...]) -> Any:
    """Return the first non-empty value among ``keys``. Zero counts as a value."""
    for key in keys:
        value = dig(record, key)
        if not _is_empty(value):
            return value
    return None


def as_text(value: Any) -> str | None:
    if _is_empty(value):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return to_json(value)
    return str(value)


def render_block(block: Any) -> str:
    if isinstance(block, str):
        return block
    if not isinstance(block, dict):
        return to_json(block)

    block_type = block.get("type")
    if block_type in TEXT_BLOCK_TYPES:
        return str(block.get("text") or "")
    if block_type == "tool_use":
        return f"[Tool: {block.get('name')}] {to_json(block.get('input'))}"
    if block_type == "tool_result":
        return f"[Tool Result] {render_value(block.get('content'))}"
    return to_json(block)


def render_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "\n".join(render_block(item) for item in value)
    return to_json(value)


def _special_content(record: dict) -> str | None:
    """Claude Code records that carry no message but still mean something."""
    if not _is_empty(record.get("toolUseResult")):
        return f"[Tool Result] {to_json(record['toolUseResult'])}"
    if record.get("type") == "summary" and record.get("summary"):
        return f"[Session Summary] {record['summary']}"
    return None


def extract_content(record: dict, fallback_keys: tuple[str, ...] = ()) -> str:
    """Flatten a record's message into a single string."""
    message = record.get("message")
    if isinstance(message, dict):
        body = message.get("content")
        if isinstance(body, str):
            return body
        if isinstance(body, list):
            return "\n".join(render_block(item) for item in body)
        return to_json(message)

    special = _special_content(record)
    if special is not None:
        return special

    value = first_value(record, fallback_keys)
    if value is not None:
        return render_value(value)
    return to_json(record)


def _exit_code(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_tool_runs(raw: Any, fields: dict[str, tuple[str, ...]]) -> list[ToolRun]:
    if not isinstance(raw, list):
        return []

    runs = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        runs.append(
            ToolRun(
                tool=as_text(first_value(item, fields["tool"])),
                command=as_text(first_value(item, fields["command"])),
                input=as_text(first_value(item, fields["input"])),
                output=as_text(first_value(item, fields["output"])),
                error=as_text(first_value(item, fields["error"])),
                exit_code=_exit_code(first_value(item, fields["exit_code"])),
            )
        )
    return runs


def parse_file_diffs(raw: Any, fields: dict[str, tuple[str, ...]]) -> list[FileDiff]:
    if not isinstance(raw, list):
        return []

    diffs = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        operation = str(first_value(item, fields["operation"]) or "update").lower()
        diffs.append(
            FileDiff(
                file=as_text(first_value(item, fields["file"])) or "unknown",
                operation=operation if operation in FILE_OPERATIONS else "update",
                before=as_text(first_value(item, fields["before"])),
                after=as_text(first_value(item, fields["after"])),
                content=as_text(first_value(item, fields["content"])),
            )
        )
    return diffs


def session_id_from_path(file_path: str | Path) -> str:
    """The file name without its extension."""
    return Path(file_path).stem or "unknown"


def project_from_path(file_path: str | Path) -> str | None:
    """The name of the directory holding the file."""
    return Path(file_path).parent.name or None


@dataclass(frozen=True)
class FieldMap:
    """Where each SessionEvent field lives in one source's raw records."""

    source: str
    timestamp_keys: tuple[str, ...]
    id_keys: tuple[str, ...]
    role_keys: tuple[str, ...]
    content_keys: tuple[str, ...]
    tool_run_keys: tuple[str, ...]
    file_diff_keys: tuple[str, ...]
    tool_run_fields: dict[str, tuple[str, ...]]
    file_diff_fields: dict[str, tuple[str, ...]]
    role_rules: RoleRules = CLAUDE_ROLE_RULES
    id_prefix: str = ""
    project_keys: tuple[str, ...] = ()
    fixed_project: str | None = None
    metadata_keys: dict[str, str] = field(default_factory=dict)
    unwrap_key: str | None = None
    session_id_fn: Callable[[str | Path], str] = session_id_from_path
    project_fn: Callable[[str | Path], str | None] = project_from_path


def _flatten(record: dict, unwrap_key: str | None) -> dict:
    """Overlay top-level fields on a nested body (e.g. Codex ``payload``)."""
    if not unwrap_key:
        return record
    nested = record.get(unwrap_key)
    if not isinstance(nested, dict):
        return record
    merged = dict(nested)
    merged.update((key, value) for key, value in record.items() if key != unwrap_key)
    return merged


def build_event(record: Any, file_path: str | Path, field_map: FieldMap) -> SessionEvent | None:
    """Map one raw record to a SessionEvent; None when no timestamp parses."""
    if not isinstance(record, dict):
        return None
    record = _flatten(record, field_map.unwrap_key)

    timestamp = parse_timestamp(first_value(record, field_map.timestamp_keys))
    if timestamp is None:
        return None

    session_id = field_map.session_id_fn(file_path)
    event_id = first_value(record, field_map.id_keys)
    if event_id is None:
        millis = int(timestamp.timestamp() * 1000)
        prefix = f"{field_map.id_prefix}_" if field_map.id_prefix else ""
        event_id = f"{prefix}{session_id}_{millis}"

    project = field_map.fixed_project or as_text(first_value(record, field_map.project_keys))
    if project is None:
        project = field_map.project_fn(file_path)

    metadata: dict[str, Any] = {"filePath": str(file_path), "source": field_map.source}
    for name, key in field_map.metadata_keys.items():
        value = dig(record, key)
        if value is not None:
            metadata[name] = value

    return SessionEvent(
        id=str(event_id),
        timestamp=timestamp,
        role=normalize_role(first_value(record, field_map.role_keys), field_map.role_rules),
        content=extract_content(record, field_map.content_keys),
        session_id=session_id,
        project=project,
        tool_runs=parse_tool_runs(first_value(record, field_map.tool_run_keys), field_map.tool_run_fields),
        file_diffs=parse_file_diffs(first_value(record, field_map.file_diff_keys), field_map.file_diff_fields),
        metadata=metadata,
    )


def normalize_record(record: Any, file_path: str | Path, field_map: FieldMap) -> SessionEvent | None:
    """Like ``build_event`` but a broken record is logged and skipped."""
    try:
        return build_event(record, file_path, field_map)
    except Exception as e:
        logger.warning("Skipping %s record from %s: %s", field_map.source, file_path, e)
        return None


def collect_jsonl_events(files: list[Path], field_map: FieldMap, start, end) -> list[SessionEvent]:
    """Normalize every record of every file, keeping events inside ``start``..``end``."""
    events = []
    for path in files:
        for record in read_jsonl(path):
            event = normalize_record(record, path, field_map)
            if event and is_within_range(event.timestamp, start, end):
                events.append(event)
    return events


# Markdown conversation exports (SpecStory)

MARKDOWN_HEADING_RE = re.compile(r"#{1,6}\s*.*?(\d{4}-\d{2}-\d{2}[T\s]\d{2}:\d{2}:\d{2})")

MARKDOWN_ROLE_CUES: tuple[tuple[Role, tuple[str, ...]], ...] = (
    ("user", ("user:", "human:")),
    ("assistant", ("assistant:", "claude:")),
)


def _role_cue(line: str) -> Role | None:
    lowered = line.lower()
    for role, cues in MARKDOWN_ROLE_CUES:
        if any(cue in lowered for cue in cues):
            return role
    return None


def parse_markdown_conversation(
    text: str,
    file_path: str | Path,
    start,
    end,
    project: str = "specstory",
    source: str = "specstory-md",
) -> list[SessionEvent]:
    """Split a markdown transcript into events at timestamped headings.

    A block is kept once it has both a timestamp and a role cue, holds
    non-blank text and falls inside ``start``..``end`` inclusive.
    """
    session_id = session_id_from_path(file_path)
    events: list[SessionEvent] = []
    timestamp = None
    role: Role | None = None
    lines: list[str] = []

    def flush():
        block = "\n".join(lines).strip()
        if timestamp is None or role is None or not block:
            return
        if not is_within_range(timestamp, start, end):
            return
        events.append(
            SessionEvent(
                id=f"md_{session_id}_{len(events)}",
                timestamp=timestamp,
                role=role,
                content=block,
                session_id=session_id,
                project=project,
                metadata={"filePath": str(file_path), "source": source},
            )
        )

    for line in text.splitlines():
        heading = MARKDOWN_HEADING_RE.search(line)
        if heading:
            flush()
            timestamp = parse_timestamp(heading.group(1))
            lines = []

        cue = _role_cue(line)
        if cue is not None:
            role = cue

        lines.append(line)

    flush()
    return events
