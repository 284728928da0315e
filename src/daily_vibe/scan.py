"""Discovery of the session log sources present on this machine."""

from pathlib import Path

from .claude_code import PROJECT_PATTERNS, SPECSTORY_PATTERNS, get_claude_home
from .codex import HISTORY_PATTERNS, SESSION_PATTERNS, VSCODE_PATTERNS, get_codex_home, get_vscode_storage
from .files import find_files
from .models import DataSource
from .pipeline import SourceRoots


def _source(name, description, source_type, base: Path | None, patterns: list[str]) -> DataSource:
    files = find_files(patterns, base) if base is not None else []
    return DataSource(
        name=name,
        description=description,
        type=source_type,
        paths=[str(base / pattern) for pattern in patterns] if base is not None else [],
        files_found=len(files),
        available=bool(files),
    )


def scan_sources(roots: SourceRoots | None = None) -> list[DataSource]:
    roots = roots or SourceRoots()
    claude_home = roots.claude_home or get_claude_home()
    codex_home = roots.codex_home or get_codex_home()
    vscode_storage = roots.vscode_storage or get_vscode_storage()

    return [
        _source(
            "Claude Code Projects",
            "Claude Code session files stored by project",
            "claude-code",
            claude_home,
            PROJECT_PATTERNS,
        ),
        _source(
            "SpecStory History",
            "SpecStory conversation history files",
            "claude-code",
            roots.search_root or Path.cwd(),
            SPECSTORY_PATTERNS,
        ),
        _source("Codex CLI Sessions", "Codex CLI active session files", "codex-cli", codex_home, SESSION_PATTERNS),
        _source("Codex CLI History", "Codex CLI conversation history", "codex-cli", codex_home, HISTORY_PATTERNS),
        _source(
            "VS Code Codex Extension",
            "VS Code Codex extension storage",
            "codex-vscode",
            vscode_storage,
            VSCODE_PATTERNS,
        ),
    ]
