"""File discovery and JSONL reading."""

import json
import logging
from pathlib import Path
from typing import Any, Iterator

logger = logging.getLogger("daily_vibe.files")


def expand_tilde(path: str | Path) -> Path:
    return Path(path).expanduser()


def find_files(patterns: list[str], cwd: str | Path | None = None) -> list[Path]:
    """Glob ``patterns`` under ``cwd`` (default: home). Missing directories give []."""
    base = expand_tilde(cwd) if cwd else Path.home()
    if not base.is_dir():
        return []

    found: dict[Path, None] = {}
    for pattern in patterns:
        try:
            for path in sorted(base.glob(pattern)):
                if path.is_file():
                    found[path.resolve()] = None
        except OSError as e:
            logger.warning("Cannot scan %s for %s: %s", base, pattern, e)
    return list(found)


def read_jsonl(path: str | Path) -> Iterator[Any]:
    """Yield one parsed JSON value per non-blank line, skipping bad lines."""
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            for line_num, line in enumerate(handle, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield json.loads(line)
                except json.JSONDecodeError:
                    logger.debug("Skipping invalid JSON at %s:%d", path, line_num)
    except OSError as e:
        logger.warning("Cannot read %s: %s", path, e)


def write_file(path: str | Path, content: str):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
