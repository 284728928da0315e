"""Regex-driven redaction of sensitive text before it reaches an LLM."""

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable

from .config import RedactConfig
from .models import RedactionMatch, RedactionResult, SessionSummary

logger = logging.getLogger("daily_vibe.redact")


SSN_FRAGMENT = r"\b\d{3}-\d{2}-\d{4}"

# Replacement chosen from the pattern text, first rule wins.
REPLACEMENT_RULES: list[tuple[Callable[[str], bool], str]] = [
    (lambda p: "sk-" in p or "Bearer" in p, "[REDACTED_API_KEY]"),
    (lambda p: "@" in p or "email" in p, "[REDACTED_EMAIL]"),
    (lambda p: r"\d" in p and ("-" in p or "phone" in p), "[REDACTED_PHONE]"),
    (lambda p: "ghp_" in p, "[REDACTED_GITHUB_TOKEN]"),
    (lambda p: SSN_FRAGMENT in p, "[REDACTED_SSN]"),
]


def mask_value(value: str) -> str:
    """Keep a little context from the matched value and hide the rest."""
    if len(value) <= 4:
        return "***"
    if len(value) <= 8:
        return value[:2] + "***"
    return value[:2] + "***" + value[-2:]


def generate_replacement(matched: str, pattern: str) -> str:
    for predicate, replacement in REPLACEMENT_RULES:
        if predicate(pattern):
            return replacement
    return mask_value(matched)


@dataclass(frozen=True)
class CompiledPattern:
    regex: re.Pattern
    source: str


def compile_pattern(source: str) -> CompiledPattern:
    """Compile a config pattern as written, case-insensitive and matched globally.

    Raises ``re.error`` when the pattern is invalid.
    """
    return CompiledPattern(re.compile(source, re.IGNORECASE), source)


class RedactionEngine:
    """Scrubs sensitive substrings using an ordered list of regex patterns."""

    def __init__(self, enabled: bool = True, patterns: list[str] | None = None):
        self.enabled = enabled
        self.patterns: list[CompiledPattern] = []
        for source in patterns or []:
            try:
                self.patterns.append(compile_pattern(source))
            except re.error as e:
                logger.warning("Ignoring invalid redaction pattern %r: %s", source, e)

    @classmethod
    def from_config(cls, config: RedactConfig | None) -> "RedactionEngine":
        if config is None:
            return cls(enabled=True, patterns=[])
        return cls(enabled=config.enabled, patterns=config.patterns)

    def redact(self, text: str) -> RedactionResult:
        """Redact ``text``, recording every match in pattern order.

        Each match replaces the first remaining occurrence of the same literal
        text, so identical overlapping matches can hit the same spot twice.
        """
        if not self.enabled or not text or not isinstance(text, str):
            value = text or ""
            return RedactionResult(original=value, redacted=value, matches=[])

        redacted = text
        matches: list[RedactionMatch] = []

        for pattern in self.patterns:
            for match in pattern.regex.finditer(text):
                if not match.group(0):
                    continue
                matched = match.group(0)
                replacement = generate_replacement(matched, pattern.source)
                matches.append(RedactionMatch(match=matched, pattern=pattern.source, replacement=replacement))
                redacted = redacted.replace(matched, replacement, 1)

        return RedactionResult(original=text, redacted=redacted, matches=matches)

    def redact_many(self, texts: list[str]) -> list[RedactionResult]:
        return [self.redact(text) for text in texts]

    def redact_text(self, text: str | None) -> str | None:
        return self.redact(text).redacted if text else text

    def redact_sessions(self, sessions: list[SessionSummary]) -> list[SessionSummary]:
        """Return new sessions with event content and tool input/output redacted."""
        return [
            replace(
                session,
                events=[
                    replace(
                        event,
                        content=self.redact(event.content).redacted,
                        tool_runs=[
                            replace(run, input=self.redact_text(run.input), output=self.redact_text(run.output))
                            for run in event.tool_runs
                        ],
                    )
                    for event in session.events
                ],
            )
            for session in sessions
        ]
