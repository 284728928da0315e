"""Analysis pipeline: collect, redact, chunk, summarize, integrate."""

import asyncio
import json
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Awaitable, Callable, Literal

from rich.console import Console

from .chunker import format_sessions_for_llm, split_sessions_into_chunks
from .claude_code import collect_claude_code_events
from .codex import collect_codex_events
from .config import AppConfig
from .files import write_file
from .llm import LLMClient, create_llm_client
from .models import AnalysisResult, SessionSummary
from .problems import extract_problem_solutions
from .prompts import (
    DAILY_INTEGRATION_PROMPT,
    EMPTY_DAILY_REPORT,
    EMPTY_KNOWLEDGE,
    KNOWLEDGE_INTEGRATION_PROMPT,
    format_chunk_analyses,
)
from .redact import RedactionEngine
from .sessions import group_events_into_sessions
from .stats import build_stats, count_tokens
from .timeutils import format_date, get_date_range, get_day_range

console = Console(stderr=True)

AnalysisType = Literal["daily", "knowledge"]


@dataclass
class SourceRoots:
    """Where to look for session logs; None means the tool's default location."""

    claude_home: Path | None = None
    codex_home: Path | None = None
    search_root: Path | None = None
    vscode_storage: Path | None = None


def result_dir_name(result: AnalysisResult, prefix: str = "") -> str:
    name = result.date.replace(" to ", "_")
    return f"{prefix}-{name}" if prefix else name


class AnalysisPipeline:
    """Runs one analysis over the sessions of a day or a date range."""

    def __init__(
        self,
        config: AppConfig,
        redaction_engine: RedactionEngine | None = None,
        llm_client: LLMClient | None = None,
        source_roots: SourceRoots | None = None,
    ):
        self.config = config
        self.redaction_engine = redaction_engine or RedactionEngine.from_config(config.redact)
        self.source_roots = source_roots or SourceRoots()
        self._llm_client = llm_client

    @property
    def llm_client(self) -> LLMClient:
        # Created on first use so runs without sessions never need credentials.
        if self._llm_client is None:
            self._llm_client = create_llm_client(self.config.llm)
        return self._llm_client

    async def analyze_day(
        self, day: date | datetime, enable_redaction: bool = True, output_dir: str | Path | None = None
    ) -> AnalysisResult:
        start, end = get_day_range(day, self.config.timezone)
        return await self._analyze(start, end, format_date(start), enable_redaction, output_dir)

    async def analyze_date_range(
        self,
        first: date | datetime,
        last: date | datetime,
        enable_redaction: bool = True,
        output_dir: str | Path | None = None,
    ) -> AnalysisResult:
        start, end = get_date_range(first, last, self.config.timezone)
        if start > end:
            raise ValueError("Start date must not be after end date.")
        label = f"{format_date(start)} to {format_date(end)}"
        return await self._analyze(start, end, label, enable_redaction, output_dir, prefix="range")

    async def collect_sessions(self, start: datetime, end: datetime) -> list[SessionSummary]:
        """Read both tools' logs concurrently and group the events into sessions."""
        roots = self.source_roots
        claude, codex = await asyncio.gather(
            collect_claude_code_events(start, end, roots.claude_home, roots.search_root),
            collect_codex_events(start, end, roots.codex_home, roots.vscode_storage),
        )
        return group_events_into_sessions(claude.events + codex.events)

    async def _analyze(
        self,
        start: datetime,
        end: datetime,
        label: str,
        enable_redaction: bool,
        output_dir: str | Path | None,
        prefix: str = "",
    ) -> AnalysisResult:
        sessions = await self.collect_sessions(start, end)
        if enable_redaction:
            sessions = self.redaction_engine.redact_sessions(sessions)

        chunks = split_sessions_into_chunks(sessions)
        daily_report, knowledge = await asyncio.gather(
            self.generate_chunked_analysis(chunks, "daily", label),
            self.generate_chunked_analysis(chunks, "knowledge", label),
        )

        result = AnalysisResult(
            date=label,
            sessions=sessions,
            daily_report=daily_report,
            knowledge=knowledge,
            stats=build_stats(sessions, len(extract_problem_solutions(sessions))),
        )

        if output_dir:
            self.save_results(result, output_dir, prefix)
        return result

    def _request(self, analysis_type: AnalysisType) -> Callable[[str, str], Awaitable[str]]:
        if analysis_type == "daily":
            return self.llm_client.summarize_daily
        return self.llm_client.extract_knowledge

    async def generate_chunked_analysis(
        self, chunks: list[list[SessionSummary]], analysis_type: AnalysisType, label: str
    ) -> str:
        """One LLM pass over every chunk, merged by an integration call when there are several."""
        if not chunks:
            template = EMPTY_DAILY_REPORT if analysis_type == "daily" else EMPTY_KNOWLEDGE
            return template.format(date=label)

        request = self._request(analysis_type)
        if len(chunks) == 1:
            return await request(format_sessions_for_llm(chunks[0]), label)

        total = len(chunks)
        console.print(f"[cyan]Analyzing {total} chunks in parallel ({analysis_type})...[/cyan]")

        async def analyze_chunk(index: int, chunk: list[SessionSummary]) -> str:
            text = format_sessions_for_llm(chunk)
            console.print(f"[dim]  part {index}/{total}: {len(chunk)} sessions, ~{count_tokens(text):,} tokens[/dim]")
            analysis = await request(text, f"{label} (part {index}/{total})")
            console.print(f"[green]  done part {index}/{total}[/green]")
            return analysis

        analyses = await asyncio.gather(*(analyze_chunk(i, chunk) for i, chunk in enumerate(chunks, start=1)))

        console.print(f"[cyan]Integrating {total} {analysis_type} analyses...[/cyan]")
        return await self.integrate_chunk_analyses(list(analyses), analysis_type, label)

    async def integrate_chunk_analyses(self, analyses: list[str], analysis_type: AnalysisType, label: str) -> str:
        template = DAILY_INTEGRATION_PROMPT if analysis_type == "daily" else KNOWLEDGE_INTEGRATION_PROMPT
        prompt = template.format(date=label, analyses=format_chunk_analyses(analyses))
        return await self._request(analysis_type)(prompt, label)

    def save_results(self, result: AnalysisResult, output_dir: str | Path, prefix: str = "") -> Path:
        """Write daily.md, knowledge.md and data.json under a date-named directory."""
        report_dir = Path(output_dir) / result_dir_name(result, prefix)
        write_file(report_dir / "daily.md", result.daily_report)
        write_file(report_dir / "knowledge.md", result.knowledge)
        write_file(report_dir / "data.json", json.dumps(result.to_dict(), indent=2, ensure_ascii=False, default=str))
        return report_dir
