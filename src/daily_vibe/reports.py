"""Report generation for CLI output."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import AppConfig
from .models import AnalysisResult, DataSource, RedactionResult, SessionSummary
from .stats import get_daily_averages, get_project_distribution, get_top_sessions
from .timeutils import format_date

console = Console()


def mask_api_key(api_key: str | None) -> str:
    if not api_key:
        return "[red]not set[/red]"
    return "***" + api_key[-4:]


def print_analysis_summary(result: AnalysisResult, day_count: int | None = None):
    """Print the headline numbers of an analysis."""
    table = Table(title="Analysis Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Date Range" if day_count else "Date", result.date)
    if day_count:
        table.add_row("Days Analyzed", str(day_count))
    table.add_row("Sessions", str(result.stats.total_sessions))
    table.add_row("Events", str(result.stats.total_events))
    table.add_row("Problems Identified", str(result.stats.total_problems))

    if day_count and result.sessions:
        averages = get_daily_averages(result.stats, day_count)
        table.add_row("Sessions/Day", f"{averages['sessions_per_day']:.1f}")
        table.add_row("Events/Day", f"{averages['events_per_day']:.1f}")

    console.print(table)


def print_preview(title: str, text: str, max_lines: int):
    """Print the first lines of a generated document."""
    lines = text.split("\n")
    body = "\n".join(lines[:max_lines])
    if len(lines) > max_lines:
        body += f"\n... ({len(lines) - max_lines} more lines)"
    console.print(Panel(Text(body), title=title, border_style="dim"))


def print_sessions(sessions: list[SessionSummary], title: str = "Sessions", limit: int | None = None):
    """Print one row per session: project, event count and duration."""
    shown = get_top_sessions(sessions, limit) if limit else sessions

    table = Table(title=title)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Project", style="yellow")
    table.add_column("Events", style="green", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Started", style="dim")

    for idx, session in enumerate(shown, start=1):
        table.add_row(
            str(idx),
            session.project or "Unknown project",
            str(len(session.events)),
            f"{session.duration_minutes}min",
            format_date(session.start_time),
        )

    console.print(table)
    if limit and len(sessions) > limit:
        console.print(f"[dim]  ... and {len(sessions) - limit} more sessions[/dim]")


def print_project_distribution(sessions: list[SessionSummary], limit: int = 10):
    dist = get_project_distribution(sessions)
    if not dist:
        return

    table = Table(title="Events by Project")
    table.add_column("Project", style="cyan")
    table.add_column("Events", style="green", justify="right")

    for project, count in list(dist.items())[:limit]:
        table.add_row(project, str(count))

    console.print(table)


def print_analysis(result: AnalysisResult, output_dir: str | None = None, day_count: int | None = None, dir_name: str = ""):
    """Print the full human-readable view of an analysis."""
    print_analysis_summary(result, day_count)

    if not result.sessions:
        period = "in the specified date range" if day_count else "for this day"
        console.print(f"\n[yellow]No coding sessions found {period}.[/yellow]")
        console.print("[dim]Make sure you've used Claude Code or Codex CLI during this period.[/dim]")
        return

    console.print()
    print_preview("Daily Report Preview", result.daily_report, 15 if day_count else 10)
    print_preview("Knowledge Extraction Preview", result.knowledge, 10 if day_count else 8)

    console.print()
    if day_count:
        print_sessions(result.sessions, title="Top Sessions by Activity", limit=5)
    else:
        print_sessions(result.sessions)
    print_project_distribution(result.sessions)

    if output_dir:
        console.print(f"\n[bold green]Reports saved to: {output_dir}/{dir_name}/[/bold green]")
        for name in ("daily.md", "knowledge.md", "data.json"):
            console.print(f"[dim]  - {name}[/dim]")
    else:
        console.print("\n[dim]Tip: Use --out <directory> to save reports to files[/dim]")


def print_redaction_results(texts: list[str], results: list[RedactionResult]):
    for i, (text, result) in enumerate(zip(texts, results), start=1):
        console.print(f"[bold]Test {i}:[/bold]")
        console.print("[dim]Original:[/dim]")
        console.print(f"  {text}", markup=False)
        console.print("[dim]Redacted:[/dim]")
        console.print(f"  {result.redacted}\n", markup=False)

        if result.matches:
            console.print(f"[green]Found {len(result.matches)} sensitive item(s):[/green]")
            for idx, match in enumerate(result.matches, start=1):
                console.print(f'  {idx}. "{match.match}" -> "{match.replacement}" ({match.pattern})', markup=False)
        else:
            console.print("[dim]No sensitive patterns detected[/dim]")
        console.print()


def print_patterns(patterns: list[str]):
    console.print("[cyan]Current redaction patterns:[/cyan]")
    if not patterns:
        console.print("[dim]  No patterns configured[/dim]")
        return
    for idx, pattern in enumerate(patterns, start=1):
        console.print(f"  {idx}. {pattern}", markup=False)


def print_sources(sources: list[DataSource]):
    """Print each data source with its availability and file count."""
    table = Table(title="Data Sources")
    table.add_column("Source", style="bold")
    table.add_column("Status")
    table.add_column("Files", justify="right")
    table.add_column("Paths", style="dim")

    for source in sources:
        status = "[green]available[/green]" if source.available else "[red]not found[/red]"
        table.add_row(source.name, status, str(source.files_found), "\n".join(source.paths))

    console.print(table)

    available = [s for s in sources if s.available]
    console.print(f"Available sources: [green]{len(available)}[/green]/{len(sources)}")
    console.print(f"Total files found: [green]{sum(s.files_found for s in available)}[/green]")
    if not available:
        console.print("[red]No data sources found. Make sure Claude Code or Codex CLI have been used.[/red]")


def print_config(config: AppConfig, path: str):
    table = Table(title="Current Configuration", caption=f"Config file: {path}")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="yellow")

    table.add_row("Provider", config.llm.provider)
    table.add_row("API Key", mask_api_key(config.llm.api_key))
    table.add_row("Base URL", config.llm.base_url or "-")
    table.add_row("Model", config.llm.model or "provider default")
    table.add_row("Timezone", config.timezone)
    table.add_row("Output Directory", config.output_dir)
    table.add_row("Redaction", "[green]enabled[/green]" if config.redact.enabled else "[red]disabled[/red]")
    table.add_row("Redaction Patterns", f"{len(config.redact.patterns)} configured")

    console.print(table)
