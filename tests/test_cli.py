"""Tests for the daily-vibe command line."""

import json

import pytest
from click.testing import CliRunner

from daily_vibe.cli import cli


@pytest.fixture
def env(tmp_path, monkeypatch):
    """Point every data and config location at an empty temp tree."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("DAILY_VIBE_HOME", str(tmp_path / "app"))
    monkeypatch.setenv("CLAUDE_HOME", str(tmp_path / "claude"))
    monkeypatch.setenv("CODEX_HOME", str(tmp_path / "codex"))
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_redact_test_with_text(env):
    result = CliRunner().invoke(cli, ["redact", "test", "mail dev@example.com now"])
    assert result.exit_code == 0, result.output
    assert "mail [REDACTED_EMAIL] now" in result.output
    assert "Found 1 sensitive item(s)" in result.output


def test_redact_test_sample_data(env):
    result = CliRunner().invoke(cli, ["redact", "test"])
    assert result.exit_code == 0, result.output
    assert "Test 7:" in result.output
    assert "No sensitive patterns detected" in result.output
    assert "Current redaction patterns:" in result.output


def test_config_set_and_show(env):
    runner = CliRunner()
    result = runner.invoke(cli, ["config", "set", "--provider", "anthropic", "--api-key", "sk-ant-secret1234"])
    assert result.exit_code == 0, result.output
    assert "***1234" in result.output
    assert "sk-ant-secret1234" not in result.output

    saved = json.loads((env / "app" / "config.json").read_text(encoding="utf-8"))
    assert saved["llm"] == {"provider": "anthropic", "apiKey": "sk-ant-secret1234"}

    shown = runner.invoke(cli, ["config", "set", "--show"])
    assert shown.exit_code == 0, shown.output
    assert "***1234" in shown.output
    assert "anthropic" in shown.output


def test_config_set_with_explicit_path(env):
    path = env / "custom.json"
    result = CliRunner().invoke(cli, ["--config", str(path), "config", "set", "--model", "gpt-4o"])
    assert result.exit_code == 0, result.output
    assert json.loads(path.read_text(encoding="utf-8"))["llm"]["model"] == "gpt-4o"


def test_config_set_requires_an_update(env):
    result = CliRunner().invoke(cli, ["config", "set"])
    assert result.exit_code == 2
    assert "No configuration updates provided" in result.output


def test_sources_scan(env):
    session = env / "claude" / "projects" / "app" / "s1.jsonl"
    session.parent.mkdir(parents=True)
    session.write_text("{}\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["sources", "scan"])

    assert result.exit_code == 0, result.output
    assert "Available sources: 1/5" in result.output
    assert "Total files found: 1" in result.output


def test_analyze_today_json_without_sessions(env):
    result = CliRunner().invoke(cli, ["analyze", "today", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["sessions"] == []
    assert data["dailyReport"].startswith("# Development Daily Report")
    assert data["stats"] == {"totalSessions": 0, "totalEvents": 0, "totalProblems": 0}


def test_analyze_today_saves_reports(env):
    out = env / "reports"
    result = CliRunner().invoke(cli, ["analyze", "today", "--out", str(out)])
    assert result.exit_code == 0, result.output
    assert "No coding sessions found for this day." in result.output
    [report_dir] = list(out.iterdir())
    assert sorted(p.name for p in report_dir.iterdir()) == ["daily.md", "data.json", "knowledge.md"]


def test_analyze_range_without_sessions(env):
    result = CliRunner().invoke(cli, ["analyze", "range", "--from", "2025-09-01", "--to", "2025-09-03"])
    assert result.exit_code == 0, result.output
    assert "2025-09-01 to 2025-09-03 (3 days)" in result.output
    assert "No coding sessions found in the specified date range." in result.output


def test_analyze_range_rejects_bad_dates(env):
    runner = CliRunner()
    bad = runner.invoke(cli, ["analyze", "range", "--from", "09/01/2025", "--to", "today"])
    assert bad.exit_code == 2
    assert "Invalid date" in bad.output

    reversed_range = runner.invoke(cli, ["analyze", "range", "-f", "2025-09-05", "-t", "2025-09-01"])
    assert reversed_range.exit_code == 2
    assert "Start date must not be after end date" in reversed_range.output


def test_analyze_failure_exits_with_status_one(env, monkeypatch):
    async def broken(self, start, end):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr("daily_vibe.pipeline.AnalysisPipeline.collect_sessions", broken)
    result = CliRunner().invoke(cli, ["analyze", "today"])
    assert result.exit_code == 1
