"""Prompt templates for the daily report and knowledge extraction."""

DAILY_PROMPT = """You are reviewing a developer's AI pair-programming sessions.

Date: {date}

Write a development daily report in Markdown with these sections:

# Development Daily Report - {date}

## Overview
2-4 sentences on what was worked on and accomplished.

## Key Output
Bullet list of features built, bugs fixed, refactors and decisions, grouped by project.

## Runs & Tests
Commands, builds and test runs that were executed, with their success or failure.

## Problems Encountered
Errors hit during the day and how (or whether) they were resolved.

## Follow-ups
A prioritized TODO list of unfinished work.

Be concrete: name files, commands and tools. Do not invent work that is not in the sessions.

<sessions>
{sessions}
</sessions>"""

KNOWLEDGE_PROMPT = """You are building a personal engineering knowledge base from a developer's AI pair-programming sessions.

Date: {date}

Extract reusable knowledge in Markdown:

# Knowledge Base - {date}

## Problems & Solutions
For each distinct problem: symptom, root cause, the fix that worked, and how to verify it.

## Rules & Best Practices
General rules worth remembering, each with a one-line justification drawn from the sessions.

## Pitfalls
Traps, misleading error messages and dead ends to avoid next time.

## Commands & Snippets
Useful commands or configuration snippets that appeared, with a short note on what they do.

Group entries by technical area (build/compile, tooling/config, dependencies, runtime, testing).
Skip generic advice. If nothing is worth keeping, say so in one line.

<sessions>
{sessions}
</sessions>"""

DAILY_INTEGRATION_PROMPT = """Merge the following partial development daily reports into one unified report.

Date: {date}

Partial reports:
{analyses}

Produce a single complete daily report that:
1. Gives one overview covering the work from every part
2. Lists key output with duplicates removed, grouped by project
3. Summarizes runs and tests, counting successes and failures
4. Merges follow-ups into one list, re-prioritized

Keep the Markdown structure of the partial reports."""

KNOWLEDGE_INTEGRATION_PROMPT = """Merge the following partial knowledge base extracts into one unified knowledge base.

Date: {date}

Partial extracts:
{analyses}

Produce a single complete knowledge base that:
1. Deduplicates similar problems, keeping the most complete solution
2. Groups entries by technical area (build/compile, tooling/config, dependencies, ...)
3. Pulls out general rules and best practices
4. Merges related pitfalls

Keep the Markdown structure of the partial extracts."""

EMPTY_DAILY_REPORT = "# Development Daily Report - {date}\n\n## Overview\nNo coding sessions found."

EMPTY_KNOWLEDGE = "# Knowledge Base - {date}\n\n## Note\nNo problems or solutions found to analyze."


def format_chunk_analyses(analyses: list[str]) -> str:
    return "\n---\n\n".join(f"## Part {index}:\n{analysis}\n" for index, analysis in enumerate(analyses, start=1))
