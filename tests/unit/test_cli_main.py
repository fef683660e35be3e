"""Unit tests for agent_briefing.cli.main.

Uses Click's test runner (CliRunner) against a temporary SQLite file that
is seeded before each invocation.  Embedding credentials are removed from
the environment so no provider is contacted.
"""
from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from agent_briefing.cli.main import cli
from agent_briefing.context.assembler import NO_DATA_SENTINEL
from agent_briefing.store.sqlite import SQLiteStore
from tests.conftest import Seeder

Populate = Callable[[Seeder], Awaitable[None]]


def _prepare(db_path: Path, populate: Populate | None = None) -> str:
    """Create the schema at ``db_path``, optionally seed it, and return the path."""

    async def _main() -> None:
        async with SQLiteStore(db_path) as store:
            await store.ensure_schema()
            if populate is not None:
                await populate(Seeder(store))

    asyncio.run(_main())
    return str(db_path)


async def _duckdb_marks(seed: Seeder) -> None:
    await seed.session("S1", "P1", started=1)
    await seed.session("S2", "P1", started=2)
    await seed.mark("S1", "P1", "duckdb locks", "gotcha", concepts=["duckdb"], at=1)
    await seed.mark("S1", "P1", "duckdb lists", "pattern", concepts=["duckdb"], at=2)
    await seed.mark("S2", "P1", "duckdb locks", "gotcha", concepts=["duckdb"], at=3)


async def _busy_agent(seed: Seeder) -> None:
    await seed.session("S1", "P1")
    await seed.task("P1", "Build login", "in_progress", "frontend")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def no_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CLOUDFLARE_ACCOUNT_ID", raising=False)
    monkeypatch.delenv("CLOUDFLARE_API_TOKEN", raising=False)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class TestVersionCommand:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "agent-briefing" in result.output
        assert "0.1.0" in result.output


class TestBriefingCommands:
    def test_smart(self, runner: CliRunner, db_path: Path) -> None:
        path = _prepare(db_path, _busy_agent)
        result = runner.invoke(cli, ["--db-path", path, "smart", "S1", "frontend"])
        assert result.exit_code == 0
        assert "[agent briefing for frontend]" in result.output
        assert "- [in_progress] Build login" in result.output

    def test_smart_with_role_and_parent(self, runner: CliRunner, db_path: Path) -> None:
        path = _prepare(db_path, _busy_agent)
        result = runner.invoke(
            cli,
            [
                "--db-path", path, "smart", "S1", "frontend",
                "--agent-type", "ui", "--parent-id", "lead",
            ],
        )
        assert result.exit_code == 0
        assert "## Your Assigned Tasks" in result.output

    def test_prompt_sentinel_on_empty_store(self, runner: CliRunner, db_path: Path) -> None:
        path = _prepare(db_path)
        result = runner.invoke(cli, ["--db-path", path, "prompt", "S1"])
        assert result.exit_code == 0
        assert result.output.strip() == NO_DATA_SENTINEL

    def test_incomplete_warning(self, runner: CliRunner, db_path: Path) -> None:
        path = _prepare(db_path, _busy_agent)
        result = runner.invoke(
            cli, ["--db-path", path, "incomplete", "S1", "frontend", "--agent-id", "fe"]
        )
        assert result.exit_code == 0
        assert "stopping with 1 incomplete task(s)" in result.output

    def test_incomplete_none(self, runner: CliRunner, db_path: Path) -> None:
        path = _prepare(db_path)
        result = runner.invoke(cli, ["--db-path", path, "incomplete", "S1", "frontend"])
        assert result.exit_code == 0
        assert "No incomplete tasks" in result.output


class TestCurationCommands:
    def test_candidates_table(self, runner: CliRunner, db_path: Path) -> None:
        path = _prepare(db_path, _duckdb_marks)
        result = runner.invoke(cli, ["--db-path", path, "candidates", "P1"])
        assert result.exit_code == 0
        assert "duckdb" in result.output

    def test_candidates_json(self, runner: CliRunner, db_path: Path) -> None:
        path = _prepare(db_path, _duckdb_marks)
        result = runner.invoke(cli, ["--db-path", path, "candidates", "P1", "--json-output"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data[0]["concept"] == "duckdb"
        assert data[0]["count"] == 3
        assert data[0]["session_count"] == 2

    def test_candidates_none(self, runner: CliRunner, db_path: Path) -> None:
        path = _prepare(db_path, _duckdb_marks)
        result = runner.invoke(
            cli, ["--db-path", path, "candidates", "P1", "--min-sessions", "3"]
        )
        assert result.exit_code == 0
        assert "No promotion candidates" in result.output

    def test_candidates_invalid_threshold(self, runner: CliRunner, db_path: Path) -> None:
        path = _prepare(db_path)
        result = runner.invoke(
            cli, ["--db-path", path, "candidates", "P1", "--min-occurrences", "0"]
        )
        assert result.exit_code == 1
        assert "min_occurrences" in result.output

    def test_curation_report(self, runner: CliRunner, db_path: Path, tmp_path: Path) -> None:
        path = _prepare(db_path, _duckdb_marks)
        (tmp_path / "memory" / "frontend").mkdir(parents=True)
        (tmp_path / "memory" / "frontend" / "MEMORY.md").write_text("x", encoding="utf-8")
        result = runner.invoke(
            cli,
            ["--db-path", path, "curation", "P1", "--memory-dir", str(tmp_path / "memory")],
        )
        assert result.exit_code == 0
        assert "never" in result.output
        assert "frontend" in result.output


class TestEmbeddingsCommands:
    def test_backfill_disabled(self, runner: CliRunner, db_path: Path) -> None:
        path = _prepare(db_path, _duckdb_marks)
        result = runner.invoke(cli, ["--db-path", path, "embeddings", "backfill"])
        assert result.exit_code == 0
        assert "Embedding disabled" in result.output

    def test_ensure_index_below_threshold(self, runner: CliRunner, db_path: Path) -> None:
        path = _prepare(db_path, _duckdb_marks)
        result = runner.invoke(cli, ["--db-path", path, "embeddings", "ensure-index"])
        assert result.exit_code == 0
        assert "unchanged" in result.output
