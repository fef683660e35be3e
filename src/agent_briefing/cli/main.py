"""CLI entry point for agent-briefing.

Invoked as::

    agent-briefing [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m agent_briefing.cli.main

Commands
--------
- version     — Show version information
- smart       — Print the agent-start briefing
- prompt      — Print the prompt-submission briefing
- incomplete  — Print the incomplete-task warning for a stopping agent
- candidates  — List promotion candidates for a project
- curation    — Show the curation report for a project
- embeddings  — Embedding maintenance command group

Embeddings sub-commands
-----------------------
- embeddings backfill      — Embed marks that have no embedding
- embeddings ensure-index  — Create the similarity index when eligible
"""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import click
from rich.console import Console
from rich.table import Table

from agent_briefing.convenience import BriefingService

console = Console()

T = TypeVar("T")


def _run(ctx: click.Context, action: Callable[[BriefingService], Awaitable[T]]) -> T:
    """Open a ``BriefingService`` for the configured database and run ``action``."""
    db_path: str | None = ctx.obj.get("db_path")

    async def _main() -> T:
        async with BriefingService(db_path) as service:
            return await action(service)

    return asyncio.run(_main())


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="agent-briefing")
@click.option("--db-path", default=None, help="Path to the SQLite store.")
@click.option("--verbose", "-v", is_flag=True, help="Log to stderr at INFO level.")
@click.pass_context
def cli(ctx: click.Context, db_path: str | None, verbose: bool) -> None:
    """Budgeted context briefings for multi-agent sessions"""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db_path
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            stream=sys.stderr,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from agent_briefing import __version__

    console.print(f"[bold]agent-briefing[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# Briefings
# ---------------------------------------------------------------------------


@cli.command(name="smart")
@click.argument("session_id")
@click.argument("agent_name")
@click.option("--agent-type", default=None, help="Role of the starting agent.")
@click.option("--parent-id", default=None, help="Parent agent id.")
@click.pass_context
def smart_command(
    ctx: click.Context,
    session_id: str,
    agent_name: str,
    agent_type: str | None,
    parent_id: str | None,
) -> None:
    """Print the agent-start briefing for AGENT_NAME in SESSION_ID."""
    text = _run(
        ctx,
        lambda service: service.build_smart_context(session_id, agent_name, agent_type, parent_id),
    )
    click.echo(text)


@cli.command(name="prompt")
@click.argument("session_id")
@click.pass_context
def prompt_command(ctx: click.Context, session_id: str) -> None:
    """Print the prompt-submission briefing for SESSION_ID."""
    click.echo(_run(ctx, lambda service: service.build_prompt_context(session_id)))


@cli.command(name="incomplete")
@click.argument("session_id")
@click.argument("agent_name")
@click.option("--agent-id", default="", help="Agent record id.")
@click.pass_context
def incomplete_command(
    ctx: click.Context, session_id: str, agent_name: str, agent_id: str
) -> None:
    """Print a warning if AGENT_NAME still has incomplete tasks."""
    warning = _run(
        ctx, lambda service: service.check_incomplete_tasks(session_id, agent_id, agent_name)
    )
    if warning is None:
        console.print("[green]No incomplete tasks.[/green]")
        return
    click.echo(warning)


# ---------------------------------------------------------------------------
# Curation
# ---------------------------------------------------------------------------


@cli.command(name="candidates")
@click.argument("project_id")
@click.option("--min-occurrences", default=3, show_default=True, type=int)
@click.option("--min-sessions", default=2, show_default=True, type=int)
@click.option("--json-output", is_flag=True, help="Output raw JSON instead of a table.")
@click.pass_context
def candidates_command(
    ctx: click.Context,
    project_id: str,
    min_occurrences: int,
    min_sessions: int,
    json_output: bool,
) -> None:
    """List promotion candidates for PROJECT_ID."""
    try:
        candidates = _run(
            ctx,
            lambda service: service.find_promotion_candidates(
                project_id, min_occurrences, min_sessions
            ),
        )
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)

    if json_output:
        click.echo(json.dumps([c.model_dump() for c in candidates], indent=2))
        return

    if not candidates:
        console.print("[yellow]No promotion candidates.[/yellow]")
        return

    table = Table(title=f"Promotion candidates for {project_id}", show_lines=False)
    table.add_column("Concept", style="cyan")
    table.add_column("Marks", justify="right")
    table.add_column("Sessions", justify="right")
    table.add_column("Types", style="green")
    table.add_column("Sample titles")
    for candidate in candidates:
        table.add_row(
            candidate.concept,
            str(candidate.count),
            str(candidate.session_count),
            ", ".join(candidate.types),
            "; ".join(candidate.sample_titles[:3]),
        )
    console.print(table)


@cli.command(name="curation")
@click.argument("project_id")
@click.option("--memory-dir", default=None, help="Directory holding <agent>/MEMORY.md files.")
@click.pass_context
def curation_command(ctx: click.Context, project_id: str, memory_dir: str | None) -> None:
    """Show what accumulated in PROJECT_ID since the last curation."""
    from agent_briefing.curation import get_curation_stats

    directory = Path(memory_dir) if memory_dir else None
    stats = _run(ctx, lambda service: get_curation_stats(service.store, project_id, directory))

    table = Table(title=f"Curation report for {project_id}", show_lines=True)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("last_curated", stats.last_curated or "never")
    table.add_row("sessions_since", str(stats.sessions_since))
    table.add_row("marks_since", str(stats.marks_since))
    table.add_row("promotion_candidates", str(stats.promotion_candidates))
    table.add_row("agent_memories", ", ".join(m.name for m in stats.agent_memories) or "-")
    console.print(table)


# ---------------------------------------------------------------------------
# embeddings command group
# ---------------------------------------------------------------------------


@cli.group(name="embeddings")
def embeddings_group() -> None:
    """Embedding maintenance commands."""


@embeddings_group.command(name="backfill")
@click.pass_context
def embeddings_backfill(ctx: click.Context) -> None:
    """Embed every mark that has no embedding yet."""

    async def _backfill(service: BriefingService) -> int | None:
        if not service.is_embedding_enabled():
            return None
        return await service.backfill_embeddings()

    count = _run(ctx, _backfill)
    if count is None:
        console.print("[yellow]Embedding disabled: set CLOUDFLARE_ACCOUNT_ID and CLOUDFLARE_API_TOKEN.[/yellow]")
        return
    console.print(f"[green]Embedded {count} mark(s).[/green]")


@embeddings_group.command(name="ensure-index")
@click.pass_context
def embeddings_ensure_index(ctx: click.Context) -> None:
    """Create the similarity index if enough marks are embedded."""
    created = _run(ctx, lambda service: service.ensure_similarity_index())
    if created:
        console.print("[green]Similarity index created.[/green]")
    else:
        console.print("Similarity index unchanged.")


if __name__ == "__main__":
    cli()
