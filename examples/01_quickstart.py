#!/usr/bin/env python3
"""Example: Quickstart — agent-briefing

Minimal working example: seed a small project into a local SQLite store,
then print the agent-start briefing, the prompt briefing and the
incomplete-task warning for one agent.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install agent-briefing
"""
from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

import agent_briefing
from agent_briefing import BriefingService, EmbeddingConfig


async def seed(service: BriefingService) -> None:
    store = service.store
    await store.execute("INSERT INTO sessions (id, project_id) VALUES ('s-old', 'demo')")
    await store.execute("INSERT INTO sessions (id, project_id) VALUES ('s-now', 'demo')")
    await store.execute(
        "INSERT INTO agents (id, session_id, agent_name, agent_type, parent_agent_id, status,"
        " context_summary) VALUES ('a-be', 's-now', 'backend', 'backend', 'lead', 'completed',"
        " 'REST routes for /users are live')"
    )
    await store.execute(
        "INSERT INTO tasks (project_id, title, description, status, assigned_to, tags)"
        " VALUES ('demo', 'Build login form', 'OAuth via the /users API', 'in_progress',"
        " 'frontend', '[\"ui\"]')"
    )
    await store.execute(
        "INSERT INTO messages (project_id, from_name, to_name, content, priority)"
        " VALUES ('demo', 'backend', 'frontend', 'ids are BigInt, wrap with Number()', 'high')"
    )
    await store.execute(
        "INSERT INTO marks (session_id, agent_id, project_id, type, title, concepts)"
        " VALUES ('s-old', NULL, 'demo', 'gotcha', 'Session cookie needs SameSite=Lax',"
        " '[\"auth\"]')"
    )


async def main() -> None:
    print(f"agent-briefing version: {agent_briefing.__version__}")

    with tempfile.TemporaryDirectory() as tmp:
        # Step 1: Open a service on a fresh store (embedding disabled)
        async with BriefingService(
            Path(tmp) / "briefing.db",
            embedding_config=EmbeddingConfig(),
            create_schema=True,
        ) as service:
            await seed(service)

            # Step 2: Briefing for an agent that is starting work
            print("\n--- agent start ---")
            print(await service.build_smart_context("s-now", "frontend", "frontend", "lead"))

            # Step 3: Project briefing attached to a user prompt
            print("\n--- prompt ---")
            print(await service.build_prompt_context("s-now"))

            # Step 4: Warning when the agent stops with work left
            print("\n--- agent stop ---")
            print(await service.check_incomplete_tasks("s-now", "a-fe", "frontend"))


if __name__ == "__main__":
    asyncio.run(main())
