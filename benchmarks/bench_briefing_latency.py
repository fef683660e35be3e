"""Benchmark: Briefing assembly latency — per-call p50/p99.

Measures ContextAssembler.build_smart_context() and build_prompt_context()
against an in-memory SQLite store holding a few hundred agents, notes,
tasks and marks across several sessions.
"""
from __future__ import annotations

import asyncio
import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from agent_briefing.context.assembler import ContextAssembler
from agent_briefing.store.sqlite import SQLiteStore

_SESSIONS: int = 10
_ROWS_PER_SESSION: int = 40
_WARMUP: int = 20
_ITERATIONS: int = 300


async def _populate(store: SQLiteStore) -> None:
    for s in range(_SESSIONS):
        session_id = f"s-{s}"
        await store.execute(
            "INSERT INTO sessions (id, project_id) VALUES (?, 'bench')", (session_id,)
        )
        for i in range(_ROWS_PER_SESSION):
            agent_id = f"{session_id}-a{i}"
            await store.execute(
                "INSERT INTO agents (id, session_id, agent_name, agent_type, parent_agent_id,"
                " status, context_summary) VALUES (?, ?, ?, ?, 'lead', 'completed', ?)",
                (agent_id, session_id, f"agent-{i}", f"role-{i % 5}", f"summary {i}"),
            )
            await store.execute(
                "INSERT INTO context_entries (session_id, agent_id, entry_type, content, tags)"
                " VALUES (?, ?, ?, ?, ?)",
                (session_id, agent_id, "decision" if i % 4 == 0 else "progress",
                 f"note {i}", json.dumps([f"role-{i % 5}"])),
            )
            await store.execute(
                "INSERT INTO marks (session_id, agent_id, project_id, type, title, concepts,"
                " files_read) VALUES (?, ?, 'bench', 'discovery', ?, ?, ?)",
                (session_id, agent_id, f"mark {i}", json.dumps([f"c{i % 7}"]),
                 json.dumps([f"src/file_{i % 11}.py"])),
            )
        await store.execute(
            "INSERT INTO tasks (project_id, title, status, assigned_to)"
            " VALUES ('bench', ?, 'in_progress', 'agent-1')",
            (f"task {s}",),
        )


async def _measure(call, iterations: int) -> list[float]:
    latencies_ms: list[float] = []
    for _ in range(iterations):
        t0 = time.perf_counter()
        await call()
        latencies_ms.append((time.perf_counter() - t0) * 1000)
    return latencies_ms


def _summary(operation: str, latencies_ms: list[float]) -> dict[str, object]:
    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000
    return {
        "operation": operation,
        "iterations": n,
        "total_seconds": round(total, 4),
        "ops_per_second": round(n / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p50_latency_ms": round(sorted_lats[n // 2], 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
    }


async def bench_briefing_latency() -> list[dict[str, object]]:
    """Benchmark agent-start and prompt briefing latency.

    Returns
    -------
    list of dicts with keys: operation, iterations, total_seconds,
    ops_per_second, avg_latency_ms, p50_latency_ms, p99_latency_ms.
    """
    async with SQLiteStore(":memory:") as store:
        await store.ensure_schema()
        await _populate(store)
        assembler = ContextAssembler(store)

        async def smart() -> str:
            return await assembler.build_smart_context("s-9", "agent-1", "role-1", "lead")

        async def prompt() -> str:
            return await assembler.build_prompt_context("s-9")

        await _measure(smart, _WARMUP)
        results = [
            _summary("smart_context_latency", await _measure(smart, _ITERATIONS)),
            _summary("prompt_context_latency", await _measure(prompt, _ITERATIONS)),
        ]

    for result in results:
        print(
            f"[bench_briefing_latency] {result['operation']}: "
            f"p99={result['p99_latency_ms']:.4f}ms  "
            f"mean={result['avg_latency_ms']:.4f}ms"
        )
    return results


def run_benchmark() -> list[dict[str, object]]:
    """Entry point returning the benchmark result dicts."""
    return asyncio.run(bench_briefing_latency())


if __name__ == "__main__":
    results = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "latency_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(results, fh, indent=2)
    print(f"Results saved to {output_path}")
