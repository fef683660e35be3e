"""Promotion miner: concepts recurring across marks and sessions.

Concepts that keep reappearing in independent sessions are candidates for
promotion into durable project rules.  The miner only recommends; the
promotion write itself belongs to the curation workflow.

Resolved marks count toward recurrence.  Promoted marks do not.
Failures propagate to the caller.
"""
from __future__ import annotations

import json
import logging

from agent_briefing.queries.types import PromotionCandidate
from agent_briefing.store.base import BriefingStore

logger = logging.getLogger(__name__)

_EXPLODED = """
    WITH exploded AS (
        SELECT o.id, o.session_id, o.title, o.type, o.created_at,
               concept.value AS concept
        FROM marks o, json_each(o.concepts) AS concept
        WHERE o.project_id = ?
          AND o.promoted_to IS NULL
          AND o.concepts IS NOT NULL
          AND json_array_length(o.concepts) > 0
    )
"""


async def find_promotion_candidates(
    store: BriefingStore,
    project_id: str,
    min_occurrences: int = 3,
    min_distinct_sessions: int = 2,
) -> list[PromotionCandidate]:
    """Return concepts meeting both recurrence thresholds, most frequent first.

    Parameters
    ----------
    store:
        The briefing store.
    project_id:
        Project whose marks are mined.
    min_occurrences:
        Minimum number of marks carrying the concept.
    min_distinct_sessions:
        Minimum number of distinct sessions those marks span.

    Raises
    ------
    ValueError
        If either threshold is below 1.
    """
    if min_occurrences < 1:
        raise ValueError(f"min_occurrences must be >= 1, got {min_occurrences}")
    if min_distinct_sessions < 1:
        raise ValueError(f"min_distinct_sessions must be >= 1, got {min_distinct_sessions}")

    groups = await store.fetch_all(
        _EXPLODED
        + """
        SELECT concept,
               COUNT(*) AS count,
               COUNT(DISTINCT session_id) AS session_count
        FROM exploded
        GROUP BY concept
        HAVING COUNT(*) >= ? AND COUNT(DISTINCT session_id) >= ?
        ORDER BY count DESC, concept ASC
        """,
        (project_id, min_occurrences, min_distinct_sessions),
    )
    if not groups:
        return []

    concepts = [str(group["concept"]) for group in groups]
    members = await store.fetch_all(
        _EXPLODED
        + """
        SELECT concept, id, title, type
        FROM exploded
        WHERE concept IN (SELECT value FROM json_each(?))
        ORDER BY created_at DESC, id DESC
        """,
        (project_id, json.dumps(concepts)),
    )

    candidates = {
        str(group["concept"]): PromotionCandidate(
            concept=str(group["concept"]),
            count=int(group["count"]),
            session_count=int(group["session_count"]),
        )
        for group in groups
    }
    for row in members:
        candidate = candidates[str(row["concept"])]
        candidate.mark_ids.append(int(row["id"]))
        if row["title"] not in candidate.sample_titles:
            candidate.sample_titles.append(row["title"])
        if row["type"] not in candidate.types:
            candidate.types.append(row["type"])

    logger.info(
        "promotion miner: %d candidate(s) for project %r", len(candidates), project_id
    )
    return [candidates[concept] for concept in concepts]


__all__ = ["find_promotion_candidates"]
