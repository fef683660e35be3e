"""Context assembly subpackage.

Public surface
--------------
- ContextAssembler        — agent-start and prompt briefings
- Section, render_sections — character-budgeted rendering
- get_relevant_marks_rag  — vector similarity with recency fallback
- first_available         — generic strategy cascade driver
"""
from __future__ import annotations

from agent_briefing.context.assembler import NO_DATA_SENTINEL, ContextAssembler
from agent_briefing.context.budget import Section, render_sections
from agent_briefing.context.cascade import (
    Degraded,
    FileOverlapStrategy,
    MarkRequest,
    MarkStrategy,
    RecencyStrategy,
    VectorSimilarityStrategy,
    first_available,
    get_relevant_marks_rag,
    merge_unique,
)

__all__ = [
    "ContextAssembler",
    "Degraded",
    "FileOverlapStrategy",
    "MarkRequest",
    "MarkStrategy",
    "NO_DATA_SENTINEL",
    "RecencyStrategy",
    "Section",
    "VectorSimilarityStrategy",
    "first_available",
    "get_relevant_marks_rag",
    "merge_unique",
    "render_sections",
]
