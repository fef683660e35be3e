"""Store subpackage.

Public surface
--------------
- BriefingStore          — abstract async store interface
- SQLiteStore            — aiosqlite-backed implementation
- StoreNotOpenError      — store used before ``open()``
- InvalidEmbeddingError  — rejected embedding vector
"""
from __future__ import annotations

from agent_briefing.store.base import BriefingStore
from agent_briefing.store.sqlite import SQLiteStore, StoreNotOpenError
from agent_briefing.store.vectors import InvalidEmbeddingError

__all__ = [
    "BriefingStore",
    "InvalidEmbeddingError",
    "SQLiteStore",
    "StoreNotOpenError",
]
