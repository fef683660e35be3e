"""Configuration models for briefing assembly and the embedding gateway.

Classes
-------
- BriefingConfig   — character budget, per-section limits, section timeout
- EmbeddingConfig  — embedding provider credentials and batch/timeout bounds
"""
from __future__ import annotations

import os

from pydantic import BaseModel, Field

DEFAULT_MAX_CHARS: int = 6000


class BriefingConfig(BaseModel):
    """Configuration parameters for ``ContextAssembler``.

    Parameters
    ----------
    max_chars:
        Character ceiling for a rendered briefing.  Default: 6000.
    sibling_limit:
        Completed sibling agents to include.  Default: 5.
    same_role_limit:
        Same-role agents from any session.  Default: 3.
    note_limit:
        Entries per note section (tagged, cross-session, recent).
    message_limit:
        Pending messages shown in the agent-start briefing.
    mark_limit:
        Marks per mark section (team marks, past marks).
    decision_limit:
        Recent decisions/blockers/handoffs in the prompt briefing.
    completed_agent_limit:
        Completed agent summaries in the prompt briefing.
    open_task_limit:
        Open tasks listed in the prompt briefing.
    agent_file_limit:
        File paths used for file-overlap mark matching.
    section_timeout_seconds:
        Optional upper bound for producing any single section.  A section
        exceeding it is omitted.  ``None`` disables the bound.
    """

    max_chars: int = Field(default=DEFAULT_MAX_CHARS, gt=0)
    sibling_limit: int = Field(default=5, ge=1)
    same_role_limit: int = Field(default=3, ge=1)
    note_limit: int = Field(default=5, ge=1)
    message_limit: int = Field(default=5, ge=1)
    mark_limit: int = Field(default=5, ge=1)
    decision_limit: int = Field(default=5, ge=1)
    completed_agent_limit: int = Field(default=5, ge=1)
    open_task_limit: int = Field(default=10, ge=1)
    agent_file_limit: int = Field(default=20, ge=1)
    section_timeout_seconds: float | None = Field(default=None, gt=0.0)

    model_config = {"frozen": False}


class EmbeddingConfig(BaseModel):
    """Configuration for ``EmbeddingGateway`` and embedding maintenance.

    Parameters
    ----------
    account_id:
        Cloudflare account identifier.  Embedding is disabled when empty.
    api_token:
        Cloudflare API token.  Embedding is disabled when empty.
    model:
        Workers AI model name.
    dimension:
        Exact vector length every returned embedding must have.
    batch_size:
        Texts per provider request and per backfill batch.
    timeout_seconds:
        Hard timeout applied to each provider call.
    max_text_chars:
        Ceiling applied to embeddable text.
    min_index_rows:
        Embedded marks required before the similarity index is created.
    backfill_interval_seconds:
        Period of the background backfill pass.
    base_url:
        Provider API root.
    """

    account_id: str = ""
    api_token: str = ""
    model: str = "@cf/baai/bge-m3"
    dimension: int = Field(default=1024, ge=1)
    batch_size: int = Field(default=50, ge=1)
    timeout_seconds: float = Field(default=2.0, gt=0.0)
    max_text_chars: int = Field(default=2000, ge=1)
    min_index_rows: int = Field(default=10, ge=1)
    backfill_interval_seconds: float = Field(default=600.0, gt=0.0)
    base_url: str = "https://api.cloudflare.com/client/v4"

    model_config = {"frozen": False}

    @property
    def has_credentials(self) -> bool:
        """True when both the account id and the API token are set."""
        return bool(self.account_id and self.api_token)

    @property
    def endpoint(self) -> str:
        """Full URL of the embedding model run endpoint."""
        return f"{self.base_url.rstrip('/')}/accounts/{self.account_id}/ai/run/{self.model}"

    @classmethod
    def from_env(cls, **overrides: object) -> EmbeddingConfig:
        """Build a config from ``CLOUDFLARE_ACCOUNT_ID``/``CLOUDFLARE_API_TOKEN``."""
        values: dict[str, object] = {
            "account_id": os.environ.get("CLOUDFLARE_ACCOUNT_ID", ""),
            "api_token": os.environ.get("CLOUDFLARE_API_TOKEN", ""),
        }
        values.update(overrides)
        return cls(**values)


__all__ = ["BriefingConfig", "DEFAULT_MAX_CHARS", "EmbeddingConfig"]
