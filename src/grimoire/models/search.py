from __future__ import annotations

from pydantic import BaseModel

from grimoire.models.registry import SkillRecord, SourceFailure


class SearchMatch(BaseModel):
    """Single ranked result returned by search_skills."""

    skill: SkillRecord
    score: int


class SearchOutcome(BaseModel):
    results: list[SearchMatch]
    elapsed_ms: int
    from_cache: bool
    dropped_sources: list[SourceFailure] = []
    persist_error: str | None = None  # set when the rebuilt index could not be saved
