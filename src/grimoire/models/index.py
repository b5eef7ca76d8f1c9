from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from grimoire.models.registry import SkillRecord, SourceFailure

INDEX_VERSION = "1.0.0"


class RegistryInfo(BaseModel):
    """Provenance of one registry as recorded in the index file."""

    model_config = ConfigDict(populate_by_name=True)

    # Stored under "source" on disk
    locator: str = Field(alias="source")
    fetched_at: datetime


class Index(BaseModel):
    """Merged snapshot of all registries. Skills are sorted by name."""

    version: str = INDEX_VERSION
    updated_at: datetime
    registries: dict[str, RegistryInfo] = {}
    skills: list[SkillRecord] = []
    # Sources left out of this build; absent in files written before it existed
    dropped: list[SourceFailure] = []

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)
