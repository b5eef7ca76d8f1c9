from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

LOCAL_LOCATOR_PREFIX = "local:"


class SkillRecord(BaseModel):
    """Single skill entry from a registry file, stamped with its registry."""

    # Registries may carry keys this tool does not interpret; keep them.
    model_config = ConfigDict(extra="allow")

    name: str
    description: str = ""
    source: str = ""
    tags: list[str] = []
    version: str | None = None
    verified: bool = False
    registry: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Skill name must not be empty")
        return v

    @field_validator("description", "source", mode="before")
    @classmethod
    def none_to_empty(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator("version", mode="before")
    @classmethod
    def numeric_version_to_str(cls, v: object) -> object:
        # "version": 1.2 in hand-written registries
        if isinstance(v, int | float) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: object) -> object:
        if v is None:
            return []
        if isinstance(v, list):
            return [str(tag) for tag in v if tag is not None]
        return v


class RegistrySource(BaseModel):
    """One origin of skill records: a local file or a URL."""

    name: str
    locator: str  # "local:<path>" or an http(s) URL
    fetched_at: datetime

    @property
    def is_local(self) -> bool:
        return self.locator.startswith(LOCAL_LOCATOR_PREFIX)


class RegistryFile(BaseModel):
    """Top-level shape of a registry document: ``{"skills": [...]}``.

    Records stay raw here so one bad record does not reject the whole file.
    """

    skills: list[Any] = []


class LoadedRegistry(BaseModel):
    registry: RegistrySource
    skills: list[SkillRecord]


class SourceFailure(BaseModel):
    """A registry source dropped from the current build cycle."""

    name: str
    locator: str
    reason: str
