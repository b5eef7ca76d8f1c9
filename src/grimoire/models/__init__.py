from __future__ import annotations

from grimoire.models.index import INDEX_VERSION, Index, RegistryInfo
from grimoire.models.registry import (
    LoadedRegistry,
    RegistryFile,
    RegistrySource,
    SkillRecord,
    SourceFailure,
)
from grimoire.models.search import SearchMatch, SearchOutcome

__all__ = [
    # registry
    "SkillRecord",
    "RegistrySource",
    "RegistryFile",
    "LoadedRegistry",
    "SourceFailure",
    # index
    "INDEX_VERSION",
    "Index",
    "RegistryInfo",
    # search
    "SearchMatch",
    "SearchOutcome",
]
