"""Unit-specific fixtures (no I/O beyond tmp_path)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from grimoire.cache import IndexCache
from grimoire.models import Index, RegistryInfo, SkillRecord

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def cache(tmp_path: Path) -> IndexCache:
    return IndexCache(tmp_path / "grimoire" / "index.json", ttl_hours=24)


@pytest.fixture()
def sample_index() -> Index:
    now = datetime.now(UTC)
    return Index(
        updated_at=now,
        registries={"official": RegistryInfo(locator="local:/tmp/official.json", fetched_at=now)},
        skills=[
            SkillRecord(
                name="docker",
                registry="official",
                description="Container tooling",
                tags=["containers"],
            ),
            SkillRecord(
                name="docker-compose", registry="official", description="Multi-container apps"
            ),
            SkillRecord(
                name="git-commit",
                registry="official",
                description="Write commit messages",
                tags=["git", "vcs"],
            ),
        ],
    )
