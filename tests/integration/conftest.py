"""Integration fixtures: an IndexService wired to tmp_path registries and cache."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from grimoire.service import IndexService

if TYPE_CHECKING:
    from grimoire.config import Settings


@pytest.fixture()
def service(settings: Settings) -> IndexService:
    return IndexService(settings)
