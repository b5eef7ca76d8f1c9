"""Shared fixtures: registry files on disk and settings pointing at them."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest

from grimoire.config import LoggingSettings, Settings
from grimoire.logging_config import setup_logging

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    RegistryWriter = Callable[[Path, str, list[dict[str, Any]]], Path]


@pytest.fixture(autouse=True)
def _quiet_logging() -> None:
    setup_logging(LoggingSettings(level="WARNING", format="text"))


def _write_registry(directory: Path, name: str, skills: list[dict[str, Any]]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.json"
    path.write_text(json.dumps({"skills": skills}), encoding="utf-8")
    return path


@pytest.fixture()
def write_registry() -> RegistryWriter:
    """Write ``{"skills": [...]}`` to ``<directory>/<name>.json``."""
    return _write_registry


@pytest.fixture()
def registries_dir(tmp_path: Path) -> Path:
    """Two local registries: alpha (tagged x) and beta (mentions alpha)."""
    directory = tmp_path / "registries"
    _write_registry(
        directory,
        "official",
        [{"name": "alpha", "description": "First skill", "tags": ["x"], "source": "org/alpha"}],
    )
    _write_registry(
        directory,
        "community",
        [{"name": "beta", "description": "alpha helper", "source": "org/beta"}],
    )
    return directory


@pytest.fixture()
def settings(tmp_path: Path, registries_dir: Path) -> Settings:
    return Settings(
        registry={"local_dir": str(registries_dir)},
        cache={"index_path": str(tmp_path / "cache" / "index.json")},
    )
