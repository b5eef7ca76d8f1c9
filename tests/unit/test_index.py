"""Unit tests for grimoire.index.merge_registries."""

from __future__ import annotations

import itertools
from datetime import UTC, datetime

from structlog.testing import capture_logs

from grimoire.index import merge_registries
from grimoire.models import (
    INDEX_VERSION,
    LoadedRegistry,
    RegistrySource,
    SkillRecord,
    SourceFailure,
)

NOW = datetime(2026, 10, 16, 12, 0, tzinfo=UTC)


def _registry(name: str, locator: str, *skills: tuple[str, str]) -> LoadedRegistry:
    return LoadedRegistry(
        registry=RegistrySource(name=name, locator=locator, fetched_at=NOW),
        skills=[
            SkillRecord(name=skill_name, description=description, registry=name)
            for skill_name, description in skills
        ],
    )


def _local(name: str, *skills: tuple[str, str]) -> LoadedRegistry:
    return _registry(name, f"local:/registries/{name}.json", *skills)


def _remote(name: str, *skills: tuple[str, str]) -> LoadedRegistry:
    return _registry(name, f"https://example.com/{name}.json", *skills)


class TestOrdering:
    def test_sorted_by_name(self) -> None:
        index = merge_registries(
            [_local("a", ("zeta", ""), ("alpha", "")), _local("b", ("mu", ""))], []
        )
        assert [s.name for s in index.skills] == ["alpha", "mu", "zeta"]

    def test_order_independent_of_load_order(self) -> None:
        registries = [
            _local("a", ("kilo", ""), ("bravo", "")),
            _local("b", ("echo", "")),
            _local("c", ("alpha-two", ""), ("alpha", "")),
        ]
        expected = ["alpha", "alpha-two", "bravo", "echo", "kilo"]
        for permutation in itertools.permutations(registries):
            index = merge_registries(list(permutation), [])
            assert [s.name for s in index.skills] == expected

    def test_remote_skills_sorted_with_local(self) -> None:
        index = merge_registries([_local("a", ("mike", ""))], [_remote("r", ("bravo", ""))])
        assert [s.name for s in index.skills] == ["bravo", "mike"]


class TestPrecedence:
    def test_local_wins_over_remote(self) -> None:
        index = merge_registries(
            [_local("mine", ("x", "local version"))],
            [_remote("community", ("x", "remote version"))],
        )
        assert len(index.skills) == 1
        assert index.skills[0].description == "local version"
        assert index.skills[0].registry == "mine"

    def test_earlier_remote_wins(self) -> None:
        index = merge_registries(
            [],
            [_remote("first", ("x", "from first")), _remote("second", ("x", "from second"))],
        )
        assert [s.description for s in index.skills] == ["from first"]

    def test_local_duplicates_collapse(self) -> None:
        index = merge_registries(
            [_local("a", ("x", "from a")), _local("b", ("x", "from b"))], []
        )
        assert [s.registry for s in index.skills] == ["a"]


class TestMetadata:
    def test_version_and_timestamp(self) -> None:
        index = merge_registries([], [], now=NOW)
        assert index.version == INDEX_VERSION
        assert index.updated_at == NOW
        assert index.skills == []

    def test_default_timestamp_is_now(self) -> None:
        before = datetime.now(UTC)
        index = merge_registries([], [])
        assert before <= index.updated_at <= datetime.now(UTC)

    def test_registries_include_empty_sources(self) -> None:
        index = merge_registries([_local("empty")], [_remote("community", ("x", ""))])
        assert set(index.registries) == {"empty", "community"}
        assert index.registries["empty"].locator == "local:/registries/empty.json"
        assert index.registries["community"].fetched_at == NOW

    def test_shadowed_remote_still_listed(self) -> None:
        index = merge_registries([_local("mine", ("x", ""))], [_remote("community", ("x", ""))])
        assert "community" in index.registries

    def test_dropped_sources_stored(self) -> None:
        failure = SourceFailure(name="broken", locator="local:/r/broken.json", reason="Malformed")
        index = merge_registries([_local("a", ("x", ""))], [], dropped=[failure])
        assert index.dropped == [failure]

    def test_no_dropped_sources_by_default(self) -> None:
        assert merge_registries([_local("a")], []).dropped == []

    def test_registry_name_collision_logged(self) -> None:
        with capture_logs() as logs:
            index = merge_registries(
                [_local("community", ("x", ""))], [_remote("community", ("y", ""))]
            )
        assert index.registries["community"].locator == "local:/registries/community.json"
        collisions = [e for e in logs if e["event"] == "registry_name_collision"]
        assert len(collisions) == 1
        assert collisions[0]["log_level"] == "warning"
        assert collisions[0]["also"] == "https://example.com/community.json"
