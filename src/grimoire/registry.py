"""Registry loading: local registry files and remote registry URLs.

Every source is loaded in isolation. A source that is missing, unreadable or
malformed is logged and recorded as a ``SourceFailure``; it never aborts the
rest of the load. Each returned ``SkillRecord`` is stamped with the name of
the registry it came from.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from grimoire.errors import ErrorCode, GrimoireError
from grimoire.models.registry import (
    LOCAL_LOCATOR_PREFIX,
    LoadedRegistry,
    RegistryFile,
    RegistrySource,
    SkillRecord,
    SourceFailure,
)

if TYPE_CHECKING:
    from grimoire.fetcher import Fetcher

log = structlog.get_logger()

# JSON schema describing registry files; lives beside them but is not a registry
_SCHEMA_FILENAME = "schema.json"


@dataclass
class LoadResult:
    """Output of one load cycle, split by origin for the merger."""

    local: list[LoadedRegistry] = field(default_factory=list)
    remote: list[LoadedRegistry] = field(default_factory=list)
    failures: list[SourceFailure] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.local) + len(self.remote) + len(self.failures)

    @property
    def loaded(self) -> int:
        return len(self.local) + len(self.remote)


def parse_registry(content: str, name: str) -> list[SkillRecord]:
    """Parse a registry document and stamp each record with ``name``.

    Raises ``GrimoireError(PARSE_FAILURE)`` when the document itself is
    malformed. Individual invalid records are skipped with a warning.
    """
    try:
        raw = json.loads(content)
        document = RegistryFile.model_validate(raw)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise GrimoireError(
            ErrorCode.PARSE_FAILURE, f"Malformed registry {name!r}: {exc}"
        ) from exc

    skills: list[SkillRecord] = []
    for position, record in enumerate(document.skills):
        if not isinstance(record, dict):
            log.warning(
                "skill_record_invalid", registry=name, position=position, error="not an object"
            )
            continue
        try:
            skills.append(SkillRecord.model_validate({**record, "registry": name}))
        except ValidationError as exc:
            log.warning(
                "skill_record_invalid",
                registry=name,
                position=position,
                skill=record.get("name"),
                error=str(exc),
            )
    return skills


def discover_local_files(local_dir: Path) -> list[Path]:
    """Registry files in ``local_dir``, sorted by filename.

    A missing directory yields no files. An unreadable one raises
    ``GrimoireError(SOURCE_UNAVAILABLE)``.
    """
    try:
        if not local_dir.is_dir():
            log.debug("registry_dir_missing", path=str(local_dir))
            return []
        return sorted(
            path
            for path in local_dir.iterdir()
            if path.suffix == ".json" and path.name != _SCHEMA_FILENAME and path.is_file()
        )
    except OSError as exc:
        raise GrimoireError(
            ErrorCode.SOURCE_UNAVAILABLE, f"Cannot list registry directory {local_dir}: {exc}"
        ) from exc


def load_local_registry(path: Path) -> LoadedRegistry:
    """Read one local registry file. Raises ``GrimoireError`` on failure."""
    name = path.stem
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise GrimoireError(
            ErrorCode.SOURCE_UNAVAILABLE, f"Cannot read registry {name!r} at {path}: {exc}"
        ) from exc

    skills = parse_registry(content, name)
    source = RegistrySource(
        name=name,
        locator=f"{LOCAL_LOCATOR_PREFIX}{path}",
        fetched_at=datetime.now(UTC),
    )
    return LoadedRegistry(registry=source, skills=skills)


async def fetch_remote_registry(fetcher: Fetcher, name: str, url: str) -> LoadedRegistry:
    """Fetch and parse one remote registry. Raises ``GrimoireError`` on failure."""
    content = await fetcher.fetch(url)
    skills = parse_registry(content, name)
    source = RegistrySource(name=name, locator=url, fetched_at=datetime.now(UTC))
    return LoadedRegistry(registry=source, skills=skills)


def load_local_registries(local_dir: Path, result: LoadResult) -> None:
    try:
        paths = discover_local_files(local_dir)
    except GrimoireError as exc:
        log.error("registry_dir_error", path=str(local_dir), error=exc.message)
        result.failures.append(
            SourceFailure(
                name=local_dir.name,
                locator=f"{LOCAL_LOCATOR_PREFIX}{local_dir}",
                reason=exc.message,
            )
        )
        return

    for path in paths:
        try:
            loaded = load_local_registry(path)
        except GrimoireError as exc:
            log.error("registry_load_error", registry=path.stem, path=str(path), error=exc.message)
            result.failures.append(
                SourceFailure(
                    name=path.stem, locator=f"{LOCAL_LOCATOR_PREFIX}{path}", reason=exc.message
                )
            )
            continue
        log.info("registry_loaded", registry=path.stem, skills=len(loaded.skills))
        result.local.append(loaded)


async def load_remote_registries(
    fetcher: Fetcher, remotes: dict[str, str], result: LoadResult
) -> None:
    """Fetch every remote concurrently; results are consumed in configured order."""
    names = list(remotes)
    outcomes = await asyncio.gather(
        *(fetch_remote_registry(fetcher, name, remotes[name]) for name in names),
        return_exceptions=True,
    )
    for name, outcome in zip(names, outcomes, strict=True):
        url = remotes[name]
        if isinstance(outcome, GrimoireError):
            log.error("remote_fetch_failed", registry=name, url=url, error=outcome.message)
            result.failures.append(SourceFailure(name=name, locator=url, reason=outcome.message))
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        log.info("registry_fetched", registry=name, url=url, skills=len(outcome.skills))
        result.remote.append(outcome)


async def load_registries(
    local_dir: Path, remotes: dict[str, str], fetcher: Fetcher | None = None
) -> LoadResult:
    """Load all configured registry sources.

    ``fetcher`` may be omitted when no remotes are configured.
    """
    result = LoadResult()
    load_local_registries(local_dir, result)
    if remotes:
        if fetcher is None:
            raise ValueError("A fetcher is required to load remote registries")
        await load_remote_registries(fetcher, remotes, result)
    return result
