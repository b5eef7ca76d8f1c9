"""Index merging: fold loaded registries into one deduplicated snapshot."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from grimoire.models.index import INDEX_VERSION, Index, RegistryInfo

if TYPE_CHECKING:
    from grimoire.models.registry import LoadedRegistry, SkillRecord, SourceFailure

log = structlog.get_logger()


def merge_registries(
    local: list[LoadedRegistry],
    remote: list[LoadedRegistry],
    now: datetime | None = None,
    dropped: list[SourceFailure] | None = None,
) -> Index:
    """Build an ``Index`` from loaded registries.

    A skill name is claimed by the first registry that provides it: local
    registries before remote ones, and remote ones in the order given. The
    result is always sorted by name so load order never reaches the index.

    ``dropped`` lists the sources that failed to load; it is stored with the
    index so a later reuse of the cache can still report them.
    """
    seen: dict[str, SkillRecord] = {}
    for loaded in [*local, *remote]:
        for skill in loaded.skills:
            holder = seen.get(skill.name)
            if holder is not None:
                log.debug(
                    "skill_shadowed",
                    skill=skill.name,
                    kept=holder.registry,
                    dropped=skill.registry,
                )
                continue
            seen[skill.name] = skill

    registries: dict[str, RegistryInfo] = {}
    for loaded in [*local, *remote]:
        name = loaded.registry.name
        if name in registries:
            # Skills from both sources carry the same registry tag; provenance
            # records only the first locator.
            log.warning(
                "registry_name_collision",
                registry=name,
                kept=registries[name].locator,
                also=loaded.registry.locator,
            )
            continue
        registries[name] = RegistryInfo(
            locator=loaded.registry.locator, fetched_at=loaded.registry.fetched_at
        )

    return Index(
        version=INDEX_VERSION,
        updated_at=now or datetime.now(UTC),
        registries=registries,
        skills=sorted(seen.values(), key=lambda skill: skill.name),
        dropped=list(dropped or []),
    )
