"""Index orchestration: decide between reusing the cache and rebuilding.

A rebuild happens when a refresh is forced, when the cached index is stale,
or when the cache cannot be read. Otherwise the cached index is returned as
is and no registry is touched.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from grimoire.cache import IndexCache
from grimoire.errors import CacheWriteError, ErrorCode, GrimoireError
from grimoire.fetcher import Fetcher, build_http_client
from grimoire.index import merge_registries
from grimoire.models.search import SearchOutcome
from grimoire.registry import LoadResult, load_registries
from grimoire.search import DEFAULT_LIMIT, search_skills

if TYPE_CHECKING:
    from grimoire.config import Settings
    from grimoire.models.index import Index
    from grimoire.models.registry import SourceFailure

log = structlog.get_logger()


class IndexService:
    """Owns the index cache and rebuilds it from the configured registries."""

    def __init__(
        self,
        settings: Settings,
        cache: IndexCache | None = None,
        fetcher: Fetcher | None = None,
    ) -> None:
        self.settings = settings
        self.cache = cache or IndexCache(
            Path(settings.cache.index_path).expanduser(), settings.cache.ttl_hours
        )
        self._fetcher = fetcher
        # Sources dropped and whether a rebuild happened, for the last build()
        self.dropped_sources: list[SourceFailure] = []
        self.rebuilt = False

    async def build(self, force: bool = False, quiet: bool = False) -> Index:
        """Return a fresh index, rebuilding only when needed.

        Raises ``GrimoireError(NO_USABLE_SOURCES)`` when every registry source
        failed, and ``CacheWriteError`` when the new index cannot be saved.
        """
        self.dropped_sources = []
        self.rebuilt = False

        if not force and self.cache.is_fresh():
            index = self.cache.load()
            if index is not None:
                self.dropped_sources = list(index.dropped)
                self._progress(
                    quiet, "index_fresh", path=str(self.cache.path), skills=len(index.skills)
                )
                return index
            log.warning("cache_vanished", path=str(self.cache.path))

        self._progress(quiet, "index_build_started", forced=force)
        start = time.monotonic()
        result = await self._load_registries()

        self.dropped_sources = list(result.failures)
        for failure in result.failures:
            log.warning("registry_dropped", registry=failure.name, locator=failure.locator)

        if result.attempted == 0:
            log.warning(
                "no_registry_sources",
                local_dir=self.settings.registry.local_dir,
            )
        elif result.loaded == 0:
            details = "; ".join(f"{f.name}: {f.reason}" for f in result.failures)
            raise GrimoireError(
                ErrorCode.NO_USABLE_SOURCES,
                f"No registry could be loaded ({details})",
                recoverable=True,
            )

        index = merge_registries(result.local, result.remote, dropped=result.failures)
        self.rebuilt = True
        self.cache.save(index)

        self._progress(
            quiet,
            "index_built",
            registries=len(index.registries),
            skills=len(index.skills),
            elapsed_ms=_elapsed_ms(start),
            path=str(self.cache.path),
        )
        return index

    async def search(
        self,
        query: str,
        rebuild: bool = False,
        online: bool = False,
        limit: int = DEFAULT_LIMIT,
    ) -> SearchOutcome:
        """Answer ``query`` from the cached index, rebuilding it when needed.

        If a rebuilt index cannot be saved, the search still runs against it
        and the write failure is reported in ``persist_error``.
        """
        start = time.monotonic()
        persist_error: str | None = None
        try:
            index = await self.build(force=rebuild or online, quiet=True)
        except CacheWriteError as exc:
            index = exc.index
            persist_error = exc.message

        results = search_skills(index, query, limit=limit)
        return SearchOutcome(
            results=results,
            elapsed_ms=_elapsed_ms(start),
            from_cache=not self.rebuilt,
            dropped_sources=self.dropped_sources,
            persist_error=persist_error,
        )

    async def _load_registries(self) -> LoadResult:
        local_dir = Path(self.settings.registry.local_dir).expanduser()
        remotes = self.settings.registry.remotes
        if not remotes or self._fetcher is not None:
            return await load_registries(local_dir, remotes, self._fetcher)
        async with build_http_client(self.settings.fetcher) as client:
            fetcher = Fetcher(client, self.settings.fetcher)
            return await load_registries(local_dir, remotes, fetcher)

    @staticmethod
    def _progress(quiet: bool, event: str, **kwargs: Any) -> None:
        if not quiet:
            log.info(event, **kwargs)


def _elapsed_ms(start: float) -> int:
    return round((time.monotonic() - start) * 1000)
