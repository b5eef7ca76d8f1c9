"""JSON index cache with a fixed time-to-live.

Reads degrade gracefully: a missing, unreadable, corrupt, or
unknown-version cache file is reported as absent (``load()`` returns
``None``, ``is_fresh()`` returns ``False``) and the caller rebuilds. Errors
are logged with ``exc_info=True`` so they remain observable on stderr.

Writes are the exception. An index that cannot be persisted breaks the
offline-search guarantee, so ``save()`` raises ``CacheWriteError``.
"""

from __future__ import annotations

import os
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path

import structlog
from pydantic import ValidationError

from grimoire.errors import CacheWriteError
from grimoire.models.index import INDEX_VERSION, Index

log = structlog.get_logger()


class IndexCache:
    """Single-file cache for the merged skill index."""

    def __init__(self, path: Path, ttl_hours: int = 24) -> None:
        self.path = path
        self.ttl = timedelta(hours=ttl_hours)

    def load(self) -> Index | None:
        """Read the cached index. Returns ``None`` on miss or any read failure."""
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError):
            log.warning("cache_read_error", path=str(self.path), exc_info=True)
            return None

        try:
            index = Index.model_validate_json(content)
        except ValidationError:
            log.warning("cache_corrupt", path=str(self.path), exc_info=True)
            return None

        if index.version != INDEX_VERSION:
            log.warning(
                "cache_version_unsupported",
                path=str(self.path),
                found=index.version,
                expected=INDEX_VERSION,
            )
            return None
        return index

    def is_fresh(self, now: datetime | None = None) -> bool:
        """True iff a readable index exists and is younger than the TTL."""
        index = self.load()
        if index is None:
            return False
        return self.age(index, now) < self.ttl

    @staticmethod
    def age(index: Index, now: datetime | None = None) -> timedelta:
        updated_at = index.updated_at
        if updated_at.tzinfo is None:
            updated_at = updated_at.replace(tzinfo=UTC)
        return (now or datetime.now(UTC)) - updated_at

    def save(self, index: Index) -> None:
        """Replace the cache file with ``index``.

        The content goes to a temporary sibling first and is renamed into
        place, so concurrent readers see either the old or the new file.
        """
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(index.to_json())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            log.error("cache_write_error", path=str(self.path), exc_info=True)
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise CacheWriteError(f"Cannot write index to {self.path}: {exc}", index) from exc
        log.debug("cache_saved", path=str(self.path), skills=len(index.skills))
