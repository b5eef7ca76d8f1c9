"""HTTP fetching for remote registries.

Redirects are followed manually in a bounded loop so that a misconfigured or
hostile redirect chain fails fast instead of recursing. Every failure is
raised as ``GrimoireError``; the registry loader decides what to do with it.
"""

from __future__ import annotations

import httpx
import structlog

from grimoire.config import FetcherSettings
from grimoire.errors import ErrorCode, GrimoireError

log = structlog.get_logger()

_REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


def build_http_client(settings: FetcherSettings | None = None) -> httpx.AsyncClient:
    settings = settings or FetcherSettings()
    return httpx.AsyncClient(
        follow_redirects=False,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"Accept": "application/json"},
    )


class Fetcher:
    """Fetches registry documents over HTTP(S)."""

    def __init__(self, client: httpx.AsyncClient, settings: FetcherSettings | None = None) -> None:
        self._client = client
        self._settings = settings or FetcherSettings()

    async def fetch(self, url: str) -> str:
        """GET ``url`` and return the body text, following redirects."""
        current = url
        for _ in range(self._settings.max_redirects + 1):
            try:
                response = await self._client.get(current)
            except httpx.TimeoutException as exc:
                raise GrimoireError(
                    ErrorCode.SOURCE_UNAVAILABLE,
                    f"Timed out fetching {current}",
                    recoverable=True,
                ) from exc
            except httpx.InvalidURL as exc:
                raise GrimoireError(
                    ErrorCode.SOURCE_UNAVAILABLE, f"Invalid URL {current!r}: {exc}"
                ) from exc
            except httpx.HTTPError as exc:
                raise GrimoireError(
                    ErrorCode.SOURCE_UNAVAILABLE,
                    f"Network error fetching {current}: {exc}",
                    recoverable=True,
                ) from exc

            if response.status_code in _REDIRECT_STATUSES:
                location = response.headers.get("location")
                if not location:
                    raise GrimoireError(
                        ErrorCode.SOURCE_UNAVAILABLE,
                        f"HTTP {response.status_code} without Location header from {current}",
                    )
                # Location may be relative
                current = str(httpx.URL(current).join(location))
                log.debug("fetch_redirect", url=url, location=current)
                continue

            if not response.is_success:
                raise GrimoireError(
                    ErrorCode.SOURCE_UNAVAILABLE,
                    f"HTTP {response.status_code} fetching {current}",
                    recoverable=response.status_code >= 500,
                )
            return response.text

        raise GrimoireError(
            ErrorCode.TOO_MANY_REDIRECTS,
            f"More than {self._settings.max_redirects} redirects fetching {url}",
        )
