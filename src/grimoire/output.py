"""Rendering of search results for the terminal and for ``--json``."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from grimoire.models.registry import SourceFailure
    from grimoire.models.search import SearchMatch

NO_RESULTS = "No skills found matching your search."
INSTALL_HINT = "Install with: /grimoire install <name>"


def format_results(
    results: list[SearchMatch], json_output: bool = False, verbose: bool = False
) -> str:
    if json_output:
        payload = [
            {**match.skill.model_dump(mode="json"), "score": match.score} for match in results
        ]
        return json.dumps(payload, indent=2)

    if not results:
        return NO_RESULTS

    lines = [f"Found {len(results)} skill(s):\n"]
    for match in results:
        skill = match.skill
        verified = " ✓" if skill.verified else ""
        tags = f" [{', '.join(skill.tags)}]" if skill.tags else ""

        lines.append(f"  {skill.name}{verified}")
        lines.append(f"    {skill.description}")
        if verbose:
            lines.append(f"    Source: {skill.source}")
            lines.append(f"    Registry: {skill.registry}{tags}")
            lines.append(f"    Score: {match.score}")
        elif tags:
            lines.append(f"    Tags:{tags}")
        lines.append("")

    lines.append(INSTALL_HINT)
    return "\n".join(lines)


def format_dropped_sources(failures: list[SourceFailure]) -> list[str]:
    """One warning line per registry source left out of the index."""
    return [f"Warning: registry '{f.name}' skipped ({f.reason})" for f in failures]
