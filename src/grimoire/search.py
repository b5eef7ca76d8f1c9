"""Query engine: weighted keyword scoring over an in-memory index.

For each query token a record earns points in three independent categories.
Within a category only the strongest match counts:

    name:         exact +100, prefix +60, substring +40
    tags:         exact +30, prefix of some tag +20
    description:  substring +10

Scores add up across tokens. Zero-score records are dropped and the rest are
ranked by score, ties keeping index (name) order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from grimoire.models.search import SearchMatch

if TYPE_CHECKING:
    from grimoire.models.index import Index
    from grimoire.models.registry import SkillRecord

DEFAULT_LIMIT = 10

NAME_EXACT = 100
NAME_PREFIX = 60
NAME_SUBSTRING = 40
TAG_EXACT = 30
TAG_PREFIX = 20
DESCRIPTION_SUBSTRING = 10


def tokenize(query: str) -> list[str]:
    return query.lower().split()


def score_skill(skill: SkillRecord, tokens: list[str]) -> int:
    """Relevance of ``skill`` for already-lowercased ``tokens``."""
    name = skill.name.lower()
    description = skill.description.lower()
    tags = [tag.lower() for tag in skill.tags]

    score = 0
    for token in tokens:
        if name == token:
            score += NAME_EXACT
        elif name.startswith(token):
            score += NAME_PREFIX
        elif token in name:
            score += NAME_SUBSTRING

        if token in tags:
            score += TAG_EXACT
        elif any(tag.startswith(token) for tag in tags):
            score += TAG_PREFIX

        if token in description:
            score += DESCRIPTION_SUBSTRING
    return score


def search_skills(index: Index, query: str, limit: int = DEFAULT_LIMIT) -> list[SearchMatch]:
    """Rank the skills in ``index`` against ``query``.

    A blank query returns an empty list.
    """
    tokens = tokenize(query)
    if not tokens:
        return []

    matches = []
    for skill in index.skills:
        score = score_skill(skill, tokens)
        if score > 0:
            matches.append(SearchMatch(skill=skill, score=score))

    # sorted() is stable, so equal scores stay in name order
    matches = sorted(matches, key=lambda match: match.score, reverse=True)
    return matches[:limit]
