"""Approximate name matching used to suggest corrections for unknown tables and columns."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

DEFAULT_MAX_DISTANCE = 3
DEFAULT_LIMIT = 5


@dataclass(frozen=True)
class SimilarityCandidate:
    name: str
    distance: int


def edit_distance(a: str, b: str) -> int:
    """
    Case-insensitive Levenshtein distance between two strings.

    Row ``i`` of the table covers the first ``i`` characters of ``b``,
    column ``j`` the first ``j`` characters of ``a``.
    """
    a = a.lower()
    b = b.lower()
    matrix = [[0] * (len(a) + 1) for _ in range(len(b) + 1)]
    for i in range(len(b) + 1):
        matrix[i][0] = i
    for j in range(len(a) + 1):
        matrix[0][j] = j

    for i in range(1, len(b) + 1):
        for j in range(1, len(a) + 1):
            if b[i - 1] == a[j - 1]:
                matrix[i][j] = matrix[i - 1][j - 1]
            else:
                matrix[i][j] = 1 + min(
                    matrix[i - 1][j - 1],  # substitution
                    matrix[i][j - 1],  # insertion
                    matrix[i - 1][j],  # deletion
                )
    return matrix[len(b)][len(a)]


def rank_candidates(
    target: str,
    candidates: Iterable[str],
    max_distance: int = DEFAULT_MAX_DISTANCE,
) -> list[SimilarityCandidate]:
    """Score candidates against ``target``, dropping exact matches and distant names."""
    needle = target.lower()
    scored = []
    for name in candidates:
        distance = edit_distance(needle, name.lower())
        if 0 < distance <= max_distance:
            scored.append(SimilarityCandidate(name=name, distance=distance))
    # sorted() is stable, so ties keep their input order
    return sorted(scored, key=lambda candidate: candidate.distance)


def rank_similar(
    target: str,
    candidates: Iterable[str],
    max_distance: int = DEFAULT_MAX_DISTANCE,
    limit: int = DEFAULT_LIMIT,
) -> list[str]:
    """
    Return up to ``limit`` candidate names closest to ``target``.

    Names are compared case-insensitively and returned in their original
    casing. An exact match is not a suggestion and is never returned.
    """
    ranked = rank_candidates(target, candidates, max_distance)
    return [candidate.name for candidate in ranked[:limit]]
