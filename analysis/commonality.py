"""Ranking of keys by how often they occur.

Given a `{key: count}` mapping, find the keys at a requested distinct-count
rank, counting from the most (or least) common end. Every key tied at that
rank is reported.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

MAX_LISTED_KEYS: Final[int] = 15
NO_RESULT_TEXT: Final[str] = "None"


@dataclass(frozen=True, slots=True)
class CommonalityRank:
    """Keys found at one commonality rank.

    Attributes:
        count: Shared count of the keys; 0 when nothing qualified.
        keys: Tied keys in sorted order.
    """

    count: int = 0
    keys: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.keys)


def rank_commonality(
    counts: Mapping[str, int],
    *,
    most_common: bool = True,
    min_count: int = 1,
    rank: int = 1,
) -> CommonalityRank:
    """Return the keys at `rank` among the distinct counts.

    Args:
        counts: Occurrences per key.
        most_common: Rank from the highest count down when True, otherwise
            from the lowest count up.
        min_count: Counts below this are ignored (clamped to at least 1).
        rank: One-based distinct-count rank (clamped to at least 1).

    Returns:
        CommonalityRank; empty when fewer than `rank` distinct counts qualify.
    """

    min_count = max(min_count, 1)
    rank = max(rank, 1)

    ordered = sorted(counts.items(), key=lambda item: item[1])
    if most_common:
        ordered.reverse()

    current_rank = 0
    best: int | None = None
    keys: list[str] = []
    for key, count in ordered:
        if count < min_count:
            if most_common:
                break
            continue

        if current_rank == rank:
            if count != best:
                break
            keys.append(key)
        elif best is None or (count < best if most_common else count > best):
            best = count
            current_rank += 1
            if current_rank == rank:
                keys.append(key)

    if not keys or best is None:
        return CommonalityRank()
    return CommonalityRank(count=best, keys=tuple(sorted(keys)))


def format_commonality(result: CommonalityRank) -> str:
    """Render a rank as `"(<count>) key1, key2"`, capped at `MAX_LISTED_KEYS`."""

    if not result:
        return NO_RESULT_TEXT
    listed = ", ".join(result.keys[:MAX_LISTED_KEYS])
    if len(result.keys) > MAX_LISTED_KEYS:
        listed += ", ..."
    return f"({result.count}) {listed}"
