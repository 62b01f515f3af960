"""Golden tests for commonality ranking."""

from __future__ import annotations

import pytest

from analysis.commonality import MAX_LISTED_KEYS, CommonalityRank, format_commonality, rank_commonality

pytestmark = pytest.mark.unit


def test_rank_one_lists_every_key_tied_at_the_top() -> None:
    """Ties at the requested rank are all reported, alphabetically."""

    ranked = rank_commonality({"b": 5, "a": 5, "c": 3})

    assert ranked == CommonalityRank(count=5, keys=("a", "b"))
    assert format_commonality(ranked) == "(5) a, b"


def test_rank_counts_distinct_values() -> None:
    """Rank two is the second distinct count, not the second key."""

    ranked = rank_commonality({"a": 5, "b": 5, "c": 3, "d": 3, "e": 1}, rank=2)

    assert ranked == CommonalityRank(count=3, keys=("c", "d"))


def test_least_common_ranks_from_the_bottom() -> None:
    """Least-common ranking starts at the lowest qualifying count."""

    counts = {"a": 5, "b": 1, "c": 3, "d": 1}

    assert rank_commonality(counts, most_common=False) == CommonalityRank(count=1, keys=("b", "d"))
    assert rank_commonality(counts, most_common=False, min_count=2) == CommonalityRank(count=3, keys=("c",))


def test_min_count_filters_and_missing_ranks_are_empty() -> None:
    """Counts under the minimum are ignored; ranks past the end yield nothing."""

    counts = {"a": 5, "b": 2}

    assert rank_commonality(counts, min_count=3) == CommonalityRank(count=5, keys=("a",))
    assert not rank_commonality(counts, rank=3)
    assert not rank_commonality({}, rank=1)
    assert format_commonality(rank_commonality({})) == "None"


def test_rank_and_min_count_are_clamped_to_one() -> None:
    """Out-of-range arguments behave like rank one and a minimum of one."""

    counts = {"a": 2, "b": 0}

    assert rank_commonality(counts, rank=0, min_count=-5) == CommonalityRank(count=2, keys=("a",))


def test_format_commonality_truncates_long_key_lists() -> None:
    """Only the first keys are listed, followed by an ellipsis."""

    keys = tuple(f"k{index:02d}" for index in range(MAX_LISTED_KEYS + 2))

    text = format_commonality(CommonalityRank(count=1, keys=keys))

    assert text.startswith("(1) k00, k01")
    assert text.endswith("k14, ...")
    assert "k15" not in text
