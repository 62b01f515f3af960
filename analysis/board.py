"""Stat board helpers: the default stat list, highlighting, and text output."""

from __future__ import annotations

from collections.abc import Sequence

from definitions.catalog import SpiritType
from gamedata.battle_log import SHARED, BattleType, Individual

from . import stats
from .dto import StatDisplay, StatTally
from .filters import CommonFilter
from .stats import StatDefinition, is_nearly_equal


def default_stat_board() -> list[StatDefinition]:
    """Return the stats shown for a battle log, in display order."""

    return [
        stats.divider("Battles"),
        stats.battles_total(),
        stats.battles_unique(),
        stats.battles_won(),
        stats.battles_won(first_try=True),
        stats.solo_wins(),
        stats.solo_wins(first_try=True),
        stats.savior_wins(1),
        stats.savior_wins(2),
        stats.savior_wins(1, first_try=True),
        stats.battles_lost(),
        stats.unique_battles_lost(),
        stats.divider("Battle Types"),
        stats.battles_won(battle_filter=CommonFilter(battle_type=BattleType.spirit)),
        stats.battles_won(battle_filter=CommonFilter(battle_type=BattleType.fighter)),
        stats.battles_won(battle_filter=CommonFilter(battle_type=BattleType.boss)),
        stats.battles_won(battle_filter=CommonFilter(usage_type=SpiritType.primary)),
        stats.battles_won(battle_filter=CommonFilter(usage_type=SpiritType.support)),
        stats.divider("Spirits"),
        stats.won_battle_power(),
        stats.won_battle_power(average=True),
        stats.won_class_rank(),
        stats.won_class_rank(average=True),
        stats.common_series(),
        stats.common_series(most_common=False),
        stats.common_ability(),
        stats.divider("Toughest Battles"),
        stats.toughest_battle(rank=1),
        stats.toughest_battle(StatDisplay.single, rank=1),
        stats.toughest_battle(StatDisplay.single, rank=2),
    ]


def best_player_indices(tally: StatTally, player_count: int) -> list[int]:
    """Return the players holding the best value of a comparison stat.

    Values within the nearly-equal tolerance tie. When every player ties,
    nobody stands out and an empty list is returned.
    """

    best_indices: list[int] = []
    best_value: float | None = None
    for index in range(player_count):
        value = tally.result(Individual(index)).value
        if best_value is not None and is_nearly_equal(best_value, value):
            best_indices.append(index)
            continue
        is_better = best_value is None or (value > best_value if tally.highest_is_best else value < best_value)
        if is_better:
            best_indices = [index]
            best_value = value

    if len(best_indices) >= player_count:
        return []
    return best_indices


def render_stat_board(tallies: Sequence[StatTally], players: Sequence[str]) -> str:
    """Render tallied stats as plain text, one block per stat."""

    lines: list[str] = []
    for tally in tallies:
        if tally.key == "divider":
            lines.append("")
            lines.append(f"== {tally.title} ==")
            continue
        if tally.display == StatDisplay.single:
            lines.append(f"{tally.title}: {tally.result(SHARED).text}")
            continue

        highlighted = set(best_player_indices(tally, len(players)))
        lines.append(f"{tally.title}:")
        for index, name in enumerate(players):
            marker = " *" if index in highlighted else ""
            lines.append(f"  [{name}]: {tally.result(Individual(index)).text}{marker}")
    return "\n".join(lines).strip("\n")
