"""Stat definitions for the tallying engine.

A stat is a `StatDefinition` value rather than a subclass: it carries the fold
step applied to each applicable battle, the finalize step turning an
accumulator into a `StatResult`, an applicability predicate, and display
metadata. `analysis.engine.tally_stat` drives any definition the same way.

Every stat shares one accumulator shape (`StatAccumulator`): a running value,
a count, and a key counter for commonality stats.

Factory functions below build the supported stats. Each accepts an optional
`BattleFilter`; the filter's title suffix is appended to the stat title.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Final

from definitions.catalog import EntityRecord
from gamedata.battle_log import SHARED, BattleEntry, Individual, PlayerSlot

from .commonality import format_commonality, rank_commonality
from .dto import StatDisplay, StatResult
from .filters import BattleFilter, CommonalityFilter, KeyFunction

NEARLY_EQUAL_TOLERANCE: Final[float] = 0.0001


@dataclass(slots=True)
class StatAccumulator:
    """Running state for one slot while folding.

    Attributes:
        value: Running numeric total.
        count: Number of contributions (used for averages).
        counter: Occurrences per key (used by commonality stats).
    """

    value: float = 0.0
    count: int = 0
    counter: Counter[str] = field(default_factory=Counter)


@dataclass(frozen=True, slots=True)
class FoldContext:
    """Inputs for folding one battle into one slot.

    Attributes:
        slot: Player being tallied (`SHARED` for single-display stats).
        battle_name: Catalog display name when known, else the log key.
        record: Catalog metadata, or None for battles without metadata.
        entry: Battle entry being folded.
        player_count: Number of configured players in the log.
    """

    slot: PlayerSlot
    battle_name: str
    record: EntityRecord | None
    entry: BattleEntry
    player_count: int

    def players(self) -> list[Individual]:
        return [Individual(index) for index in range(self.player_count)]

    def losses(self, slot: PlayerSlot | None = None) -> int:
        return self.entry.get_losses(self.slot if slot is None else slot)

    def won(self) -> bool:
        return self.entry.is_winner(self.slot)


FoldFunction = Callable[[FoldContext, StatAccumulator], None]
FinalizeFunction = Callable[[StatAccumulator], StatResult]
ApplicabilityFunction = Callable[[BattleEntry, EntityRecord | None], bool]


def is_nearly_equal(a: float, b: float, tolerance: float = NEARLY_EQUAL_TOLERANCE) -> bool:
    return abs(a - b) < tolerance


def format_stat_value(value: float) -> str:
    """Render whole values as grouped integers, everything else with 2 decimals."""

    if is_nearly_equal(0.0, value - math.trunc(value)):
        return f"{math.trunc(value):,}"
    return f"{value:,.2f}"


def finalize_value(accumulator: StatAccumulator) -> StatResult:
    return StatResult(value=accumulator.value, text=format_stat_value(accumulator.value))


def finalize_average(accumulator: StatAccumulator) -> StatResult:
    average = accumulator.value / accumulator.count if accumulator.count > 0 else 0.0
    return StatResult(value=average, text=format_stat_value(average))


def _always(entry: BattleEntry, record: EntityRecord | None) -> bool:
    return True


@dataclass(frozen=True, slots=True)
class StatDefinition:
    """A stat the engine can tally.

    Attributes:
        key: Stable identifier.
        base_title: Title without the filter suffix.
        fold: Applies one battle to one slot's accumulator.
        finalize: Converts an accumulator into a result.
        is_applicable: Stat-specific gate evaluated before the filter.
        display: Per-player comparison or a single shared value.
        highest_is_best: Whether higher values are better.
        battle_filter: Optional user-chosen filter.
    """

    key: str
    base_title: str
    fold: FoldFunction
    finalize: FinalizeFunction = finalize_value
    is_applicable: ApplicabilityFunction = _always
    display: StatDisplay = StatDisplay.comparison
    highest_is_best: bool = True
    battle_filter: BattleFilter | None = None

    @property
    def title(self) -> str:
        suffix = self.battle_filter.title() if self.battle_filter is not None else ""
        return f"{self.base_title}{suffix}"

    def accepts(self, entry: BattleEntry, record: EntityRecord | None) -> bool:
        """Return True when `entry` should be folded."""

        if not self.is_applicable(entry, record):
            return False
        return self.battle_filter is None or self.battle_filter(entry, record)


def _first_try_suffix(first_try: bool) -> str:
    return " First Try" if first_try else ""


def _not_shared(entry: BattleEntry, record: EntityRecord | None) -> bool:
    return not entry.is_shared


def divider(title: str = "") -> StatDefinition:
    """A heading row; never folds and renders no value."""

    return StatDefinition(
        key="divider",
        base_title=title,
        fold=lambda ctx, acc: None,
        finalize=lambda acc: StatResult(),
        is_applicable=lambda entry, record: False,
        display=StatDisplay.single,
    )


def battles_total(battle_filter: BattleFilter | None = None) -> StatDefinition:
    """Battles fought: the win (or shared participation) plus every loss."""

    def fold(ctx: FoldContext, acc: StatAccumulator) -> None:
        if ctx.won() or ctx.entry.is_shared:
            acc.value += 1
        acc.value += ctx.losses()

    return StatDefinition(key="battles_total", base_title="Total Battles", fold=fold, battle_filter=battle_filter)


def battles_unique(battle_filter: BattleFilter | None = None) -> StatDefinition:
    """Distinct battles a player took part in."""

    def fold(ctx: FoldContext, acc: StatAccumulator) -> None:
        if ctx.won() or ctx.entry.is_shared or ctx.losses() > 0:
            acc.value += 1

    return StatDefinition(key="battles_unique", base_title="Unique Battles", fold=fold, battle_filter=battle_filter)


def battles_won(first_try: bool = False, battle_filter: BattleFilter | None = None) -> StatDefinition:
    def fold(ctx: FoldContext, acc: StatAccumulator) -> None:
        if not ctx.won():
            return
        if first_try and ctx.losses() > 0:
            return
        acc.value += 1

    return StatDefinition(
        key="battles_won_first_try" if first_try else "battles_won",
        base_title=f"Battles Won{_first_try_suffix(first_try)}",
        fold=fold,
        battle_filter=battle_filter,
    )


def solo_wins(first_try: bool = False, battle_filter: BattleFilter | None = None) -> StatDefinition:
    """Wins where no other player lost the battle first.

    With `first_try`, the winner must not have lost either.
    """

    def fold(ctx: FoldContext, acc: StatAccumulator) -> None:
        if not ctx.won():
            return
        for player in ctx.players():
            if ctx.losses(player) <= 0:
                continue
            if player != ctx.slot or first_try:
                return
        acc.value += 1

    return StatDefinition(
        key="solo_wins_first_try" if first_try else "solo_wins",
        base_title=f"Battles Won Solo{_first_try_suffix(first_try)}",
        fold=fold,
        is_applicable=_not_shared,
        battle_filter=battle_filter,
    )


def battles_lost(battle_filter: BattleFilter | None = None) -> StatDefinition:
    def fold(ctx: FoldContext, acc: StatAccumulator) -> None:
        acc.value += ctx.losses()

    return StatDefinition(
        key="battles_lost",
        base_title="Total Battles Lost",
        fold=fold,
        highest_is_best=False,
        battle_filter=battle_filter,
    )


def unique_battles_lost(battle_filter: BattleFilter | None = None) -> StatDefinition:
    def fold(ctx: FoldContext, acc: StatAccumulator) -> None:
        if ctx.losses() > 0:
            acc.value += 1

    return StatDefinition(
        key="unique_battles_lost",
        base_title="Unique Battles Lost",
        fold=fold,
        highest_is_best=False,
        battle_filter=battle_filter,
    )


def savior_wins(
    losses_required: int = 1,
    first_try: bool = False,
    battle_filter: BattleFilter | None = None,
) -> StatDefinition:
    """Wins on battles every player had already lost `losses_required` times.

    With `first_try`, the winner must have won on their first attempt while
    everyone else still meets the threshold.
    """

    losses_required = max(losses_required, 1)

    def fold(ctx: FoldContext, acc: StatAccumulator) -> None:
        if not ctx.won():
            return
        for player in ctx.players():
            losses = ctx.losses(player)
            is_winner = player == ctx.slot
            if is_winner and first_try and losses > 0:
                return
            if losses >= losses_required:
                continue
            if not (is_winner and first_try and losses <= 0):
                return
        acc.value += 1

    noun = "Losses" if losses_required > 1 else "Loss"
    return StatDefinition(
        key="savior_wins_first_try" if first_try else "savior_wins",
        base_title=f"Savior Wins ({losses_required} {noun}){_first_try_suffix(first_try)}",
        fold=fold,
        is_applicable=_not_shared,
        battle_filter=battle_filter,
    )


def _won_record_value(
    key: str,
    label: str,
    read: Callable[[EntityRecord], int | None],
    average: bool,
    battle_filter: BattleFilter | None,
) -> StatDefinition:
    def applicable(entry: BattleEntry, record: EntityRecord | None) -> bool:
        return record is not None and (read(record) or 0) > 0

    def fold(ctx: FoldContext, acc: StatAccumulator) -> None:
        if not ctx.won() or ctx.record is None:
            return
        acc.value += read(ctx.record) or 0
        acc.count += 1

    return StatDefinition(
        key=f"{key}_average" if average else f"{key}_total",
        base_title=f"{'Average' if average else 'Total'} Won {label}",
        fold=fold,
        finalize=finalize_average if average else finalize_value,
        is_applicable=applicable,
        battle_filter=battle_filter,
    )


def won_battle_power(average: bool = False, battle_filter: BattleFilter | None = None) -> StatDefinition:
    return _won_record_value("won_battle_power", "Battle Power", lambda r: r.battle_power, average, battle_filter)


def won_class_rank(average: bool = False, battle_filter: BattleFilter | None = None) -> StatDefinition:
    return _won_record_value("won_class_rank", "Class Rank", lambda r: r.class_rank, average, battle_filter)


def _commonality_finalizer(most_common: bool, min_count: int, rank: int) -> FinalizeFunction:
    def finalize(acc: StatAccumulator) -> StatResult:
        ranked = rank_commonality(acc.counter, most_common=most_common, min_count=min_count, rank=rank)
        return StatResult(value=0.0, text=format_commonality(ranked))

    return finalize


def _commonality_title(base: str, most_common: bool, min_count: int, rank: int) -> str:
    return f"{'Most' if most_common else 'Least'} {base} [Rank {rank}, >= {min_count}]"


def _bind_filter(battle_filter: BattleFilter | None, key_function: KeyFunction) -> None:
    if isinstance(battle_filter, CommonalityFilter):
        battle_filter.bind_key_function(key_function)


def _acquired_commonality(
    key: str,
    label: str,
    read: Callable[[EntityRecord], str | None],
    most_common: bool,
    min_count: int,
    rank: int,
    battle_filter: BattleFilter | None,
) -> StatDefinition:
    min_count = max(min_count, 1)
    rank = max(rank, 1)

    def key_for(entry: BattleEntry, record: EntityRecord | None) -> str | None:
        return read(record) if record is not None else None

    def applicable(entry: BattleEntry, record: EntityRecord | None) -> bool:
        value = key_for(entry, record)
        return bool(value and value.strip())

    def fold(ctx: FoldContext, acc: StatAccumulator) -> None:
        value = key_for(ctx.entry, ctx.record)
        if value and ctx.won():
            acc.counter[value] += 1

    _bind_filter(battle_filter, key_for)
    return StatDefinition(
        key=f"{'most' if most_common else 'least'}_common_{key}",
        base_title=_commonality_title(f"Common {label} Acquired", most_common, min_count, rank),
        fold=fold,
        finalize=_commonality_finalizer(most_common, min_count, rank),
        is_applicable=applicable,
        battle_filter=battle_filter,
    )


def common_series(
    most_common: bool = True,
    min_count: int = 1,
    rank: int = 1,
    battle_filter: BattleFilter | None = None,
) -> StatDefinition:
    """Series of the battles each player won, ranked by frequency."""

    return _acquired_commonality("series", "Series", lambda r: r.series, most_common, min_count, rank, battle_filter)


def common_ability(
    most_common: bool = True,
    min_count: int = 1,
    rank: int = 1,
    battle_filter: BattleFilter | None = None,
) -> StatDefinition:
    """Abilities of the spirits each player won, ranked by frequency."""

    return _acquired_commonality("ability", "Ability", lambda r: r.ability, most_common, min_count, rank, battle_filter)


def toughest_battle(
    display: StatDisplay = StatDisplay.comparison,
    rank: int = 1,
    battle_filter: BattleFilter | None = None,
) -> StatDefinition:
    """Battles that took the most attempts.

    Per player, attempts are that player's losses plus the winning (or shared)
    attempt. As a single stat, attempts are summed over every player (or taken
    from the shared tally for shared battles) plus one when anyone has won.
    """

    rank = max(rank, 1)

    def fold(ctx: FoldContext, acc: StatAccumulator) -> None:
        if display == StatDisplay.comparison:
            attempts = ctx.losses() + (1 if ctx.entry.is_shared or ctx.won() else 0)
        else:
            attempts = 1 if ctx.entry.has_winner() else 0
            if ctx.entry.is_shared:
                attempts += ctx.entry.get_losses(SHARED)
            else:
                attempts += sum(ctx.losses(player) for player in ctx.players())
        acc.counter[ctx.battle_name] += attempts

    _bind_filter(battle_filter, lambda entry, record: None)
    shared_suffix = ", Shared" if display == StatDisplay.single else ""
    return StatDefinition(
        key="toughest_battle_shared" if display == StatDisplay.single else "toughest_battle",
        base_title=f"Toughest Battle [Rank {rank}{shared_suffix}]",
        fold=fold,
        finalize=_commonality_finalizer(True, 1, rank),
        display=display,
        battle_filter=battle_filter,
    )
