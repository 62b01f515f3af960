"""Orchestration entry points for the stat tallying engine.

The engine is a pure, non-Django module: it reads a battle log and a spirit
catalog and returns DTOs. It never mutates either input.

Tallying runs in three phases per stat:

1. init: one accumulator per configured player plus the shared slot,
2. fold: every applicable battle is folded into the relevant slots,
3. finalize: each accumulator becomes a `StatResult`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from definitions.catalog import EntityCatalog
from gamedata.battle_log import SHARED, BattleLog, PlayerSlot

from .dto import StatDisplay, StatResult, StatTally
from .stats import FoldContext, StatAccumulator, StatDefinition

logger = logging.getLogger(__name__)


def tally_stat(stat: StatDefinition, *, battle_log: BattleLog, catalog: EntityCatalog) -> StatTally:
    """Tally one stat over a battle log.

    Args:
        stat: Stat definition to evaluate.
        battle_log: Log whose entries are folded.
        catalog: Metadata used to resolve battle names and filter battles.

    Returns:
        StatTally with a result per player and one for `SHARED`. A log with no
        players yields a tally with no results.

    Notes:
        A battle whose fold raises a data error is logged and skipped; the
        remaining battles are still tallied.
    """

    player_count = battle_log.player_count()
    if player_count <= 0:
        return _to_tally(stat, {})

    player_slots: list[PlayerSlot] = list(battle_log.player_slots())
    accumulators: dict[PlayerSlot, StatAccumulator] = {SHARED: StatAccumulator()}
    accumulators.update({slot: StatAccumulator() for slot in player_slots})
    fold_slots = player_slots if stat.display == StatDisplay.comparison else [SHARED]

    for key, entry in battle_log:
        record = catalog.lookup(key)
        try:
            if not stat.accepts(entry, record):
                continue
            battle_name = record.display_name if record is not None and record.display_name.strip() else key
            for slot in fold_slots:
                context = FoldContext(
                    slot=slot,
                    battle_name=battle_name,
                    record=record,
                    entry=entry,
                    player_count=player_count,
                )
                stat.fold(context, accumulators[slot])
        except (ArithmeticError, AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping battle %s while tallying %s: %s", key, stat.key, exc)

    results = {slot: stat.finalize(accumulator) for slot, accumulator in accumulators.items()}
    return _to_tally(stat, results)


def tally_stats(
    stats: Iterable[StatDefinition],
    *,
    battle_log: BattleLog,
    catalog: EntityCatalog,
) -> list[StatTally]:
    """Tally several stats in order."""

    return [tally_stat(stat, battle_log=battle_log, catalog=catalog) for stat in stats]


def _to_tally(stat: StatDefinition, results: dict[PlayerSlot, StatResult]) -> StatTally:
    return StatTally(
        key=stat.key,
        title=stat.title,
        display=stat.display,
        highest_is_best=stat.highest_is_best,
        results=results,
    )
