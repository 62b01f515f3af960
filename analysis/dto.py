"""DTO types returned by the stat tallying engine.

DTOs are plain data containers used to transport tally results to callers
(management commands, renderers). They intentionally avoid any Django
dependencies.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from gamedata.battle_log import PlayerSlot


class StatDisplay(StrEnum):
    """How a stat is laid out.

    `comparison` stats hold one result per player; `single` stats hold one
    result in the shared slot.
    """

    comparison = "comparison"
    single = "single"


@dataclass(frozen=True, slots=True)
class StatResult:
    """Finalized value for one slot.

    Attributes:
        value: Numeric value used to compare players.
        text: Formatted value for display.
    """

    value: float = 0.0
    text: str = ""


@dataclass(frozen=True)
class StatTally:
    """Tallied results of one stat over one battle log.

    Attributes:
        key: Stable identifier of the stat definition.
        title: Display title, including any filter suffix.
        display: Layout of the stat.
        highest_is_best: Whether higher values are better when comparing.
        results: Result per slot; empty when the log has no players.
    """

    key: str
    title: str
    display: StatDisplay
    highest_is_best: bool
    results: Mapping[PlayerSlot, StatResult] = field(default_factory=dict)

    def result(self, slot: PlayerSlot) -> StatResult:
        """Return the result for `slot`, or an empty result."""

        return self.results.get(slot, StatResult())
