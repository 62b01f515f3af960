"""Battle filters applied before a stat folds an entry.

A filter is called with `(entry, record)` where `record` may be None for
battles without catalog metadata (bosses, custom entries). An absent record
behaves like a record with every field unset.
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass, field

from definitions.catalog import EntityRecord, SpiritAffinity, SpiritType
from gamedata.battle_log import BattleEntry, BattleType

KeyFunction = Callable[[BattleEntry, EntityRecord | None], str | None]


class BattleFilter:
    """Filter that accepts every battle."""

    def __call__(self, entry: BattleEntry, record: EntityRecord | None) -> bool:
        return True

    def title(self) -> str:
        """Return the suffix appended to a filtered stat's title."""

        return ""


@dataclass
class CommonFilter(BattleFilter):
    """Accept battles matching every configured equality check.

    Attributes:
        battle_type: Required battle type, or None for any.
        affinity: Required battle affinity, or None for any.
        usage_type: Required usage type, or None for any.
    """

    battle_type: BattleType | None = None
    affinity: SpiritAffinity | None = None
    usage_type: SpiritType | None = None

    def __call__(self, entry: BattleEntry, record: EntityRecord | None) -> bool:
        if self.battle_type is not None and self.battle_type != entry.battle_type:
            return False
        record_affinity = record.battle_affinity if record is not None else None
        if self.affinity is not None and self.affinity != record_affinity:
            return False
        record_usage = record.usage_type if record is not None else None
        if self.usage_type is not None and self.usage_type != record_usage:
            return False
        return True

    def title(self) -> str:
        parts = [value for value in (self.affinity, self.battle_type, self.usage_type) if value is not None]
        return "".join(f" ({value})" for value in parts)


@dataclass
class CommonalityFilter(CommonFilter):
    """`CommonFilter` that also drops battles whose commonality key is excluded.

    The owning stat supplies the key function after construction through
    `bind_key_function`; until then only the common checks apply.
    """

    excluded_keys: Collection[str] = ()
    key_function: KeyFunction | None = field(default=None, repr=False)

    def bind_key_function(self, key_function: KeyFunction) -> None:
        self.key_function = key_function

    def __call__(self, entry: BattleEntry, record: EntityRecord | None) -> bool:
        if not super().__call__(entry, record):
            return False
        if not self.excluded_keys or self.key_function is None:
            return True
        return self.key_function(entry, record) not in self.excluded_keys

    def title(self) -> str:
        suffix = " (Filtered)" if self.excluded_keys else ""
        return super().title() + suffix
