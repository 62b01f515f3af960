"""Entity records and the in-memory spirit catalog.

The catalog is the rebuildable, wiki-derived layer: it is compiled from raw
wiki markup plus user addendum files (see `definitions.catalog_build`) and is
read-only for everything downstream of compilation.

Records are keyed by a sanitized name (case-folded, diacritics stripped) so
lookups made from battle logs, wiki sheets, and user input agree.
"""

from __future__ import annotations

import logging
import unicodedata
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, fields, replace
from enum import StrEnum
from typing import Any, Final, TypeVar

logger = logging.getLogger(__name__)

NONE_ABILITY: Final[str] = "None"
ENHANCED_ABILITY: Final[str] = "Enhanced"

_NONE_ABILITY_ALIASES: Final[frozenset[str]] = frozenset({"None", "[None]", "N/A", "No Effect"})
_ENHANCEABLE_MARKER: Final[str] = "Can Be Enhanced"

E = TypeVar("E", bound=StrEnum)


class SpiritAffinity(StrEnum):
    """Battle affinity of an entity's battle."""

    none = "None"
    neutral = "Neutral"
    attack = "Attack"
    shield = "Shield"
    grab = "Grab"


class SpiritType(StrEnum):
    """Usage type of an entity outside of battle."""

    none = "None"
    fighter = "Fighter"
    primary = "Primary"
    support = "Support"
    master = "Master"


def sanitize_name(value: str | None) -> str:
    """Return the lookup key for an entity or battle name.

    Args:
        value: Display name as typed by a user or found in wiki markup.

    Returns:
        Case-folded name with diacritics removed (`Pokémon` -> `pokemon`).
        Blank input returns an empty string.
    """

    if not value:
        return ""
    decomposed = unicodedata.normalize("NFKD", value.strip())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def coerce_enum(enum_type: type[E], value: object) -> E | None:
    """Coerce a persisted enum value into `enum_type`.

    Accepts the member value (`"Attack"`), the member name (`"attack"`) or the
    member's ordinal (older documents stored enums as integers).
    """

    if value is None:
        return None
    if isinstance(value, enum_type):
        return value
    if isinstance(value, bool):
        return None
    members = list(enum_type)
    if isinstance(value, int):
        return members[value] if 0 <= value < len(members) else None
    text = str(value).strip()
    for member in members:
        if text == member.value or text.casefold() == member.name:
            return member
    return None


_JSON_FIELDS: Final[dict[str, str]] = {
    "display_name": "spiritName",
    "series": "series",
    "ability": "ability",
    "battle_affinity": "BattleAffinity",
    "usage_type": "Type",
    "class_rank": "ClassRank",
    "slot_count": "SlotCount",
    "battle_power": "BattlePower",
    "has_board_battle": "IsSpiritBoard",
    "is_in_campaign": "IsWOL",
    "is_campaign_reward": "IsWOLReward",
}


def _is_set(value: object) -> bool:
    """Return True when a record field carries data worth merging."""

    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


@dataclass(slots=True)
class EntityRecord:
    """Metadata for one battle-having entity (spirit, fighter, or boss).

    Every optional field is either unset (`None`, unknown) or holds a value
    that has been through `validate()`.

    Attributes:
        display_name: Human-readable name.
        collection_index: Ordinal in the wiki's spirit list. Never persisted.
        series: Franchise the entity comes from.
        ability: Ability text; synonyms collapse on validation.
        battle_affinity: Affinity of the entity's battle.
        usage_type: How the entity is used outside of battle.
        class_rank: Star rank (1-4).
        slot_count: Slots offered (primary) or consumed (support).
        battle_power: Power of the entity's battle.
        has_board_battle: True when a Spirit Board battle exists.
        is_in_campaign: True when the entity appears in World of Light.
        is_campaign_reward: True when World of Light awards it from a chest.
    """

    display_name: str = ""
    collection_index: int | None = None
    series: str | None = None
    ability: str | None = None
    battle_affinity: SpiritAffinity | None = None
    usage_type: SpiritType | None = None
    class_rank: int | None = None
    slot_count: int | None = None
    battle_power: int | None = None
    has_board_battle: bool | None = None
    is_in_campaign: bool | None = None
    is_campaign_reward: bool | None = None

    def validate(self) -> bool:
        """Normalize ability synonyms in place.

        Returns:
            True when nothing had to change.
        """

        if self.ability is None:
            return True

        normalized = self.ability
        if normalized in _NONE_ABILITY_ALIASES:
            normalized = NONE_ABILITY
        if _ENHANCEABLE_MARKER in normalized:
            normalized = ENHANCED_ABILITY

        changed = normalized != self.ability
        self.ability = normalized
        return not changed

    def has_campaign_battle(self) -> bool:
        """Return True when the entity is fought (not looted) in World of Light."""

        return bool(self.is_in_campaign) and not bool(self.is_campaign_reward)

    def merge_from(self, other: EntityRecord, *, overwrite: bool = True) -> bool:
        """Copy set fields from `other` onto this record.

        Args:
            other: Record supplying values.
            overwrite: When False, only fields unset on this record are filled.

        Returns:
            True when any field changed.
        """

        changed = False
        for field_info in fields(self):
            name = field_info.name
            incoming = getattr(other, name)
            if not _is_set(incoming):
                continue
            current = getattr(self, name)
            if not overwrite and _is_set(current):
                continue
            if current != incoming:
                setattr(self, name, incoming)
                changed = True
        return changed

    def copy(self) -> EntityRecord:
        """Return a shallow copy."""

        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible mapping of set fields."""

        payload: dict[str, Any] = {}
        for attr, key in _JSON_FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            payload[key] = str(value) if isinstance(value, StrEnum) else value
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> EntityRecord:
        """Build a record from a persisted mapping.

        Unknown keys are ignored; values of the wrong type are treated as unset.
        """

        def _int(key: str) -> int | None:
            value = payload.get(key)
            if isinstance(value, bool) or not isinstance(value, int):
                return None
            return value

        def _bool(key: str) -> bool | None:
            value = payload.get(key)
            return value if isinstance(value, bool) else None

        def _str(key: str) -> str | None:
            value = payload.get(key)
            return value if isinstance(value, str) else None

        return cls(
            display_name=_str("spiritName") or "",
            series=_str("series"),
            ability=_str("ability"),
            battle_affinity=coerce_enum(SpiritAffinity, payload.get("BattleAffinity")),
            usage_type=coerce_enum(SpiritType, payload.get("Type")),
            class_rank=_int("ClassRank"),
            slot_count=_int("SlotCount"),
            battle_power=_int("BattlePower"),
            has_board_battle=_bool("IsSpiritBoard"),
            is_in_campaign=_bool("IsWOL"),
            is_campaign_reward=_bool("IsWOLReward"),
        )


class EntityCatalog:
    """Mapping of sanitized names to `EntityRecord`s.

    Records handed out by `lookup` are the stored instances; callers outside
    catalog compilation must treat them as read-only.
    """

    def __init__(self) -> None:
        self._records: dict[str, EntityRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[tuple[str, EntityRecord]]:
        return iter(list(self._records.items()))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and sanitize_name(name) in self._records

    def keys(self) -> list[str]:
        """Return the sanitized keys in insertion order."""

        return list(self._records)

    def lookup(self, name: str | None) -> EntityRecord | None:
        """Return the record stored under `name`, or None."""

        key = sanitize_name(name)
        if not key:
            return None
        return self._records.get(key)

    def display_name_for(self, name: str) -> str:
        """Return the catalog display name for `name`, falling back to `name`."""

        record = self.lookup(name)
        if record is not None and record.display_name.strip():
            return record.display_name
        return name

    def for_each(self, visitor: Callable[[str, EntityRecord], None]) -> None:
        """Call `visitor(key, record)` for every record."""

        for key, record in self:
            visitor(key, record)

    def add_or_update(self, name: str, record: EntityRecord) -> bool:
        """Store `record` under the sanitized `name`, replacing any existing one.

        Returns:
            True when the key was new.
        """

        key = sanitize_name(name)
        if not key:
            logger.warning("Refusing to store a record without a name.")
            return False
        is_new = key not in self._records
        self._records[key] = record
        return is_new

    def append_collection(self, other: EntityCatalog) -> bool:
        """Merge `other` into this catalog; fields set in `other` win.

        Args:
            other: Catalog to merge from. Its records are copied, not shared.

        Returns:
            True when any key was inserted or any field changed.
        """

        return self._merge(other, overwrite=True)

    def fill_gaps(self, other: EntityCatalog) -> bool:
        """Merge `other` into this catalog without overwriting set fields."""

        return self._merge(other, overwrite=False)

    def _merge(self, other: EntityCatalog, *, overwrite: bool) -> bool:
        if len(other) == 0:
            logger.error("Cannot append an empty spirit collection.")
            return False

        changed = False
        for key, incoming in other:
            existing = self._records.get(key)
            if existing is None:
                self._records[key] = incoming.copy()
                changed = True
                logger.debug("Added spirit data: %s", key)
                continue
            if existing.merge_from(incoming, overwrite=overwrite):
                changed = True
                logger.debug("Appended spirit data: %s", key)
        return changed

    def validate(self) -> bool:
        """Validate every record; True when nothing had to change."""

        results = [record.validate() for record in self._records.values()]
        return all(results)

    def to_dict(self) -> dict[str, Any]:
        """Return the persisted document form of the catalog."""

        return {"_metadata": {key: record.to_dict() for key, record in self._records.items()}}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> EntityCatalog:
        """Build a catalog from a persisted document.

        Raises:
            ValueError: When the document has no record mapping.
        """

        records = payload.get("_metadata")
        if not isinstance(records, Mapping):
            raise ValueError("Spirit collection document is missing `_metadata`.")

        catalog = cls()
        for name, raw in records.items():
            if not isinstance(raw, Mapping):
                logger.warning("Skipping malformed spirit entry: %s", name)
                continue
            catalog.add_or_update(str(name), EntityRecord.from_dict(raw))
        return catalog
