"""Battle log documents: per-entity battle entries with per-player losses.

A battle log is a JSON document per save file. Entries are keyed by the same
sanitized name the spirit catalog uses. Every mutation re-validates the entry
it touched; `BattleLog.validate()` repairs a whole document after loading.

Players are addressed with `PlayerSlot` values rather than bare indices:
`Individual(i)` is a configured player and `SHARED` is the shared bucket used
by shared battles (and by stats that are not split per player).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Final

from definitions.catalog import coerce_enum, sanitize_name

logger = logging.getLogger(__name__)

CURRENT_SAVE_VERSION: Final[int] = 1
NO_WINNER_INDEX: Final[int] = -1
DEFAULT_PLAYER_NAMES: Final[tuple[str, ...]] = ("Player 1", "Player 2", "Player 3")


class BattleType(StrEnum):
    """What kind of opponent a battle entry records."""

    spirit = "Spirit"
    fighter = "Fighter"
    boss = "Boss"


@dataclass(frozen=True, slots=True)
class Individual:
    """A configured player, by zero-based index."""

    index: int


@dataclass(frozen=True, slots=True)
class Shared:
    """The shared bucket: no individual player."""


SHARED: Final[Shared] = Shared()

PlayerSlot = Individual | Shared


@dataclass(slots=True)
class BattlePlayerTally:
    """Loss counter for one player (or the shared bucket) in one battle."""

    losses: int = 0

    def validate(self) -> bool:
        if self.losses < 0:
            self.losses = 0
            return False
        return True


@dataclass(slots=True)
class BattleEntry:
    """One battle in a log.

    Attributes:
        battle_type: Spirit, fighter, or boss battle.
        winner: Index of the winning player, or None while nobody has won.
        is_shared: When True every player took part and losses are counted
            once, on `shared_tally`.
        player_tallies: Loss counters per player index.
        shared_tally: Loss counter used by shared battles.
    """

    battle_type: BattleType = BattleType.spirit
    winner: int | None = None
    is_shared: bool = False
    player_tallies: dict[int, BattlePlayerTally] = field(default_factory=dict)
    shared_tally: BattlePlayerTally = field(default_factory=BattlePlayerTally)

    def validate(self, player_count: int = 0) -> bool:
        """Repair the entry in place.

        Args:
            player_count: Number of configured players; each gets a tally.

        Returns:
            True when nothing had to change.
        """

        is_valid = True
        if self.winner is not None and self.winner < 0:
            self.winner = None
            is_valid = False

        for tally in self.player_tallies.values():
            is_valid &= tally.validate()

        for index in range(player_count):
            if index not in self.player_tallies:
                self.player_tallies[index] = BattlePlayerTally()
                is_valid = False

        is_valid &= self.shared_tally.validate()
        return is_valid

    def has_winner(self) -> bool:
        return self.winner is not None

    def is_winner(self, slot: PlayerSlot) -> bool:
        """Return True when `slot` is the recorded winner (never for `SHARED`)."""

        return isinstance(slot, Individual) and self.winner == slot.index

    def get_losses(self, slot: PlayerSlot, *, defer_to_shared: bool = True) -> int:
        """Return the losses recorded for `slot`.

        Args:
            slot: Player to read.
            defer_to_shared: When True, shared battles report the shared tally
                for every player.

        Returns:
            Loss count; 0 for a player without a tally.
        """

        if isinstance(slot, Shared) or (defer_to_shared and self.is_shared):
            return self.shared_tally.losses
        tally = self.player_tallies.get(slot.index)
        return tally.losses if tally is not None else 0

    def update_loss(self, slot: PlayerSlot, *, delta: int | None = None, value: int | None = None) -> int:
        """Adjust or set the losses for `slot`, clamped at zero.

        Exactly one of `delta` and `value` must be given. `SHARED` always
        targets the shared tally, whether or not the battle is shared.

        Returns:
            The stored loss count.

        Raises:
            ValueError: When neither or both of `delta` and `value` are given.
        """

        if (delta is None) == (value is None):
            raise ValueError("Pass exactly one of `delta` or `value`.")

        if isinstance(slot, Shared):
            tally = self.shared_tally
        else:
            tally = self.player_tallies.setdefault(slot.index, BattlePlayerTally())

        new_value = tally.losses + delta if delta is not None else value
        tally.losses = max(int(new_value), 0)
        return tally.losses

    def copy(self) -> BattleEntry:
        """Return a deep copy."""

        return BattleEntry(
            battle_type=self.battle_type,
            winner=self.winner,
            is_shared=self.is_shared,
            player_tallies={index: BattlePlayerTally(t.losses) for index, t in self.player_tallies.items()},
            shared_tally=BattlePlayerTally(self.shared_tally.losses),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": str(self.battle_type),
            "winningPlayer": NO_WINNER_INDEX if self.winner is None else self.winner,
            "isBattleShared": self.is_shared,
            "_playerData": {str(index): {"losses": t.losses} for index, t in sorted(self.player_tallies.items())},
            "_sharedPlayerData": {"losses": self.shared_tally.losses},
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> BattleEntry:
        """Build an entry from its persisted mapping.

        Raises:
            ValueError: When a field has an unusable value.
        """

        battle_type = coerce_enum(BattleType, payload.get("type", BattleType.spirit))
        if battle_type is None:
            raise ValueError(f"Unknown battle type {payload.get('type')!r}.")

        winner_raw = int(payload.get("winningPlayer", NO_WINNER_INDEX))
        tallies: dict[int, BattlePlayerTally] = {}
        for index, raw in (payload.get("_playerData") or {}).items():
            tallies[int(index)] = BattlePlayerTally(int((raw or {}).get("losses", 0)))
        shared_raw = payload.get("_sharedPlayerData") or {}

        return cls(
            battle_type=battle_type,
            winner=None if winner_raw < 0 else winner_raw,
            is_shared=bool(payload.get("isBattleShared", False)),
            player_tallies=tallies,
            shared_tally=BattlePlayerTally(int(shared_raw.get("losses", 0))),
        )


@dataclass(slots=True)
class SaveDataSettings:
    """Per-log settings."""

    players: list[str] = field(default_factory=list)

    def validate(self) -> bool:
        if not self.players:
            self.players = list(DEFAULT_PLAYER_NAMES)
            return False
        return True

    def player_count(self) -> int:
        return len(self.players)

    def to_dict(self) -> dict[str, Any]:
        return {"players": list(self.players)}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> SaveDataSettings:
        players = payload.get("players") or []
        return cls(players=[str(player) for player in players])


class BattleLog:
    """A save file's battle entries plus its player settings.

    Mutations accept an optional `on_changed(log)` callback which fires only
    when the set of battle keys changes (insert or removal).
    """

    def __init__(self, file_name: str = "", *, players: list[str] | None = None) -> None:
        self.file_name = file_name
        self.last_added_battle = ""
        self.save_version = 0
        self.settings = SaveDataSettings(players=list(players or []))
        self._entries: dict[str, BattleEntry] = {}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BattleLog):
            return NotImplemented
        return (
            self.last_added_battle == other.last_added_battle
            and self.save_version == other.save_version
            and self.settings == other.settings
            and self._entries == other._entries
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[str, BattleEntry]]:
        return iter(list(self._entries.items()))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and sanitize_name(name) in self._entries

    @property
    def players(self) -> list[str]:
        return list(self.settings.players)

    def set_players(self, players: list[str]) -> None:
        """Replace the player list and backfill tallies for new players."""

        self.settings.players = list(players)
        for entry in self._entries.values():
            entry.validate(self.player_count())

    def player_count(self) -> int:
        return self.settings.player_count()

    def is_valid_player(self, index: int) -> bool:
        return 0 <= index < self.player_count()

    def player_name(self, index: int) -> str | None:
        """Return the name of player `index`, or None when out of range."""

        if self.is_valid_player(index):
            return self.settings.players[index]
        return None

    def player_slots(self) -> list[Individual]:
        """Return a slot per configured player."""

        return [Individual(index) for index in range(self.player_count())]

    def add_or_update(
        self,
        name: str,
        entry: BattleEntry,
        on_changed: Callable[[BattleLog], None] | None = None,
    ) -> bool:
        """Insert or replace the entry for `name`.

        Returns:
            True when `name` was not in the log before.
        """

        key = sanitize_name(name)
        if not key:
            return False

        stored = entry.copy()
        stored.validate(self.player_count())
        is_new = key not in self._entries
        self._entries[key] = stored
        logger.info("Added or updated battle entry %s (%s) in %s.", key, stored.battle_type, self.file_name)

        if not is_new:
            return False
        self.last_added_battle = key
        if on_changed is not None:
            on_changed(self)
        return True

    def remove(self, name: str, on_changed: Callable[[BattleLog], None] | None = None) -> bool:
        """Remove the entry for `name`; False (with a warning) when absent."""

        key = sanitize_name(name)
        if not key or self._entries.pop(key, None) is None:
            logger.warning("Failed to remove battle entry %s from %s.", name, self.file_name)
            return False

        logger.info("Removed battle entry %s from %s.", name, self.file_name)
        if on_changed is not None:
            on_changed(self)
        return True

    def get_entry(self, name: str) -> BattleEntry | None:
        """Return a copy of the entry for `name`, or None."""

        entry = self._entries.get(sanitize_name(name))
        return entry.copy() if entry is not None else None

    def keys(self) -> list[str]:
        return list(self._entries)

    def for_each(self, visitor: Callable[[str, BattleEntry], None]) -> None:
        """Call `visitor(key, entry)` for every entry. Entries are live objects."""

        for key, entry in self:
            visitor(key, entry)

    def validate(self) -> bool:
        """Repair settings, entries, and the version stamp.

        Returns:
            True when nothing had to change.
        """

        is_valid = self.settings.validate()
        for key, entry in self._entries.items():
            if not entry.validate(self.player_count()):
                logger.warning("Battle entry %s failed validation.", key)
                is_valid = False

        if self.save_version != CURRENT_SAVE_VERSION:
            self.save_version = CURRENT_SAVE_VERSION
            is_valid = False
        return is_valid

    def to_dict(self) -> dict[str, Any]:
        return {
            "lastAddedBattle": self.last_added_battle,
            "_saveVersion": self.save_version,
            "_settings": self.settings.to_dict(),
            "_battleEntries": {key: entry.to_dict() for key, entry in self._entries.items()},
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> BattleLog:
        """Build a log from its persisted mapping (current format only).

        Raises:
            ValueError: When an entry cannot be interpreted.
        """

        log = cls()
        log.last_added_battle = str(payload.get("lastAddedBattle") or "")
        log.save_version = int(payload.get("_saveVersion", 0))
        log.settings = SaveDataSettings.from_dict(payload.get("_settings") or {})
        for key, raw in (payload.get("_battleEntries") or {}).items():
            log._entries[sanitize_name(str(key))] = BattleEntry.from_dict(raw)
        return log
