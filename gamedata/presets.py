"""New battle log presets and the creation settings document."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Final

from definitions.catalog import EntityCatalog, SpiritType
from gamedata.battle_log import BattleEntry, BattleLog, BattleType, SaveDataSettings

DEFAULT_BOSSES: Final[tuple[str, ...]] = (
    "giga bowser",
    "galleom",
    "rathalos",
    "master hand",
    "master hand (light realm)",
    "master hand (final realm)",
    "master hand gauntlet",
    "crazy hand",
    "crazy hand (sacred land)",
    "crazy hand (mysterious dimension)",
    "crazy hand (dracula's castle)",
    "crazy hand (final realm)",
    "ganon",
    "marx",
    "dracula",
    "galeem (light realm)",
    "galeem (final realm)",
    "dharkon (dark realm)",
    "dharkon (final realm)",
    "galeem & dharkon (phase 1)",
    "galeem & dharkon (phase 2)",
    "galeem & dharkon (phase 3)",
)


class LogPreset(StrEnum):
    """Starting content for a new battle log."""

    blank = "blank"
    campaign = "campaign"
    board = "board"


@dataclass(slots=True)
class CreationSettings:
    """Defaults offered when creating a battle log.

    Attributes:
        default_settings: Player list for new logs.
        bosses: Boss battles added by the blank and campaign presets. None
            until validated.
    """

    default_settings: SaveDataSettings = field(default_factory=SaveDataSettings)
    bosses: list[str] | None = None

    def validate(self) -> bool:
        is_valid = True
        if self.bosses is None:
            self.bosses = list(DEFAULT_BOSSES)
            is_valid = False
        is_valid &= self.default_settings.validate()
        return is_valid

    def to_dict(self) -> dict[str, Any]:
        return {"defaultSettings": self.default_settings.to_dict(), "bosses": self.bosses}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> CreationSettings:
        bosses = payload.get("bosses")
        return cls(
            default_settings=SaveDataSettings.from_dict(payload.get("defaultSettings") or {}),
            bosses=[str(boss) for boss in bosses] if isinstance(bosses, list) else None,
        )


def _add_entries(log: BattleLog, names: Iterable[str], battle_type: BattleType) -> None:
    for name in names:
        if name.strip():
            log.add_or_update(name, BattleEntry(battle_type=battle_type))


def create_battle_log(
    file_name: str,
    *,
    preset: LogPreset,
    players: list[str],
    bosses: Iterable[str] = (),
    catalog: EntityCatalog | None = None,
) -> BattleLog:
    """Create a validated battle log from a preset.

    Args:
        file_name: Save file name of the new log.
        preset: Which battles to pre-populate.
        players: Player names.
        bosses: Boss battle names used by the blank and campaign presets.
        catalog: Spirit catalog used by the campaign and board presets.

    Returns:
        The new battle log. Entries are not yet persisted.
    """

    log = BattleLog(file_name, players=players)
    catalog = catalog or EntityCatalog()

    if preset in (LogPreset.blank, LogPreset.campaign):
        _add_entries(log, bosses, BattleType.boss)

    if preset == LogPreset.campaign:
        for _, record in catalog:
            if record.usage_type == SpiritType.fighter:
                log.add_or_update(record.display_name, BattleEntry(battle_type=BattleType.fighter))
            elif record.has_campaign_battle():
                log.add_or_update(record.display_name, BattleEntry(battle_type=BattleType.spirit))

    if preset == LogPreset.board:
        for _, record in catalog:
            if record.has_board_battle:
                log.add_or_update(record.display_name, BattleEntry(battle_type=BattleType.spirit))

    log.validate()
    return log
