"""Conversion of pre-release battle log documents.

Each supported old format registers a `LegacyFormat`: a predicate recognizing
its raw JSON mapping and a converter producing a current `BattleLog`.
Formats are tried in registration order; the first match wins.

`convert_legacy_saves` applies the conversion to every JSON file in the legacy
folder and writes the results next to the current battle logs.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from core.documents import write_document
from core.paths import DATA_FILE_EXTENSION, save_display_name, save_file_name
from definitions.catalog import coerce_enum, sanitize_name
from gamedata.battle_log import SHARED, BattleEntry, BattleLog, BattleType, Individual

logger = logging.getLogger(__name__)

# V0 stored players as an enum of {None, M, S, P}; index 0 meant "no player".
_V0_PLAYER_ENUM_SIZE: Final[int] = 4
_V0_PLAYER_INITIALS: Final[dict[str, int]] = {"M": 0, "S": 1, "P": 2}


@dataclass(frozen=True, slots=True)
class LegacyFormat:
    """A recognizable old document format.

    Attributes:
        name: Label used in logs.
        matches: Returns True when a raw mapping is in this format.
        convert: Builds a current battle log from a matching mapping.
    """

    name: str
    matches: Callable[[Mapping[str, Any]], bool]
    convert: Callable[[Mapping[str, Any]], BattleLog]


def _is_v0(raw: Mapping[str, Any]) -> bool:
    return int(raw.get("_saveVersion", 0) or 0) == 0 and isinstance(raw.get("BattleStats"), Mapping)


def _v0_losses(raw_losses: Mapping[str, Any] | None) -> dict[int, int]:
    """Map V0 `{initial: losses}` onto zero-based player indices."""

    converted: dict[int, int] = {}
    for key, losses in (raw_losses or {}).items():
        index = _V0_PLAYER_INITIALS.get(str(key)[:1])
        if index is not None:
            converted[index] = int(losses)
    return converted


def _convert_v0(raw: Mapping[str, Any]) -> BattleLog:
    """Convert a V0 document.

    Notes:
        V0 had no per-battle shared counter; a shared battle's losses become
        the highest individual count and individual counts are zeroed.
    """

    player_count = _V0_PLAYER_ENUM_SIZE - 1
    log = BattleLog(players=[f"Player {index + 1}" for index in range(player_count)])

    for name, raw_entry in (raw.get("BattleStats") or {}).items():
        battle_type = coerce_enum(BattleType, raw_entry.get("Type", 0)) or BattleType.spirit
        winning_player = int(raw_entry.get("WinningPlayer", 0) or 0)
        entry = BattleEntry(
            battle_type=battle_type,
            winner=winning_player - 1 if winning_player > 0 else None,
            is_shared=bool(raw_entry.get("bSharedBattle", False)),
        )

        losses = _v0_losses(raw_entry.get("PlayerLosses"))
        highest = 0
        for index in range(player_count):
            player_losses = losses.get(index, 0)
            entry.update_loss(Individual(index), value=0 if entry.is_shared else player_losses)
            highest = max(highest, player_losses)
        if entry.is_shared:
            entry.update_loss(SHARED, value=highest)

        log.add_or_update(str(name), entry)

    log.last_added_battle = sanitize_name(str(raw.get("LastAddedBattle") or ""))
    return log


LEGACY_FORMATS: Final[tuple[LegacyFormat, ...]] = (
    LegacyFormat(name="v0", matches=_is_v0, convert=_convert_v0),
)


def convert_legacy_document(raw: Mapping[str, Any]) -> BattleLog | None:
    """Convert an old battle log mapping into a current `BattleLog`.

    Args:
        raw: Parsed JSON of the old document.

    Returns:
        A validated battle log, or None when no registered format matches or
        the matching converter cannot interpret the data.
    """

    for legacy_format in LEGACY_FORMATS:
        try:
            if not legacy_format.matches(raw):
                continue
            log = legacy_format.convert(raw)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Legacy format %s could not convert document: %s", legacy_format.name, exc)
            continue
        log.validate()
        logger.info("Converted legacy battle log as format %s.", legacy_format.name)
        return log

    logger.warning("No legacy converter matches this document.")
    return None


@dataclass(frozen=True, slots=True)
class LegacyConversionSummary:
    """Counts for a legacy folder conversion."""

    scanned: int = 0
    converted: int = 0
    failed: int = 0
    written: int = 0


def legacy_save_name(file_name: str) -> str:
    """Return the save file name a converted legacy file is written under."""

    return save_file_name(f"legacy_{save_display_name(file_name)}")


def convert_legacy_saves(legacy_dir: Path, saves_dir: Path, *, write: bool) -> LegacyConversionSummary:
    """Convert every old battle log in `legacy_dir` into `saves_dir`.

    Args:
        legacy_dir: Folder holding old-format JSON files.
        saves_dir: Battle log folder; converted logs are named
            `calc_data_stats_legacy_<display name>.json`.
        write: When False, convert in memory only and report counts.

    Returns:
        LegacyConversionSummary with per-file counts. Existing saves with the
        same name are overwritten.
    """

    scanned = converted = failed = written = 0
    if not legacy_dir.is_dir():
        logger.info("No legacy folder at %s; nothing to convert.", legacy_dir)
        return LegacyConversionSummary()

    for path in sorted(legacy_dir.glob(f"*{DATA_FILE_EXTENSION}")):
        scanned += 1
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.error("Failed to read legacy file %s: %s", path.name, exc)
            failed += 1
            continue

        log = convert_legacy_document(raw) if isinstance(raw, Mapping) else None
        if log is None:
            logger.warning("Legacy file %s was not converted.", path.name)
            failed += 1
            continue

        converted += 1
        log.file_name = legacy_save_name(path.name)
        if write and write_document(saves_dir / log.file_name, log):
            written += 1

    return LegacyConversionSummary(scanned=scanned, converted=converted, failed=failed, written=written)
