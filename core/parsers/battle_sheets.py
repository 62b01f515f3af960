"""Best-effort parser for wiki spirit-battle and fighter-battle sheets.

Both sheets list one battle per block of lines:

    |{{SpiritTableName|Super Star|link=y|size=64}}     <- name
    |{{SpiritType|Shield}}                              <- affinity
    |9,800                                              <- power

The same state machine handles both formats; `BattleSheetFormat` carries what
differs between them. Guiding rules:

- Rows that merge cells (`rowspan`) have their prefix stripped first.
- Spirit battles only enrich records already in the catalog; a battle for an
  unknown spirit is skipped with a warning.
- A malformed affinity or power abandons the current block and scanning
  resumes at the next name.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from core.parsers.markup import (
    ScanResult,
    WarningLog,
    first_number,
    iter_numbered_lines,
    split_template_fields,
)
from definitions.catalog import EntityCatalog, EntityRecord, SpiritAffinity, SpiritType

logger = logging.getLogger(__name__)

_AFFINITY_DELIMITER = "SpiritType|"

_AFFINITIES = {
    "Neutral": SpiritAffinity.neutral,
    "Attack": SpiritAffinity.attack,
    "Shield": SpiritAffinity.shield,
    "Grab": SpiritAffinity.grab,
}


class ScanState(StrEnum):
    """Where the scanner is within a battle block."""

    seek_entry = "seek_entry"
    seek_name = "seek_name"
    seek_affinity = "seek_affinity"
    seek_power = "seek_power"


@dataclass(frozen=True, slots=True)
class BattleSheetFormat:
    """Differences between the spirit and fighter battle sheets.

    Attributes:
        label: Noun used in warnings ("Spirit", "Fighter").
        name_delimiter: Marker identifying the name line.
        entry_delimiter: Marker that must be seen before a name is accepted.
            None means every line may start a block.
        requires_catalog_entry: Spirit battles enrich existing records; fighter
            battles create new ones.
        split_name_on_pipes_only: Spirit names are split on `|` alone so link
            options after the name survive as separate tokens.
    """

    label: str
    name_delimiter: str
    entry_delimiter: str | None
    requires_catalog_entry: bool
    split_name_on_pipes_only: bool

    def initial_state(self) -> ScanState:
        return ScanState.seek_entry if self.entry_delimiter else ScanState.seek_name

    def finalize(self, record: EntityRecord) -> None:
        """Apply values implied by the sheet to a committed record."""

        if self.requires_catalog_entry:
            return
        record.usage_type = SpiritType.fighter
        record.has_board_battle = False
        record.is_in_campaign = True
        record.is_campaign_reward = False


SPIRIT_BATTLE_SHEET = BattleSheetFormat(
    label="Spirit",
    name_delimiter="SpiritTableName|",
    entry_delimiter=None,
    requires_catalog_entry=True,
    split_name_on_pipes_only=True,
)

FIGHTER_BATTLE_SHEET = BattleSheetFormat(
    label="Fighter",
    name_delimiter="SSBU|",
    entry_delimiter="File:",
    requires_catalog_entry=False,
    split_name_on_pipes_only=False,
)


def strip_rowspan(line: str) -> str | None:
    """Remove a `rowspan=N|` cell prefix from `line`.

    Returns:
        The line without its merge prefix, the line unchanged when it has no
        `rowspan`, or None when the prefix cannot be split off.
    """

    if "rowspan" not in line:
        return line
    if line.startswith("|"):
        line = line[1:]
    pipe_index = line.find("|")
    if pipe_index <= 0:
        return None
    return line[pipe_index + 1 :]


def scan_battle_sheet(
    lines: Iterable[str],
    *,
    sheet: BattleSheetFormat,
    catalog: EntityCatalog | None = None,
) -> ScanResult:
    """Scan a battle sheet for affinity and power.

    Args:
        lines: Raw markup lines in file order.
        sheet: `SPIRIT_BATTLE_SHEET` or `FIGHTER_BATTLE_SHEET`.
        catalog: Records that spirit battles may enrich. Not modified.

    Returns:
        ScanResult with one record per committed battle. Spirit battle records
        are copies of the catalog record carrying the new battle fields.
    """

    warnings = WarningLog(logger)
    found = EntityCatalog()
    base = catalog or EntityCatalog()

    state = sheet.initial_state()
    current: EntityRecord | None = None

    for line_number, line in iter_numbered_lines(lines):
        if not line.strip():
            continue

        if state == ScanState.seek_entry:
            if sheet.entry_delimiter and sheet.entry_delimiter in line:
                state = ScanState.seek_name
            continue

        stripped = strip_rowspan(line)
        if stripped is None:
            warnings.warn(f"Cannot split the rowspan prefix off battle line {line_number}.")
            continue
        line = stripped

        if state == ScanState.seek_name:
            current = _read_name(line, line_number=line_number, sheet=sheet, base=base, found=found, warnings=warnings)
            if current is None:
                continue
            state = ScanState.seek_power if current.battle_affinity is not None else ScanState.seek_affinity
            continue

        if current is None:
            state = sheet.initial_state()
            continue

        if state == ScanState.seek_affinity:
            if _AFFINITY_DELIMITER not in line:
                continue
            if _read_affinity(current, line, line_number=line_number, sheet=sheet, warnings=warnings):
                state = ScanState.seek_power
            else:
                current = None
                state = sheet.initial_state()
            continue

        power = first_number(line)
        if power is None:
            warnings.warn(
                f"{sheet.label} {current.display_name!r} has no battle power after its affinity (line {line_number})."
            )
        else:
            if current.battle_power is None:
                current.battle_power = power
            sheet.finalize(current)
            found.add_or_update(current.display_name, current)
            logger.debug("Found %s battle data for %s.", sheet.label.lower(), current.display_name)
        current = None
        state = sheet.initial_state()

    return ScanResult(catalog=found, warnings=tuple(warnings.messages))


def _read_name(
    line: str,
    *,
    line_number: int,
    sheet: BattleSheetFormat,
    base: EntityCatalog,
    found: EntityCatalog,
    warnings: WarningLog,
) -> EntityRecord | None:
    """Return the working record for a name line, or None to keep seeking."""

    if sheet.name_delimiter not in line:
        return None

    if sheet.split_name_on_pipes_only:
        tokens = [part for part in line.split("|") if part]
    else:
        tokens = split_template_fields(line)
    if len(tokens) < 2 or not tokens[1].strip():
        return None
    name = tokens[1]

    if not sheet.requires_catalog_entry:
        return EntityRecord(display_name=name)

    existing = found.lookup(name) or base.lookup(name)
    if existing is None:
        warnings.warn(f"Found spirit {name!r} in battle data on line {line_number}, but it is not in the spirit list.")
        return None
    return existing.copy()


def _read_affinity(
    record: EntityRecord,
    line: str,
    *,
    line_number: int,
    sheet: BattleSheetFormat,
    warnings: WarningLog,
) -> bool:
    """Set the record's affinity from an affinity line; False abandons the block."""

    tokens = split_template_fields(line)
    if len(tokens) < 2:
        warnings.warn(f"{sheet.label} {record.display_name!r} has a malformed affinity on line {line_number}.")
        return False

    affinity = _AFFINITIES.get(tokens[1])
    if affinity is None:
        warnings.warn(
            f"{sheet.label} {record.display_name!r} has an invalid affinity {tokens[1]!r} on line {line_number}."
        )
        return False
    record.battle_affinity = affinity
    return True
