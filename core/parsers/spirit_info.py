"""Best-effort parser for the wiki's complete spirit list.

Input is the raw markup of the "List of spirits" table, one spirit per line,
for example::

    |001||{{Spirit|Mario}}||Primary||Super Mario||{{y|12}}||★★★||...

Guiding rules:

- Lines without a `||` separator are not candidates and are ignored quietly.
- A line that cannot be interpreted is skipped with a warning.
- Once the fixed prefix (ordinal through slot count) is read, a shortfall in
  the trailing columns still yields a partial record.
- Class rank and slot count are glyph counts (stars, slot icons).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from core.parsers.markup import (
    ScanResult,
    WarningLog,
    digits_to_int,
    is_integer_token,
    iter_numbered_lines,
    split_row_fields,
)
from definitions.catalog import EntityCatalog, EntityRecord, SpiritType

logger = logging.getLogger(__name__)

_MIN_FIELDS = 8
_ROLLOVER_MIN_FIELDS = 10

_USAGE_TAGS = {
    "Primary": SpiritType.primary,
    "Support": SpiritType.support,
    "Master": SpiritType.master,
}
_FIGHTER_TAG = "Fighter"

_YES = "y|12"
_NO = "n|12"
_VAR_YES = "#var:y"
_VAR_NO = "#var:n"
_REWARD_MARKER = "chest"


@dataclass
class _Cursor:
    """Forward-only cursor over a row's fields."""

    fields: list[str]
    index: int = 0

    def has_more(self) -> bool:
        return self.index < len(self.fields)

    def peek(self) -> str:
        return self.fields[self.index]

    def take(self) -> str:
        value = self.fields[self.index]
        self.index += 1
        return value


def parse_spirit_info_lines(lines: Iterable[str]) -> ScanResult:
    """Parse spirit list rows into entity records.

    Args:
        lines: Raw markup lines in file order.

    Returns:
        ScanResult whose catalog holds one record per accepted row. A later row
        with the same name replaces an earlier one.
    """

    warnings = WarningLog(logger)
    catalog = EntityCatalog()

    for line_number, line in iter_numbered_lines(lines):
        if not line.strip() or "||" not in line:
            continue
        record = parse_spirit_info_line(line, line_number=line_number, warnings=warnings)
        if record is None:
            continue
        logger.debug("Created spirit data for %s.", record.display_name)
        catalog.add_or_update(record.display_name, record)

    return ScanResult(catalog=catalog, warnings=tuple(warnings.messages))


def parse_spirit_info_line(
    line: str,
    *,
    line_number: int = 0,
    warnings: WarningLog | None = None,
) -> EntityRecord | None:
    """Parse a single spirit list row.

    Args:
        line: Raw markup row.
        line_number: Source line number used in warnings.
        warnings: Optional collector; defaults to logging only.

    Returns:
        The parsed (possibly partial) record, or None when the row is rejected.
    """

    warnings = warnings or WarningLog(logger)
    cursor = _Cursor(split_row_fields(line))
    if len(cursor.fields) < _MIN_FIELDS:
        warnings.warn(f"Spirit info line {line_number} has too few fields ({len(cursor.fields)}).")
        return None

    record = EntityRecord()
    record.collection_index = digits_to_int(cursor.take())

    name = cursor.take()
    if "|" in name:
        name = name.split("|", 1)[1]
    record.display_name = name

    usage_tag = cursor.take()
    if usage_tag == _FIGHTER_TAG:
        return None
    usage_type = _USAGE_TAGS.get(usage_tag)
    if usage_type is None:
        warnings.warn(f"Cannot parse spirit usage type {usage_tag!r} on line {line_number}.")
        return None
    record.usage_type = usage_type

    series = cursor.take()
    if "rollover" in series:
        if len(cursor.fields) < _ROLLOVER_MIN_FIELDS:
            warnings.warn(
                f"Spirit {name!r} on line {line_number} has rollover metadata without enough fields after it."
            )
            return None
        cursor.index += 2
        record.series = None
    else:
        record.series = series

    if _YES not in cursor.take():
        return None

    if record.usage_type == SpiritType.master:
        return record

    record.class_rank = len(cursor.take())
    cursor.take()  # affinity; the battle sheets carry the reliable value
    slots = cursor.take()
    record.slot_count = 0 if "0" in slots else len(slots)

    if not cursor.has_more():
        warnings.warn(f"Spirit {name!r} on line {line_number} has no ability or battle location.")
        return record

    while cursor.has_more() and _is_skippable(cursor.peek()):
        cursor.index += 1
    if not cursor.has_more():
        warnings.warn(f"Spirit {name!r} on line {line_number} has no ability after the stat columns.")
        return record

    record.ability = cursor.take()
    if not cursor.has_more():
        warnings.warn(f"Spirit {name!r} on line {line_number} has no battle location.")
        return record

    _resolve_location(record, cursor, line_number=line_number, warnings=warnings)
    return record


def _is_skippable(token: str) -> bool:
    """Return True for padding and primary-stat tokens before the ability."""

    return not token.strip() or is_integer_token(token) or "#DDD" in token or "colspan" in token


def _resolve_location(
    record: EntityRecord,
    cursor: _Cursor,
    *,
    line_number: int,
    warnings: WarningLog,
) -> None:
    """Resolve board, campaign, and reward flags from the location columns."""

    location = cursor.take()
    if _YES in location:
        record.has_board_battle = True
    elif _VAR_YES in location:
        record.has_board_battle = True
        record.is_in_campaign = (digits_to_int(location) or 0) > 1
    elif _NO in location:
        record.has_board_battle = False
    elif _VAR_NO in location:
        record.has_board_battle = False
        if (digits_to_int(location) or 0) > 1:
            record.is_in_campaign = False

    if record.is_in_campaign is None:
        if not cursor.has_more():
            warnings.warn(
                f"Spirit {record.display_name!r} on line {line_number} cannot resolve its campaign location."
            )
            return
        campaign = cursor.take()
        record.is_in_campaign = _YES in campaign or _VAR_YES in campaign

    if not record.is_in_campaign or not cursor.has_more():
        record.is_campaign_reward = False
        return

    record.is_campaign_reward = _REWARD_MARKER in cursor.take()
