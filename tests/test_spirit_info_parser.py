"""Golden tests for spirit list (wiki markup) parsing."""

from __future__ import annotations

import pytest

from core.parsers.spirit_info import parse_spirit_info_line, parse_spirit_info_lines
from definitions.catalog import SpiritType

pytestmark = [pytest.mark.unit, pytest.mark.golden]


def test_parse_spirit_info_line_reads_primary_stat_columns() -> None:
    """Parse the fixed prefix of a primary spirit row."""

    record = parse_spirit_info_line("001||Mario||Primary||Super Mario||y|12||★★★||0||0||None||…")

    assert record is not None
    assert record.collection_index == 1
    assert record.display_name == "Mario"
    assert record.usage_type == SpiritType.primary
    assert record.series == "Super Mario"
    assert record.class_rank == 3
    assert record.slot_count == 0
    assert record.ability == "None"
    assert record.has_board_battle is None
    assert record.is_in_campaign is None


def test_parse_spirit_info_line_resolves_location_columns() -> None:
    """Read board, campaign, and chest columns after the ability."""

    line = (
        "|123||{{Spirit|Pac-Man Ghost}}||Support||Pac-Man||{{y|12}}||★★||{{Attack}}||◇||"
        "1234||567||Can Be Enhanced at Lv. 99||{{y|12}}||{{y|12}}||{{chest}}"
    )

    record = parse_spirit_info_line(line)

    assert record is not None
    assert record.collection_index == 123
    assert record.display_name == "Pac-Man Ghost"
    assert record.usage_type == SpiritType.support
    assert record.class_rank == 2
    assert record.slot_count == 1
    assert record.ability == "Can Be Enhanced at Lv. 99"
    assert record.has_board_battle is True
    assert record.is_in_campaign is True
    assert record.is_campaign_reward is True
    assert record.has_campaign_battle() is False


def test_parse_spirit_info_line_reads_var_location_as_campaign_count() -> None:
    """A `#var:y` location carries the campaign appearance count."""

    line = "|050||{{Spirit|Toad}}||Support||Super Mario||{{y|12}}||★||{{Grab}}||◇||12||Fire ↑||{{#var:y|2}}||-"

    record = parse_spirit_info_line(line)

    assert record is not None
    assert record.ability == "Fire ↑"
    assert record.has_board_battle is True
    assert record.is_in_campaign is True
    assert record.is_campaign_reward is False


def test_parse_spirit_info_line_returns_master_after_availability() -> None:
    """Master spirits stop after the availability column."""

    record = parse_spirit_info_line("|1000||{{Spirit|Sensei}}||Master||Various||{{y|12}}||x||x||x")

    assert record is not None
    assert record.usage_type == SpiritType.master
    assert record.class_rank is None
    assert record.slot_count is None


def test_parse_spirit_info_line_skips_rollover_series_columns() -> None:
    """Rollover metadata leaves the series unset and skips two columns."""

    line = "|077||{{Spirit|Shadow}}||Primary||{{rollover|Xenoblade}}||extra||more||{{y|12}}||★★||{{Attack}}||◇◇||Weight ↓"

    record = parse_spirit_info_line(line)

    assert record is not None
    assert record.series is None
    assert record.class_rank == 2
    assert record.slot_count == 2
    assert record.ability == "Weight ↓"


def test_parse_spirit_info_lines_ignores_fighters_and_unavailable_spirits() -> None:
    """Reject fighter rows and rows not marked available, quietly."""

    lines = [
        "{| class=\"wikitable\"",
        "|001||{{Spirit|Link}}||Fighter||Zelda||{{y|12}}||-||-||-||-",
        "|002||{{Spirit|Unreleased}}||Primary||Misc||{{n|12}}||★||-||◇||None",
        "|}",
    ]

    result = parse_spirit_info_lines(lines)

    assert len(result.catalog) == 0
    assert result.warnings == ()


def test_parse_spirit_info_lines_warns_on_short_and_unknown_rows() -> None:
    """Short rows and unknown usage types are skipped with a warning."""

    lines = [
        "|1||Foo||Primary",
        "|2||{{Spirit|Bar}}||Legendary||Misc||{{y|12}}||★||-||◇||None",
        "|3||{{Spirit|Baz}}||Primary||Misc||{{y|12}}||★★||-||◇◇||None||{{y|12}}||{{y|12}}",
    ]

    result = parse_spirit_info_lines(lines)

    assert result.catalog.keys() == ["baz"]
    assert len(result.warnings) == 2
    assert "too few fields" in result.warnings[0]
    assert "Legendary" in result.warnings[1]


def test_parse_spirit_info_lines_keeps_partial_records() -> None:
    """A row missing its location columns still yields a record, with a warning."""

    result = parse_spirit_info_lines(["|9||{{Spirit|Partial}}||Primary||Misc||{{y|12}}||★||-||◇"])

    record = result.catalog.lookup("partial")
    assert record is not None
    assert record.class_rank == 1
    assert record.slot_count == 1
    assert record.ability is None
    assert len(result.warnings) == 1
