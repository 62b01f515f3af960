"""Integration tests for JSON document persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from core.documents import (
    DocumentFormatError,
    load_document,
    read_document,
    read_or_create_document,
    write_document,
)
from definitions.catalog import EntityCatalog, EntityRecord
from gamedata.battle_log import BattleEntry, BattleLog, Individual
from gamedata.presets import DEFAULT_BOSSES, CreationSettings

pytestmark = pytest.mark.integration


def test_write_then_read_battle_log_is_equal(tmp_path: Path) -> None:
    """A validated battle log survives a write/read cycle."""

    log = BattleLog(players=["Ann", "Bo"])
    entry = BattleEntry(winner=0)
    entry.update_loss(Individual(1), value=3)
    log.add_or_update("Pokémon Trainer", entry)
    log.validate()
    path = tmp_path / "saves" / "calc_data_stats_pair.json"

    assert write_document(path, log) is True
    restored = read_document(path, BattleLog)

    assert restored == log
    assert path.read_text(encoding="utf-8").endswith("\n")


def test_read_document_returns_none_for_missing_or_broken_files(tmp_path: Path) -> None:
    """Unreadable documents are logged and reported as None."""

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    wrong_shape = tmp_path / "list.json"
    wrong_shape.write_text("[1, 2]", encoding="utf-8")

    assert read_document(tmp_path / "missing.json", BattleLog) is None
    assert read_document(broken, BattleLog) is None
    assert read_document(wrong_shape, BattleLog) is None


def test_load_document_raises_format_error_for_wrong_document_type(tmp_path: Path) -> None:
    """A battle log is not a spirit collection."""

    path = tmp_path / "log.json"
    write_document(path, BattleLog(players=["Ann"]))

    with pytest.raises(DocumentFormatError):
        load_document(path, EntityCatalog)


def test_read_or_create_document_creates_missing_documents(tmp_path: Path) -> None:
    """A missing document is created with repaired defaults and written out."""

    path = tmp_path / "calc_data_settings.json"

    creation, ok = read_or_create_document(path, CreationSettings)

    assert ok is True
    assert creation.bosses == list(DEFAULT_BOSSES)
    assert path.exists()
    written = json.loads(path.read_text(encoding="utf-8"))
    assert written["defaultSettings"] == {"players": ["Player 1", "Player 2", "Player 3"]}


def test_read_or_create_document_rewrites_repaired_documents(tmp_path: Path) -> None:
    """Documents repaired by validation are written back."""

    path = tmp_path / "calc_data_settings.json"
    path.write_text(json.dumps({"defaultSettings": {"players": ["Ann"]}}), encoding="utf-8")

    creation, ok = read_or_create_document(path, CreationSettings)

    assert ok is True
    assert creation.default_settings.players == ["Ann"]
    assert json.loads(path.read_text(encoding="utf-8"))["bosses"] == list(DEFAULT_BOSSES)


def test_read_or_create_document_falls_back_on_unreadable_files(tmp_path: Path) -> None:
    """An unreadable document yields defaults and a failure flag, leaving the file alone."""

    path = tmp_path / "calc_data_settings.json"
    path.write_text("oops", encoding="utf-8")

    creation, ok = read_or_create_document(path, CreationSettings)

    assert ok is False
    assert creation.bosses == list(DEFAULT_BOSSES)
    assert path.read_text(encoding="utf-8") == "oops"


def test_write_document_keeps_non_ascii_names(tmp_path: Path) -> None:
    """Names are written as UTF-8 text rather than escapes."""

    catalog = EntityCatalog()
    catalog.add_or_update("Pokémon Trainer", EntityRecord(display_name="Pokémon Trainer"))
    path = tmp_path / "addendum.json"

    write_document(path, catalog)

    assert "Pokémon Trainer" in path.read_text(encoding="utf-8")
