"""Unit tests for battle entries and battle log mutation."""

from __future__ import annotations

import pytest

from gamedata.battle_log import (
    CURRENT_SAVE_VERSION,
    SHARED,
    BattleEntry,
    BattleLog,
    BattlePlayerTally,
    BattleType,
    Individual,
)

pytestmark = pytest.mark.unit


def test_shared_entry_reports_shared_losses_for_every_slot() -> None:
    """Shared battles defer every player's losses to the shared tally."""

    entry = BattleEntry(is_shared=True, player_tallies={0: BattlePlayerTally(5)})
    entry.update_loss(SHARED, value=2)

    assert entry.get_losses(Individual(0)) == 2
    assert entry.get_losses(Individual(1), defer_to_shared=True) == 2
    assert entry.get_losses(SHARED, defer_to_shared=False) == 2
    assert entry.get_losses(SHARED) == 2
    assert entry.get_losses(Individual(0), defer_to_shared=False) == 5


def test_update_loss_clamps_at_zero() -> None:
    """Loss counters never go negative."""

    entry = BattleEntry()

    assert entry.update_loss(Individual(1), delta=-3) == 0
    assert entry.update_loss(Individual(1), delta=2) == 2
    assert entry.update_loss(Individual(1), value=-7) == 0


def test_update_loss_requires_exactly_one_change() -> None:
    """Either a delta or an absolute value is required, not both."""

    entry = BattleEntry()

    with pytest.raises(ValueError):
        entry.update_loss(Individual(0))
    with pytest.raises(ValueError):
        entry.update_loss(Individual(0), delta=1, value=1)


def test_shared_slot_is_never_the_winner() -> None:
    """Winner checks only match individual players."""

    entry = BattleEntry(winner=0, is_shared=True)

    assert entry.is_winner(Individual(0)) is True
    assert entry.is_winner(Individual(1)) is False
    assert entry.is_winner(SHARED) is False


def test_entry_validate_repairs_winner_and_backfills_players() -> None:
    """Validation clears negative winners and adds missing player tallies."""

    entry = BattleEntry(winner=-4, player_tallies={0: BattlePlayerTally(-1)})

    assert entry.validate(player_count=3) is False
    assert entry.winner is None
    assert entry.has_winner() is False
    assert sorted(entry.player_tallies) == [0, 1, 2]
    assert entry.player_tallies[0].losses == 0
    assert entry.validate(player_count=3) is True


def test_add_or_update_notifies_only_for_new_keys() -> None:
    """The change callback fires when the set of battles changes."""

    log = BattleLog("calc_data_stats_test.json", players=["Ann", "Bo"])
    changes: list[int] = []

    def on_changed(changed: BattleLog) -> None:
        changes.append(len(changed))

    assert log.add_or_update("Sandbag", BattleEntry(), on_changed) is True
    assert log.add_or_update("SANDBAG", BattleEntry(winner=1), on_changed) is False
    assert log.remove("sandbag", on_changed) is True
    assert log.remove("sandbag", on_changed) is False

    assert changes == [1, 0]


def test_add_or_update_stores_validated_copies() -> None:
    """Entries are copied on the way in and on the way out."""

    log = BattleLog(players=["Ann", "Bo", "Cy"])
    entry = BattleEntry(winner=2)
    log.add_or_update("Toad", entry)
    entry.winner = 0

    stored = log.get_entry("toad")
    assert stored is not None
    assert stored.winner == 2
    assert sorted(stored.player_tallies) == [0, 1, 2]
    assert log.last_added_battle == "toad"

    stored.update_loss(Individual(0), value=9)
    fresh = log.get_entry("toad")
    assert fresh is not None
    assert fresh.get_losses(Individual(0)) == 0


def test_blank_names_are_rejected() -> None:
    """Entries need a name."""

    log = BattleLog(players=["Ann"])

    assert log.add_or_update("   ", BattleEntry()) is False
    assert len(log) == 0


def test_log_validate_repairs_settings_and_version() -> None:
    """Validation fills default players and stamps the current version."""

    log = BattleLog()

    assert log.validate() is False
    assert log.players == ["Player 1", "Player 2", "Player 3"]
    assert log.save_version == CURRENT_SAVE_VERSION
    assert log.validate() is True


def test_set_players_backfills_existing_entries() -> None:
    """Adding a player gives every entry a tally for them."""

    log = BattleLog(players=["Ann"])
    log.add_or_update("Toad", BattleEntry())
    log.set_players(["Ann", "Bo"])

    stored = log.get_entry("toad")
    assert stored is not None
    assert sorted(stored.player_tallies) == [0, 1]
    assert log.player_name(1) == "Bo"
    assert log.player_name(2) is None


def test_log_round_trips_through_document_mapping() -> None:
    """Persisted logs use the document keys and read back equal."""

    log = BattleLog(players=["Ann", "Bo"])
    shared = BattleEntry(battle_type=BattleType.boss, is_shared=True)
    shared.update_loss(SHARED, value=4)
    log.add_or_update("Galleom", shared)
    log.add_or_update("Toad", BattleEntry(winner=1))
    log.validate()

    payload = log.to_dict()

    assert payload["lastAddedBattle"] == "toad"
    assert payload["_saveVersion"] == CURRENT_SAVE_VERSION
    assert payload["_settings"] == {"players": ["Ann", "Bo"]}
    assert payload["_battleEntries"]["galleom"] == {
        "type": "Boss",
        "winningPlayer": -1,
        "isBattleShared": True,
        "_playerData": {"0": {"losses": 0}, "1": {"losses": 0}},
        "_sharedPlayerData": {"losses": 4},
    }
    assert BattleLog.from_dict(payload) == log


def test_entry_from_dict_accepts_ordinal_battle_types() -> None:
    """Older documents stored the battle type as an ordinal."""

    entry = BattleEntry.from_dict({"type": 2, "winningPlayer": 0})

    assert entry.battle_type == BattleType.boss
    assert entry.winner == 0
    with pytest.raises(ValueError):
        BattleEntry.from_dict({"type": "Mystery"})
