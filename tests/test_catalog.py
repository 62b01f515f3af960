"""Unit tests for entity records and catalog merging."""

from __future__ import annotations

import pytest

from definitions.catalog import (
    EntityCatalog,
    EntityRecord,
    SpiritAffinity,
    SpiritType,
    coerce_enum,
    sanitize_name,
)

pytestmark = pytest.mark.unit


def test_sanitize_name_folds_case_and_diacritics() -> None:
    """Lookups agree regardless of case, accents, or surrounding space."""

    assert sanitize_name("  Pokémon Trainer ") == "pokemon trainer"
    assert sanitize_name("MARIO") == sanitize_name("mario")
    assert sanitize_name("") == ""
    assert sanitize_name(None) == ""


def test_coerce_enum_accepts_values_names_and_ordinals() -> None:
    """Persisted enums may be stored as value, member name, or ordinal."""

    assert coerce_enum(SpiritAffinity, "Attack") == SpiritAffinity.attack
    assert coerce_enum(SpiritAffinity, "grab") == SpiritAffinity.grab
    assert coerce_enum(SpiritType, 2) == SpiritType.primary
    assert coerce_enum(SpiritType, 99) is None
    assert coerce_enum(SpiritType, True) is None
    assert coerce_enum(SpiritType, "Legendary") is None


def test_record_validate_normalizes_ability_synonyms() -> None:
    """Ability synonyms collapse to canonical values."""

    for raw in ("None", "[None]", "N/A", "No Effect"):
        record = EntityRecord(display_name="X", ability=raw)
        record.validate()
        assert record.ability == "None"

    enhanceable = EntityRecord(display_name="X", ability="Can Be Enhanced at Lv. 99")
    assert enhanceable.validate() is False
    assert enhanceable.ability == "Enhanced"
    assert enhanceable.validate() is True


def test_append_collection_overrides_set_fields_only() -> None:
    """Appending copies set fields and never erases existing ones."""

    catalog = EntityCatalog()
    catalog.add_or_update(
        "Sandbag",
        EntityRecord(display_name="Sandbag", series="Smash", battle_power=2500, class_rank=1),
    )
    addendum = EntityCatalog()
    addendum.add_or_update("sandbag", EntityRecord(display_name="Sandbag", battle_power=3000, series="  "))

    assert catalog.append_collection(addendum) is True

    record = catalog.lookup("SANDBAG")
    assert record is not None
    assert record.battle_power == 3000
    assert record.series == "Smash"
    assert record.class_rank == 1


def test_fill_gaps_keeps_existing_values() -> None:
    """Gap filling only sets fields that are still unset."""

    catalog = EntityCatalog()
    catalog.add_or_update("Toad", EntityRecord(display_name="Toad", battle_power=1000))
    other = EntityCatalog()
    other.add_or_update(
        "Toad",
        EntityRecord(display_name="Toad", battle_power=9999, battle_affinity=SpiritAffinity.grab),
    )

    assert catalog.fill_gaps(other) is True

    record = catalog.lookup("toad")
    assert record is not None
    assert record.battle_power == 1000
    assert record.battle_affinity == SpiritAffinity.grab


def test_merge_copies_new_records_instead_of_sharing_them() -> None:
    """Records inserted by a merge are independent of the source catalog."""

    source = EntityCatalog()
    source.add_or_update("Toad", EntityRecord(display_name="Toad"))
    catalog = EntityCatalog()
    catalog.append_collection(source)

    stored = catalog.lookup("toad")
    assert stored is not None
    stored.battle_power = 5
    original = source.lookup("toad")
    assert original is not None
    assert original.battle_power is None


def test_merge_reports_no_change_for_empty_or_identical_collections() -> None:
    """Merging nothing, or the same data again, reports no change."""

    catalog = EntityCatalog()
    catalog.add_or_update("Toad", EntityRecord(display_name="Toad", battle_power=1000))
    same = EntityCatalog()
    same.add_or_update("Toad", EntityRecord(display_name="Toad", battle_power=1000))

    assert catalog.append_collection(EntityCatalog()) is False
    assert catalog.append_collection(same) is False


def test_catalog_round_trips_through_document_mapping() -> None:
    """The `_metadata` document keeps set fields and skips unset ones."""

    catalog = EntityCatalog()
    catalog.add_or_update(
        "Pac-Man Ghost",
        EntityRecord(
            display_name="Pac-Man Ghost",
            collection_index=123,
            battle_affinity=SpiritAffinity.shield,
            usage_type=SpiritType.support,
            battle_power=9800,
            is_in_campaign=True,
        ),
    )

    payload = catalog.to_dict()

    assert payload == {
        "_metadata": {
            "pac-man ghost": {
                "spiritName": "Pac-Man Ghost",
                "BattleAffinity": "Shield",
                "Type": "Support",
                "BattlePower": 9800,
                "IsWOL": True,
            }
        }
    }
    restored = EntityCatalog.from_dict(payload)
    record = restored.lookup("pac-man ghost")
    assert record is not None
    assert record.battle_affinity == SpiritAffinity.shield
    assert record.collection_index is None


def test_catalog_from_dict_requires_metadata_mapping() -> None:
    """Documents without `_metadata` are rejected; malformed entries are skipped."""

    with pytest.raises(ValueError):
        EntityCatalog.from_dict({"spirits": {}})

    catalog = EntityCatalog.from_dict({"_metadata": {"good": {"spiritName": "Good"}, "bad": 3}})
    assert catalog.keys() == ["good"]


def test_display_name_for_falls_back_to_input() -> None:
    """Use the catalog display name when known, else the given name."""

    catalog = EntityCatalog()
    catalog.add_or_update("Pokémon Trainer", EntityRecord(display_name="Pokémon Trainer"))

    assert catalog.display_name_for("pokemon trainer") == "Pokémon Trainer"
    assert catalog.display_name_for("Giga Bowser") == "Giga Bowser"
    assert "POKEMON TRAINER" in catalog


def test_has_campaign_battle_excludes_chest_rewards() -> None:
    """Campaign rewards are looted, not fought."""

    assert EntityRecord(is_in_campaign=True).has_campaign_battle() is True
    assert EntityRecord(is_in_campaign=True, is_campaign_reward=True).has_campaign_battle() is False
    assert EntityRecord().has_campaign_battle() is False
