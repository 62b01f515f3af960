"""Pytest fixtures shared across unit and integration tests."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from core.paths import DataLayout


@pytest.fixture
def data_dir(tmp_path: Path, settings) -> DataLayout:
    """Point `SPIRIT_CALC_DATA_DIR` at a temporary directory and return its layout."""

    root = tmp_path / "data"
    settings.SPIRIT_CALC_DATA_DIR = root
    layout = DataLayout(root=root)
    layout.ensure()
    return layout


@pytest.fixture
def spirit_sources(data_dir: DataLayout) -> DataLayout:
    """Write small wiki sheets into the temporary data directory."""

    (data_dir.spirit_sources / "calc_metadata_spirit_info.txt").write_text(
        "\n".join(
            [
                "{| class=\"wikitable sortable\"",
                "|001||{{Spirit|Mario}}||Fighter||Super Mario||{{y|12}}||-||-||-||-",
                "|123||{{Spirit|Pac-Man Ghost}}||Support||Pac-Man||{{y|12}}||★★||{{Attack}}||◇||"
                "1234||567||Can Be Enhanced at Lv. 99||{{y|12}}||{{y|12}}||{{chest}}",
                "|200||{{Spirit|Sandbag}}||Primary||Super Smash Bros.||{{y|12}}||★||{{Neutral}}||◇◇◇||"
                "100||100||N/A||{{n|12}}||{{y|12}}||-",
                "|300||{{Spirit|Board Only}}||Primary||Misc||{{y|12}}||★★★★||{{Grab}}||◇◇||"
                "900||900||Weight ↑||{{y|12}}||{{n|12}}",
                "|}",
            ]
        ),
        encoding="utf-8",
    )
    (data_dir.spirit_sources / "calc_metadata_spirit_battle.txt").write_text(
        "\n".join(
            [
                "|{{SpiritTableName|Pac-Man Ghost|link=y|size=64}}",
                "|{{SpiritType|Shield}}",
                "|9,800",
                "|{{SpiritTableName|Unknown Spirit|link=y}}",
                "|{{SpiritType|Grab}}",
                "|1,000",
                "|rowspan=2|{{SpiritTableName|Sandbag|link=y}}",
                "|{{SpiritType|Neutral}}",
                "|2,500",
            ]
        ),
        encoding="utf-8",
    )
    (data_dir.spirit_sources / "calc_metadata_fighter_battle.txt").write_text(
        "\n".join(
            [
                "|[[File:SSBU Mario.png|64px]]",
                "|{{SSBU|Mario}}",
                "|{{SpiritType|Neutral}}",
                "|10,000",
            ]
        ),
        encoding="utf-8",
    )
    return data_dir


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    The suite is runnable by intent:
    - `unit`: pure, fast tests with no Django settings or file IO.
    - `integration`: tests touching Django settings, commands, or the filesystem.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
