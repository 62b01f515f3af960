"""Data directory layout and file naming for calculator documents.

All locations hang off `settings.SPIRIT_CALC_DATA_DIR`:

- `_saves/`     battle logs (`calc_data_stats_<name>.json`)
- `_spirit/`    raw wiki sheets
- `_spiritadd/` user addendum collections
- `_legacy/`    old-format battle logs awaiting conversion
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from django.conf import settings

logger = logging.getLogger(__name__)

DATA_FILE_EXTENSION = ".json"
SAVE_DATA_FILE_HEADER = "calc_data_stats_"
CREATION_SETTINGS_FILE_NAME = "calc_data_settings.json"
ADDENDUM_EXAMPLE_FILE_NAME = "spirit_addendum_example.json"

SPIRIT_INFO_FILE_NAME = "calc_metadata_spirit_info.txt"
SPIRIT_BATTLE_FILE_NAME = "calc_metadata_spirit_battle.txt"
FIGHTER_BATTLE_FILE_NAME = "calc_metadata_fighter_battle.txt"


@dataclass(frozen=True, slots=True)
class DataLayout:
    """Resolved directories for one data root."""

    root: Path

    @property
    def saves(self) -> Path:
        return self.root / "_saves"

    @property
    def spirit_sources(self) -> Path:
        return self.root / "_spirit"

    @property
    def addenda(self) -> Path:
        return self.root / "_spiritadd"

    @property
    def legacy(self) -> Path:
        return self.root / "_legacy"

    @property
    def creation_settings(self) -> Path:
        return self.root / CREATION_SETTINGS_FILE_NAME

    def save_path(self, name: str) -> Path:
        """Return the path of the battle log called `name`."""

        return self.saves / save_file_name(name)

    def ensure(self) -> None:
        """Create every directory of the layout.

        Raises:
            OSError: When a directory cannot be created.
        """

        for directory in (self.root, self.saves, self.spirit_sources, self.addenda, self.legacy):
            directory.mkdir(parents=True, exist_ok=True)


def data_layout() -> DataLayout:
    """Return the layout configured by `SPIRIT_CALC_DATA_DIR`."""

    return DataLayout(root=Path(settings.SPIRIT_CALC_DATA_DIR))


def save_file_name(name: str) -> str:
    """Return the file name for a battle log, adding header and extension."""

    file_name = name.strip()
    if not file_name.startswith(SAVE_DATA_FILE_HEADER):
        file_name = f"{SAVE_DATA_FILE_HEADER}{file_name}"
    if not file_name.endswith(DATA_FILE_EXTENSION):
        file_name = f"{file_name}{DATA_FILE_EXTENSION}"
    return file_name


def save_display_name(file_name: str) -> str:
    """Return a battle log's display name (file name minus header and extension)."""

    display = file_name.replace(SAVE_DATA_FILE_HEADER, "")
    if display.endswith(DATA_FILE_EXTENSION):
        display = display[: -len(DATA_FILE_EXTENSION)]
    return display
