"""Service-layer functions for the core app.

Services in `core` coordinate the data directory (documents on disk) with the
pure parsing, battle log, and analysis modules. Management commands call these
functions; nothing here writes to stdout.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from django.conf import settings

from analysis import tally_stats
from analysis.board import default_stat_board, render_stat_board
from analysis.dto import StatTally
from analysis.stats import StatDefinition
from core.documents import read_document, read_or_create_document, write_document
from core.paths import DataLayout, data_layout, save_display_name, save_file_name
from definitions.catalog import EntityCatalog
from definitions.catalog_build import CompiledCatalog, compile_catalog
from gamedata.battle_log import (
    NO_WINNER_INDEX,
    SHARED,
    BattleEntry,
    BattleLog,
    BattleType,
    Individual,
    PlayerSlot,
    SaveDataSettings,
)
from gamedata.presets import CreationSettings, LogPreset, create_battle_log

logger = logging.getLogger(__name__)


class DataDirectoryError(RuntimeError):
    """Raised when the configured data directory cannot be prepared."""


def prepare_layout() -> DataLayout:
    """Return the configured data layout, creating its directories.

    Raises:
        DataDirectoryError: When a directory cannot be created.
    """

    layout = data_layout()
    try:
        layout.ensure()
    except OSError as exc:
        logger.critical("Failed to find or create the data directory %s: %s", layout.root, exc)
        raise DataDirectoryError(f"Cannot prepare data directory {layout.root}: {exc}") from exc
    return layout


class CalculatorSession:
    """The catalog and current battle log owned by one command run.

    The catalog is compiled on first use and then shared by every tally made
    through the session.
    """

    def __init__(self, layout: DataLayout) -> None:
        self.layout = layout
        self.battle_log: BattleLog | None = None
        self._compiled: CompiledCatalog | None = None

    @property
    def compiled(self) -> CompiledCatalog:
        if self._compiled is None:
            self._compiled = compile_catalog(self.layout)
        return self._compiled

    @property
    def catalog(self) -> EntityCatalog:
        return self.compiled.catalog

    def open_log(self, name: str) -> BattleLog | None:
        """Make the battle log called `name` current; None when unreadable."""

        self.battle_log = load_battle_log(self.layout, name)
        return self.battle_log

    def save_log(self) -> bool:
        """Write the current battle log; False when there is none or writing fails."""

        if self.battle_log is None:
            logger.error("No battle log is open; nothing to save.")
            return False
        return save_battle_log(self.layout, self.battle_log)

    def tally(self, board: list[StatDefinition] | None = None) -> list[StatTally]:
        """Tally `board` (the default stat board when omitted) over the current log."""

        if self.battle_log is None:
            return []
        stats = board if board is not None else default_stat_board()
        return tally_stats(stats, battle_log=self.battle_log, catalog=self.catalog)

    def render_stats(self) -> str:
        """Render the default stat board for the current log as text."""

        players = self.battle_log.players if self.battle_log is not None else []
        return render_stat_board(self.tally(), players)


def load_creation_settings(layout: DataLayout) -> CreationSettings:
    """Load the creation settings document, creating it on first use.

    A new document takes its players from `SPIRIT_CALC_DEFAULT_PLAYERS`.
    """

    path = layout.creation_settings
    if not path.exists():
        creation = CreationSettings(
            default_settings=SaveDataSettings(players=list(settings.SPIRIT_CALC_DEFAULT_PLAYERS)),
        )
        creation.validate()
        write_document(path, creation)
        return creation

    creation, ok = read_or_create_document(path, CreationSettings)
    if not ok:
        logger.warning("Using default creation settings; %s could not be used.", path.name)
    return creation


def list_battle_logs(layout: DataLayout) -> list[str]:
    """Return the display names of every battle log in the saves folder."""

    paths = layout.saves.glob(save_file_name("*"))
    return sorted(save_display_name(path.name) for path in paths if path.is_file())


def load_battle_log(layout: DataLayout, name: str) -> BattleLog | None:
    """Read the battle log called `name`; None (logged) when unavailable."""

    log = read_document(layout.save_path(name), BattleLog)
    if log is not None:
        log.file_name = save_file_name(name)
    return log


def save_battle_log(layout: DataLayout, log: BattleLog) -> bool:
    """Validate `log`, then write it to the saves folder under its file name."""

    log.validate()
    return write_document(layout.saves / save_file_name(log.file_name), log)


def new_battle_log(
    session: CalculatorSession,
    name: str,
    *,
    preset: LogPreset,
    players: list[str] | None = None,
    bosses: list[str] | None = None,
) -> BattleLog:
    """Build a new battle log from a preset and the creation settings.

    Args:
        session: Session supplying the layout and catalog; the new log
            becomes its current log.
        name: Display name of the new log.
        preset: Which battles to pre-populate.
        players: Player names; defaults to the creation settings.
        bosses: Boss battles; defaults to the creation settings.

    Returns:
        The new, unsaved battle log.
    """

    creation = load_creation_settings(session.layout)
    catalog = session.catalog if preset != LogPreset.blank else EntityCatalog()

    session.battle_log = create_battle_log(
        save_file_name(name),
        preset=preset,
        players=players or list(creation.default_settings.players),
        bosses=bosses if bosses is not None else list(creation.bosses or ()),
        catalog=catalog,
    )
    return session.battle_log


@dataclass(frozen=True, slots=True)
class BattleUpdate:
    """Requested change to one battle entry.

    Attributes:
        battle_type: New battle type; None keeps the current type.
        winner: Winning player index, `NO_WINNER_INDEX` to clear, or None to keep.
        is_shared: New shared flag; None keeps the current flag.
        losses: Absolute loss counts per slot.
    """

    battle_type: BattleType | None = None
    winner: int | None = None
    is_shared: bool | None = None
    losses: Mapping[PlayerSlot, int] | None = None


def apply_battle_update(log: BattleLog, battle_name: str, update: BattleUpdate) -> BattleEntry:
    """Apply `update` to the entry for `battle_name`, creating it if needed.

    Raises:
        ValueError: When the winner or a loss slot names a player the log
            does not have.

    Returns:
        The stored entry as it now reads.
    """

    entry = log.get_entry(battle_name) or BattleEntry()
    if update.battle_type is not None:
        entry.battle_type = update.battle_type
    if update.is_shared is not None:
        entry.is_shared = update.is_shared
    if update.winner is not None:
        if update.winner == NO_WINNER_INDEX:
            entry.winner = None
        elif log.is_valid_player(update.winner):
            entry.winner = update.winner
        else:
            raise ValueError(f"Player {update.winner} is not configured in {log.file_name}.")

    for slot, losses in (update.losses or {}).items():
        if isinstance(slot, Individual) and not log.is_valid_player(slot.index):
            raise ValueError(f"Player {slot.index} is not configured in {log.file_name}.")
        entry.update_loss(slot, value=losses)

    log.add_or_update(battle_name, entry)
    return log.get_entry(battle_name) or entry


def parse_slot(token: str) -> PlayerSlot:
    """Parse a loss slot token: a zero-based player index or `shared`.

    Raises:
        ValueError: When the token is neither.
    """

    value = token.strip().lower()
    if value == "shared":
        return SHARED
    index = int(value)
    if index < 0:
        raise ValueError(f"Player index must not be negative: {token}")
    return Individual(index)

