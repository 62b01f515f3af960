"""Compile the spirit catalog from wiki sheets and user addenda.

This module performs the "wiki markup -> catalog" step:

- the spirit list sheet creates the base records,
- the spirit and fighter battle sheets fill in affinity and power (they never
  overwrite a value an earlier sheet set),
- addendum collections (`*.json` in the addendum directory, by file name)
  are merged last and override the fields they set,
- ability synonyms are normalized once everything is merged.

Missing or unreadable sources are logged and skipped; compilation always
returns a catalog, possibly empty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from core.documents import DocumentFormatError, load_document, write_document
from core.parsers.battle_sheets import FIGHTER_BATTLE_SHEET, SPIRIT_BATTLE_SHEET, scan_battle_sheet
from core.parsers.markup import ScanResult
from core.parsers.spirit_info import parse_spirit_info_lines
from core.paths import (
    ADDENDUM_EXAMPLE_FILE_NAME,
    DATA_FILE_EXTENSION,
    FIGHTER_BATTLE_FILE_NAME,
    SPIRIT_BATTLE_FILE_NAME,
    SPIRIT_INFO_FILE_NAME,
    DataLayout,
)
from definitions.catalog import EntityCatalog, EntityRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CompileSummary:
    """Counts for a catalog compile run."""

    info_records: int = 0
    spirit_battles: int = 0
    fighter_battles: int = 0
    addenda_applied: int = 0
    addenda_failed: int = 0
    warnings: int = 0
    wrote_example_addendum: bool = False


@dataclass(frozen=True)
class CompiledCatalog:
    """Result of `compile_catalog`.

    Attributes:
        catalog: The merged, validated catalog.
        summary: Counts describing the run.
    """

    catalog: EntityCatalog
    summary: CompileSummary


def read_source_lines(path: Path) -> list[str] | None:
    """Return the lines of a wiki sheet, or None (logged) when unreadable."""

    if not path.is_file():
        logger.error("Unable to read spirit metadata: no file at %s.", path)
        return None
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Could not read spirit metadata file %s: %s", path.name, exc)
        return None


def _merge_scan(catalog: EntityCatalog, result: ScanResult) -> int:
    if len(result.catalog) > 0:
        catalog.fill_gaps(result.catalog)
    return len(result.catalog)


def compile_catalog(layout: DataLayout) -> CompiledCatalog:
    """Compile the catalog from the sheets and addenda under `layout`.

    Args:
        layout: Data directories to read from.

    Returns:
        CompiledCatalog with the catalog and run counts. When no addendum
        changed any data, an example addendum file is written for the user.
    """

    logger.info("Begin compiling spirit metadata.")
    catalog = EntityCatalog()
    warnings = 0

    info_records = 0
    lines = read_source_lines(layout.spirit_sources / SPIRIT_INFO_FILE_NAME)
    if lines is not None:
        result = parse_spirit_info_lines(lines)
        info_records = _merge_scan(catalog, result)
        warnings += len(result.warnings)

    spirit_battles = 0
    lines = read_source_lines(layout.spirit_sources / SPIRIT_BATTLE_FILE_NAME)
    if lines is not None:
        result = scan_battle_sheet(lines, sheet=SPIRIT_BATTLE_SHEET, catalog=catalog)
        spirit_battles = _merge_scan(catalog, result)
        warnings += len(result.warnings)

    fighter_battles = 0
    lines = read_source_lines(layout.spirit_sources / FIGHTER_BATTLE_FILE_NAME)
    if lines is not None:
        result = scan_battle_sheet(lines, sheet=FIGHTER_BATTLE_SHEET)
        fighter_battles = _merge_scan(catalog, result)
        warnings += len(result.warnings)

    applied, failed, wrote_example = _apply_addenda(catalog, layout.addenda)
    catalog.validate()
    logger.info("Completed compiling spirit metadata (%d records).", len(catalog))

    return CompiledCatalog(
        catalog=catalog,
        summary=CompileSummary(
            info_records=info_records,
            spirit_battles=spirit_battles,
            fighter_battles=fighter_battles,
            addenda_applied=applied,
            addenda_failed=failed,
            warnings=warnings,
            wrote_example_addendum=wrote_example,
        ),
    )


def _apply_addenda(catalog: EntityCatalog, addenda_dir: Path) -> tuple[int, int, bool]:
    """Merge every addendum collection into `catalog`.

    Returns:
        `(applied, failed, wrote_example)`.
    """

    try:
        addenda_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("Failed to find or create the spirit addendum directory %s: %s", addenda_dir, exc)
        return 0, 0, False

    applied = 0
    failed = 0
    appended_data = False
    for path in sorted(addenda_dir.glob(f"*{DATA_FILE_EXTENSION}")):
        try:
            addendum = load_document(path, EntityCatalog)
        except (OSError, DocumentFormatError) as exc:
            logger.error("Failed to read addendum %s; only spirit collections belong there: %s", path.name, exc)
            failed += 1
            continue
        logger.info("Read addendum spirit collection %s.", path.name)
        applied += 1
        appended_data |= catalog.append_collection(addendum)

    if appended_data:
        return applied, failed, False

    example = EntityCatalog()
    example.add_or_update("Mario", EntityRecord(display_name="Mario"))
    wrote = write_document(addenda_dir / ADDENDUM_EXAMPLE_FILE_NAME, example)
    return applied, failed, wrote
