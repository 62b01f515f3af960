"""JSON persistence for calculator documents.

A document is any object that can round-trip through a JSON mapping and repair
itself:

- `to_dict()` returns a JSON-compatible mapping,
- `from_dict(payload)` (classmethod) rebuilds it,
- `validate()` repairs in place and returns False when something changed.

Read and write failures never propagate: they are logged and surfaced as a
`None`/`False` result so callers can fall back to defaults.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, Self, TypeVar

logger = logging.getLogger(__name__)


class DocumentFormatError(ValueError):
    """Raised when a JSON file does not hold the expected document shape."""


class Document(Protocol):
    """Structural type for persisted calculator documents."""

    def validate(self) -> bool: ...

    def to_dict(self) -> dict[str, Any]: ...

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Self: ...


D = TypeVar("D", bound=Document)


def load_document(path: Path, document_type: type[D]) -> D:
    """Load and validate a document, raising on any failure.

    Raises:
        OSError: When the file cannot be read.
        DocumentFormatError: When the file is not a JSON object of the right shape.
    """

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DocumentFormatError(f"{path.name} is not valid JSON: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise DocumentFormatError(f"{path.name} does not contain a JSON object.")
    try:
        return document_type.from_dict(payload)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise DocumentFormatError(f"{path.name} is not a {document_type.__name__}: {exc}") from exc


def read_document(path: Path, document_type: type[D]) -> D | None:
    """Read a document, returning None (and logging) on failure.

    Returns:
        The loaded document, or None when the file is missing or unreadable.
        A document repaired by `validate()` is written back before returning.
    """

    if not path.is_file():
        logger.error("No data file at %s.", path)
        return None
    try:
        document = load_document(path, document_type)
    except (OSError, DocumentFormatError) as exc:
        logger.error("Failed to read data file %s: %s", path, exc)
        return None
    if not document.validate():
        logger.info("Data file %s was repaired; rewriting it.", path.name)
        write_document(path, document)
    return document


def read_or_create_document(path: Path, document_type: type[D]) -> tuple[D, bool]:
    """Read a document, creating or repairing it on disk as needed.

    Args:
        path: File location.
        document_type: Document class; must be constructible with no arguments.

    Returns:
        `(document, ok)`. A missing file yields a new default document which is
        written out. An unreadable file yields a default document and
        `ok=False`. A document repaired by `validate()` is written back.
    """

    if not path.exists():
        document = document_type()
        document.validate()
        return document, write_document(path, document)

    try:
        document = load_document(path, document_type)
    except (OSError, DocumentFormatError) as exc:
        logger.error("Failed to read data file %s: %s", path, exc)
        fallback = document_type()
        fallback.validate()
        return fallback, False

    if not document.validate():
        logger.info("Data file %s was repaired; rewriting it.", path.name)
        return document, write_document(path, document)
    return document, True


def write_document(path: Path, document: Document) -> bool:
    """Write a document as indented JSON, returning False on failure."""

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(document.to_dict(), indent=2, ensure_ascii=False)
        path.write_text(payload + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Failed to write data file %s: %s", path, exc)
        return False
    logger.debug("Wrote data file %s.", path)
    return True
