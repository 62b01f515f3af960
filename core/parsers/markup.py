"""Shared helpers for scanning copy-pasted wiki markup.

Scanners in this package are pure: they take lines, return a `ScanResult`, and
never touch the filesystem or a live catalog. Warnings are both collected on
the result and emitted through the scanner's module logger.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from definitions.catalog import EntityCatalog

_TEMPLATE_SPLIT_RE = re.compile(r"\|\||\{\{|\}\}")
_PIPE_TEMPLATE_SPLIT_RE = re.compile(r"\||\{\{|\}\}")
_NON_DIGIT_RE = re.compile(r"\D")
_FIRST_NUMBER_RE = re.compile(r"\d[\d,]*")
_INTEGER_TOKEN_RE = re.compile(r"^\s*[+-]?\d+\s*$")


@dataclass(frozen=True)
class ScanResult:
    """Output of one scanner pass.

    Attributes:
        catalog: Records produced by the scan, keyed by sanitized name.
        warnings: Human-readable warnings for skipped or partial lines.
    """

    catalog: EntityCatalog
    warnings: tuple[str, ...] = ()


class WarningLog:
    """Collect scanner warnings and mirror them to a logger."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger
        self.messages: list[str] = []

    def warn(self, message: str) -> None:
        """Record and log a warning."""

        self.messages.append(message)
        self._logger.warning(message)


def split_row_fields(line: str) -> list[str]:
    """Split a table row on `||`, `{{`, and `}}`, dropping empty parts."""

    return [part for part in _TEMPLATE_SPLIT_RE.split(line) if part]


def split_template_fields(line: str) -> list[str]:
    """Split a template line on `|`, `{{`, and `}}`, dropping empty parts."""

    return [part for part in _PIPE_TEMPLATE_SPLIT_RE.split(line) if part]


def digits_to_int(value: str) -> int | None:
    """Strip every non-digit character from `value` and parse what is left."""

    digits = _NON_DIGIT_RE.sub("", value)
    if not digits:
        return None
    return int(digits)


def first_number(value: str) -> int | None:
    """Return the first integer in `value`, tolerating thousands separators."""

    match = _FIRST_NUMBER_RE.search(value)
    if match is None:
        return None
    return int(match.group(0).replace(",", ""))


def is_integer_token(value: str) -> bool:
    """Return True when `value` is a plain (optionally signed) integer."""

    return _INTEGER_TOKEN_RE.match(value) is not None


def iter_numbered_lines(lines: Iterable[str]) -> Iterable[tuple[int, str]]:
    """Yield `(line_number, line)` with trailing newlines removed."""

    for number, line in enumerate(lines, start=1):
        yield number, line.rstrip("\r\n")
