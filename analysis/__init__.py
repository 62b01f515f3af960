"""Pure stat tallying package for spiritStats.

This package contains deterministic, testable computations that operate on
in-memory battle logs and spirit catalogs and return DTOs. It must not import
Django or perform any file I/O.
"""

from .engine import tally_stat, tally_stats

__all__ = ["tally_stat", "tally_stats"]
