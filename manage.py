#!/usr/bin/env python
"""Run spiritStats management commands (compile metadata, record battles, tally stats)."""

from __future__ import annotations

import os
import sys


def main() -> None:
    """Dispatch to Django's command runner with the calculator settings."""

    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "spiritStats.settings")
    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Django is not installed or is not available on your PYTHONPATH; "
            "install the project with `pip install -e .`."
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
