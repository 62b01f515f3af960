"""Convert pre-release battle logs from the `_legacy/` folder.

Each convertible file is written to the saves folder as
`calc_data_stats_legacy_<name>.json`; the legacy files are left in place.
"""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from core.services import DataDirectoryError, prepare_layout
from gamedata.legacy import convert_legacy_saves


class Command(BaseCommand):
    """Convert legacy battle logs into the current format."""

    help = "Convert legacy battle logs into current battle logs."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument(
            "--check",
            action="store_true",
            help="Dry-run: convert in memory and print counts only.",
        )
        parser.add_argument(
            "--write",
            action="store_true",
            help="Write converted battle logs to the saves folder.",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        check: bool = options["check"]
        write: bool = options["write"]

        if check and write:
            raise CommandError("Use either --check or --write, not both.")
        if not check and not write:
            raise CommandError("Refusing to write without explicit intent; pass --check or --write.")

        try:
            layout = prepare_layout()
        except DataDirectoryError as exc:
            raise CommandError(str(exc)) from exc

        mode = "CHECK" if check else "WRITE"
        summary = convert_legacy_saves(layout.legacy, layout.saves, write=write)
        self.stdout.write(f"[{mode}] {summary}")
        return None
