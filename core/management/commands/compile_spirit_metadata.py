"""Compile the spirit catalog from the wiki sheets and addenda.

Reads the three wiki sheets in the data directory's `_spirit/` folder, merges
the `_spiritadd/` addenda, and prints a summary. The catalog itself is rebuilt
on every run; only the example addendum may be written.
"""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from core.services import CalculatorSession, DataDirectoryError, prepare_layout


class Command(BaseCommand):
    """Compile spirit metadata and print a summary."""

    help = "Compile spirit metadata from wiki sheets and addendum collections."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument(
            "--lookup",
            action="append",
            default=[],
            metavar="NAME",
            help="Print the compiled record for a spirit (repeatable).",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        lookups: list[str] = options["lookup"]
        try:
            layout = prepare_layout()
        except DataDirectoryError as exc:
            raise CommandError(str(exc)) from exc

        compiled = CalculatorSession(layout).compiled
        self.stdout.write(f"records={len(compiled.catalog)} summary={compiled.summary}")

        for name in lookups:
            record = compiled.catalog.lookup(name)
            if record is None:
                self.stdout.write(f"lookup={name!r} not found")
                continue
            self.stdout.write(f"lookup={name!r} record={record.to_dict()}")
        return None
