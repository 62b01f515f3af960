"""Print the stat board for a battle log."""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from core.services import CalculatorSession, DataDirectoryError, list_battle_logs, prepare_layout


class Command(BaseCommand):
    """Tally and print player stats."""

    help = "Tally the default stat board for a battle log."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("name", nargs="?", default=None, help="Display name of the battle log.")

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        try:
            layout = prepare_layout()
        except DataDirectoryError as exc:
            raise CommandError(str(exc)) from exc

        name: str | None = options["name"]
        if name is None:
            names = list_battle_logs(layout)
            self.stdout.write("battle logs: " + (", ".join(names) if names else "(none)"))
            return None

        session = CalculatorSession(layout)
        if session.open_log(name) is None:
            raise CommandError(f"Battle log {name!r} could not be read.")

        self.stdout.write(session.render_stats())
        return None
