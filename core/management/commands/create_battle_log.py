"""Create a new battle log from a preset.

Presets:
- `blank`: players plus the configured boss battles,
- `campaign`: every fighter and campaign spirit battle plus the bosses,
- `board`: every spirit battle found on the spirit board.
"""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from core.services import CalculatorSession, DataDirectoryError, new_battle_log, prepare_layout
from gamedata.presets import LogPreset


class Command(BaseCommand):
    """Create a battle log file in the saves folder."""

    help = "Create a new battle log from a preset."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("name", help="Display name of the new battle log.")
        parser.add_argument(
            "--preset",
            choices=[preset.value for preset in LogPreset],
            default=LogPreset.blank.value,
            help="Which battles to pre-populate.",
        )
        parser.add_argument(
            "--player",
            action="append",
            default=[],
            help="Player name (repeatable); defaults to the creation settings.",
        )
        parser.add_argument(
            "--boss",
            action="append",
            default=None,
            help="Boss battle name (repeatable); defaults to the creation settings.",
        )
        parser.add_argument(
            "--overwrite",
            action="store_true",
            help="Replace an existing battle log with the same name.",
        )
        parser.add_argument("--check", action="store_true", help="Dry-run: build the log but do not save it.")
        parser.add_argument("--write", action="store_true", help="Save the new battle log.")

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        name: str = options["name"].strip()
        check: bool = options["check"]
        write: bool = options["write"]

        if check and write:
            raise CommandError("Use either --check or --write, not both.")
        if not check and not write:
            raise CommandError("Refusing to write without explicit intent; pass --check or --write.")
        if not name:
            raise CommandError("A battle log name is required.")

        try:
            layout = prepare_layout()
        except DataDirectoryError as exc:
            raise CommandError(str(exc)) from exc

        if layout.save_path(name).exists() and not options["overwrite"]:
            raise CommandError(f"Battle log {name!r} already exists; pass --overwrite to replace it.")

        session = CalculatorSession(layout)
        log = new_battle_log(
            session,
            name,
            preset=LogPreset(options["preset"]),
            players=[player for player in options["player"] if player.strip()],
            bosses=options["boss"],
        )

        mode = "CHECK" if check else "WRITE"
        if write and not session.save_log():
            raise CommandError(f"Failed to write battle log {name!r}.")
        self.stdout.write(f"[{mode}] created={log.file_name} players={log.players} battles={len(log)}")
        return None
