"""Record a battle result in an existing battle log.

Loss counts are absolute; `--loss 0=2` sets player 0's losses to two and
`--loss shared=3` sets the shared counter of a shared battle.
"""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from core.services import (
    BattleUpdate,
    CalculatorSession,
    DataDirectoryError,
    apply_battle_update,
    parse_slot,
    prepare_layout,
)
from gamedata.battle_log import NO_WINNER_INDEX, BattleType, PlayerSlot


def _parse_losses(tokens: list[str]) -> dict[PlayerSlot, int]:
    losses: dict[PlayerSlot, int] = {}
    for token in tokens:
        slot_token, separator, value_token = token.partition("=")
        if not separator:
            raise CommandError(f"Invalid --loss {token!r}; expected SLOT=COUNT.")
        try:
            losses[parse_slot(slot_token)] = int(value_token)
        except ValueError as exc:
            raise CommandError(f"Invalid --loss {token!r}: {exc}") from exc
    return losses


def _parse_winner(token: str | None) -> int | None:
    if token is None:
        return None
    if token.strip().lower() == "none":
        return NO_WINNER_INDEX
    try:
        winner = int(token)
    except ValueError as exc:
        raise CommandError(f"Invalid --winner {token!r}; expected a player index or 'none'.") from exc
    if winner < 0:
        raise CommandError(f"Invalid --winner {token!r}; expected a player index or 'none'.")
    return winner


class Command(BaseCommand):
    """Add, update, or remove one battle entry."""

    help = "Record a battle result in a battle log."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument("name", help="Display name of the battle log.")
        parser.add_argument("battle", help="Battle (spirit, fighter, or boss) name.")
        parser.add_argument(
            "--type",
            choices=[battle_type.value for battle_type in BattleType],
            default=None,
            help="Battle type; new entries default to Spirit.",
        )
        parser.add_argument("--winner", default=None, help="Winning player index, or 'none' to clear.")
        shared = parser.add_mutually_exclusive_group()
        shared.add_argument("--shared", dest="shared", action="store_true", default=None, help="Mark as shared.")
        shared.add_argument("--individual", dest="shared", action="store_false", default=None, help="Mark as individual.")
        parser.add_argument(
            "--loss",
            action="append",
            default=[],
            metavar="SLOT=COUNT",
            help="Absolute loss count for a player index or 'shared' (repeatable).",
        )
        parser.add_argument("--remove", action="store_true", help="Remove the battle instead of updating it.")
        parser.add_argument("--check", action="store_true", help="Dry-run: apply in memory only.")
        parser.add_argument("--write", action="store_true", help="Save the updated battle log.")

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        name: str = options["name"]
        battle: str = options["battle"]
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

        session = CalculatorSession(layout)
        log = session.open_log(name)
        if log is None:
            raise CommandError(f"Battle log {name!r} could not be read.")

        mode = "CHECK" if check else "WRITE"
        if options["remove"]:
            if not log.remove(battle):
                raise CommandError(f"Battle {battle!r} is not in {name!r}.")
            self.stdout.write(f"[{mode}] removed={battle}")
        else:
            update = BattleUpdate(
                battle_type=BattleType(options["type"]) if options["type"] else None,
                winner=_parse_winner(options["winner"]),
                is_shared=options["shared"],
                losses=_parse_losses(options["loss"]),
            )
            try:
                entry = apply_battle_update(log, battle, update)
            except ValueError as exc:
                raise CommandError(str(exc)) from exc
            self.stdout.write(f"[{mode}] recorded={battle} entry={entry.to_dict()}")

        if write and not session.save_log():
            raise CommandError(f"Failed to write battle log {name!r}.")
        return None
