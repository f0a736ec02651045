"""Alive, dead and won: the player's status across turns."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .log import get_logger
from .models import PlayerStatus

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .commands import Command
    from .persistence import GameStore

logger = get_logger(__name__)

# message keys: (reached this turn, still in that state)
STATUS_MESSAGES: dict[PlayerStatus, tuple[str, str]] = {
    PlayerStatus.DEAD: ("dead", "still_dead"),
    PlayerStatus.WIN: ("win", "still_won"),
}


class PlayerLifecycle:
    """Status transitions of a player.

    Dead and won players stay that way until they ``reset``; every other
    command only earns them a reminder at the end of the turn.
    """

    def __init__(self, messages: dict[str, str], origin: tuple[int, int] = (0, 0)) -> None:
        self.messages = messages
        self.origin = origin

    def reset(self, command: Command, *, everything: bool = False) -> None:
        """Send the player back to the origin, alive; ``everything`` also empties the inventory."""

        player = command.player
        if player is None:
            return
        player.x, player.y = self.origin
        player.status = PlayerStatus.ALIVE
        command.dirty.position = True
        command.dirty.announce_room = True
        command.dirty.status = True
        if everything:
            player.items.clear()
            command.dirty.items = True
        logger.info("player reset", username=player.username, everything=everything)
        command.reply(self.messages["reset_all" if everything else "reset"])

    async def finalize(self, command: Command, store: GameStore) -> None:
        """Announce and persist a status change, or remind a finished player."""

        player = command.player
        if player is None:
            return
        if player.status != command.status_at_entry:
            keys = STATUS_MESSAGES.get(player.status)
            if keys:
                command.reply(self.messages[keys[0]])
            logger.info(
                "player status changed",
                username=player.username,
                previous=command.status_at_entry.value if command.status_at_entry else None,
                status=player.status.value,
            )
            await store.save_status(player)
        elif player.status in STATUS_MESSAGES:
            command.reply(self.messages[STATUS_MESSAGES[player.status][1]])
        command.dirty.status = False


__all__ = ["PlayerLifecycle", "STATUS_MESSAGES"]
