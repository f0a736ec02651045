"""Apply the effect of a selected condition to the acting player."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from .log import get_logger
from .models import Condition, Effect, Player

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .commands import Command, DirtyFlags

logger = get_logger(__name__)


def resolve_move(move: tuple[int, int] | str, directions: Mapping[str, tuple[int, int]]) -> tuple[int, int] | None:
    if isinstance(move, str):
        delta = directions.get(move.casefold())
        return (delta[0], delta[1]) if delta is not None else None
    return move[0], move[1]


def apply_items(player: Player, tokens: list[str]) -> None:
    """Add ``+item``/``item`` and remove ``-item``; possession is a set."""
    for token in tokens:
        if token.startswith("-"):
            player.items.discard(token[1:])
        else:
            player.items.add(token.removeprefix("+"))


def apply_effect(
    command: Command,
    condition: Condition,
    directions: Mapping[str, tuple[int, int]] | None = None,
) -> DirtyFlags:
    """Reply with the condition's message and apply its effect.

    Returns the command's dirty flags, updated for every category touched.
    """

    command.reply(condition.message)
    effect: Effect | None = condition.effect
    player = command.player
    dirty = command.dirty
    if effect is None or player is None:
        return dirty

    if effect.move is not None:
        delta = resolve_move(effect.move, directions or {})
        if delta is None:
            logger.warning("unknown direction in effect", move=effect.move, username=player.username)
        else:
            player.x += delta[0]
            player.y += delta[1]
            dirty.position = True
            dirty.announce_room = True
            logger.debug("player moved", username=player.username, x=player.x, y=player.y)

    if effect.items:
        apply_items(player, effect.items)
        dirty.items = True
        logger.debug("player items", username=player.username, items=sorted(player.items))

    if effect.status is not None:
        player.status = effect.status
        dirty.status = True
        logger.debug("player status", username=player.username, status=player.status.value)

    return dirty


__all__ = ["apply_effect", "apply_items", "resolve_move"]
