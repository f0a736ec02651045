"""Command handling for a single turn."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from .attributes import evaluate_availability, match_attribute
from .effects import apply_effect
from .language import LanguageManager
from .lifecycle import PlayerLifecycle
from .log import get_logger
from .models import Player, PlayerStatus, Room
from .parser import EXITS, GET, GO, LOOK, RESET, ParsedCommand

logger = get_logger(__name__)

# commands the engine answers itself when the room doesn't
BUILTIN_COMMANDS = (LOOK, EXITS)


@dataclass
class DirtyFlags:
    items: bool = False
    position: bool = False
    status: bool = False
    announce_room: bool = False


@dataclass
class Command:
    """Working record of one turn."""

    text: str
    username: str
    map: str
    on_complete: Callable[[Command], None] | None = None
    player: Player | None = None
    parsed: ParsedCommand | None = None
    replies: list[str] = field(default_factory=list)
    dirty: DirtyFlags = field(default_factory=DirtyFlags)
    status_at_entry: PlayerStatus | None = None
    error: Exception | None = None
    completed: bool = False

    def reply(self, message: str) -> None:
        self.replies.append(message)

    def complete(self) -> None:
        """Hand the finished command to ``on_complete``; allowed once."""

        if self.completed:
            raise RuntimeError(f"Command '{self.text}' for '{self.username}' already completed")
        self.completed = True
        if self.on_complete is not None:
            self.on_complete(self)

    def describe(self) -> dict[str, object]:
        """Return the command state for the operator log."""

        return {
            "text": self.text,
            "username": self.username,
            "map": self.map,
            "player": self.player.to_record() if self.player else None,
            "verb": self.parsed.verb if self.parsed else None,
            "object": self.parsed.object if self.parsed else None,
            "replies": list(self.replies),
            "dirty": vars(self.dirty).copy(),
            "status_at_entry": self.status_at_entry.value if self.status_at_entry else None,
        }


class CommandProcessor:
    """Parse a command and run it against the player's current room."""

    def __init__(self, language: LanguageManager, lifecycle: PlayerLifecycle) -> None:
        self.language_manager = language
        self.lifecycle = lifecycle
        config = language.parser_config
        self.parser = language.parser
        self.directions = config.directions
        self._go = config.command(GO)
        self._get = config.command(GET)
        self._reset = config.command(RESET)
        self._everything = config.everything.casefold()
        self._builtins = {config.command(key): key for key in BUILTIN_COMMANDS}

    @property
    def messages(self) -> dict[str, str]:
        return self.language_manager.messages

    def _is_reset(self, parsed: ParsedCommand | None) -> bool:
        return parsed is not None and parsed.verb == self._reset

    def dispatch(self, command: Command) -> None:
        """Run the command text; all results end up in ``command.replies``."""

        player = command.player
        if player is None:
            return
        parsed = self.parser.parse(command.text)
        command.parsed = parsed

        if player.finished and not self._is_reset(parsed):
            logger.debug("finished player ignored", username=player.username, status=player.status.value)
            return
        if parsed is None:
            command.reply(self.messages["parse_failure"])
            return
        if parsed.verb == self._reset:
            self.cmd_reset(command, parsed.object)
            return

        room = player.room or Room(x=player.x, y=player.y, map=player.map, name="", description="")
        attribute = match_attribute(room.attributes, parsed.verb, parsed.object, go=self._go, get=self._get)
        if attribute is None:
            key = self._builtins.get(parsed.verb)
            handler = getattr(self, f"cmd_{key}", None) if key else None
            if handler is None:
                logger.debug("no attribute matched", verb=parsed.verb, object=parsed.object)
                command.reply(self.messages["no_match"])
                return
            handler(command, room)
            return

        condition = evaluate_availability(player.items, attribute.conditions)
        if condition is None:
            command.reply(self.messages["no_match"])
            return
        apply_effect(command, condition, self.directions)

    def cmd_reset(self, command: Command, obj: str) -> None:
        if not obj:
            self.lifecycle.reset(command)
        elif obj.casefold() == self._everything:
            self.lifecycle.reset(command, everything=True)
        else:
            command.reply(self.messages["no_match"])

    def cmd_look(self, command: Command, room: Room) -> None:
        command.reply(room.description or self.messages["nowhere"])

    def cmd_exits(self, command: Command, room: Room) -> None:
        names = [attribute.name for attribute in room.exits]
        if names:
            command.reply(self.messages["exits"].format(exits=", ".join(names)))
        else:
            command.reply(self.messages["no_exits"])

    def enter_room(self, command: Command, room: Room) -> None:
        """Describe ``room`` and run its ``enter`` attribute, if any."""

        player = command.player
        if player is None:
            return
        command.reply(room.description)
        attribute = room.entry_attribute
        if attribute is None:
            return
        condition = evaluate_availability(player.items, attribute.conditions)
        if condition is not None:
            apply_effect(command, condition, self.directions)


__all__ = ["BUILTIN_COMMANDS", "Command", "CommandProcessor", "DirtyFlags"]
