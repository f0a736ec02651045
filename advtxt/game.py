"""Turn orchestrator: one command from lookup to replies."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import ValidationError

from . import integrity
from .commands import Command, CommandProcessor
from .i18n import data_dir
from .interfaces import IOBackend, ReplySink, Storage
from .io import ConsoleIO
from .language import LanguageManager
from .lifecycle import PlayerLifecycle
from .log import get_logger
from .models import DEFAULT_MAP, Room
from .persistence import GameStore, MemoryStorage, StorageError, YamlStorage
from .world import World, default_world_path

logger = get_logger(__name__)

# rooms whose entry moves the player on may chain; stop after this many
MAX_ROOM_CHAIN = 8


@dataclass
class _TurnSlot:
    """Lock of one player plus the number of turns holding or awaiting it."""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    pending: int = 0


class Game:
    def __init__(
        self,
        storage: Storage,
        language: str = "en",
        sink: ReplySink | None = None,
        *,
        map_name: str = DEFAULT_MAP,
        origin: tuple[int, int] = (0, 0),
        language_manager: LanguageManager | None = None,
    ) -> None:
        self.store = GameStore(storage)
        self.sink = sink or ConsoleIO()
        self.map_name = map_name
        self.origin = origin
        self.language_manager = language_manager or LanguageManager(language)
        self.lifecycle = PlayerLifecycle(self.language_manager.messages, origin)
        self.command_processor = CommandProcessor(self.language_manager, self.lifecycle)
        self._turn_slots: dict[tuple[str, str], _TurnSlot] = {}

    @property
    def language(self) -> str:
        return self.language_manager.language

    @property
    def messages(self) -> dict[str, str]:
        return self.language_manager.messages

    async def submit(
        self,
        text: str,
        username: str,
        on_complete: Callable[[Command], None] | None = None,
        *,
        map_name: str | None = None,
    ) -> Command:
        """Process ``text`` for ``username`` and return the finished command."""

        command = Command(text=text, username=username, map=map_name or self.map_name, on_complete=on_complete)
        return await self.process(command)

    async def process(self, command: Command) -> Command:
        # turns of one player never interleave
        key = (command.username, command.map)
        slot = self._turn_slots.setdefault(key, _TurnSlot())
        slot.pending += 1
        try:
            async with slot.lock:
                try:
                    await self._identify_player(command)
                    await self._enter_room(command)
                    self.command_processor.dispatch(command)
                    await self._persist(command)
                    await self._announce_moves(command)
                except StorageError as exc:
                    command.error = exc
                await self._finalize(command)
        finally:
            slot.pending -= 1
            if not slot.pending:
                del self._turn_slots[key]
        return command

    async def _identify_player(self, command: Command) -> None:
        player = await self.store.find_player(command.username, command.map)
        if player is None:
            player = await self.store.create_player(command.username, command.map, self.origin)
            command.dirty.announce_room = True
        command.player = player

    async def _enter_room(self, command: Command) -> None:
        player = command.player
        if player is None:
            return
        if command.status_at_entry is None:
            command.status_at_entry = player.status
        room = await self.store.find_room(player.x, player.y, player.map)
        if room is None:
            logger.warning("no room at player position", username=player.username, x=player.x, y=player.y, map=player.map)
            player.room = Room(x=player.x, y=player.y, map=player.map, name="", description="")
            if command.dirty.announce_room:
                command.dirty.announce_room = False
                command.reply(self.messages["nowhere"])
            return
        player.room = room
        if command.dirty.announce_room:
            command.dirty.announce_room = False
            self.command_processor.enter_room(command, room)

    async def _persist(self, command: Command) -> None:
        player = command.player
        if player is None:
            return
        if command.dirty.items:
            await self.store.save_items(player)
            command.dirty.items = False
        if command.dirty.position:
            await self.store.save_position(player)
            command.dirty.position = False

    async def _announce_moves(self, command: Command) -> None:
        entered = 0
        while command.dirty.announce_room:
            if entered >= MAX_ROOM_CHAIN:
                logger.warning("room entry chain cut off", username=command.username, rooms=entered)
                command.dirty.announce_room = False
                break
            await self._enter_room(command)
            await self._persist(command)
            entered += 1

    async def _finalize(self, command: Command) -> None:
        if command.error is not None:
            logger.error("turn failed", error=str(command.error), command=command.describe())
            command.replies = []
        else:
            await self.lifecycle.finalize(command, self.store)
            for reply in command.replies:
                self.sink.emit(reply)
        if command.player is not None:
            command.player.room = None
        command.complete()

    async def run(self, username: str, io: IOBackend) -> None:
        """Read commands from ``io`` until it runs dry or the user interrupts.

        Input is read on the loop thread, so Ctrl-C arrives here as
        ``KeyboardInterrupt``.
        """

        try:
            while True:
                text = io.get_input()
                if not text.strip():
                    continue
                await self.submit(text, username)
        except (EOFError, KeyboardInterrupt):
            io.output(self.messages["farewell"])


def create_game(
    world_path: str | Path | None = None,
    language: str = "en",
    io_backend: IOBackend | None = None,
    save_path: str | Path | None = None,
) -> Game:
    """Load a world and a language pack and return a game over them.

    Problems are reported through ``io_backend`` and end in ``SystemExit``.
    """

    io = io_backend or ConsoleIO()
    path = Path(world_path) if world_path else default_world_path(language)
    try:
        world = World.from_file(path)
    except FileNotFoundError as exc:
        io.output(f"ERROR: Missing world file: {exc}")
        raise SystemExit(1) from exc
    except yaml.YAMLError as exc:
        io.output(f"ERROR: Invalid world file: {exc}")
        raise SystemExit(1) from exc
    except ValidationError as exc:
        io.output(f"ERROR: Invalid world file: {exc}")
        raise SystemExit(1) from exc

    language_manager = LanguageManager(language)
    warnings = integrity.check_translations(language, data_dir())
    warnings.extend(integrity.check_world_warnings(world))
    for msg in warnings:
        io.output(f"WARNING: {msg}")
    errors = integrity.validate_parser_config(language_manager.parser_config)
    errors.extend(integrity.validate_world_structure(world, language_manager.parser_config))
    if errors:
        for msg in errors:
            io.output(f"ERROR: {msg}")
        raise SystemExit("Integrity check failed")

    if save_path:
        try:
            storage: Storage = YamlStorage(save_path, world.collections())
        except StorageError as exc:
            io.output(f"ERROR: {exc}")
            raise SystemExit(1) from exc
    else:
        storage = MemoryStorage(world.collections())
    return Game(
        storage,
        language,
        io,
        map_name=world.map,
        origin=world.origin,
        language_manager=language_manager,
    )


def run(
    username: str,
    world_path: str | Path | None = None,
    language: str = "en",
    io_backend: IOBackend | None = None,
    save_path: str | Path | None = None,
) -> None:
    io = io_backend or ConsoleIO()
    game = create_game(world_path, language, io, save_path)
    asyncio.run(game.run(username, io))


__all__ = ["Game", "MAX_ROOM_CHAIN", "create_game", "run"]
