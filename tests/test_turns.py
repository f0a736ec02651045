import asyncio

import pytest
from structlog.testing import capture_logs

from advtxt.game import MAX_ROOM_CHAIN, Game
from advtxt.interfaces import PLAYER, ROOM
from advtxt.persistence import MemoryStorage, StorageError


class RecordingStorage(MemoryStorage):
    def __init__(self, collections=None):
        super().__init__(collections)
        self.updates = []

    async def update(self, collection, selector, fields):
        self.updates.append(sorted(fields))
        return await super().update(collection, selector, fields)


class SlowStorage(MemoryStorage):
    async def find_one(self, collection, selector):
        await asyncio.sleep(0)
        return await super().find_one(collection, selector)

    async def insert_one(self, collection, record):
        await asyncio.sleep(0)
        return await super().insert_one(collection, record)


class FailingStorage(MemoryStorage):
    def __init__(self, collections=None, fail_on=PLAYER):
        super().__init__(collections)
        self.fail_on = fail_on

    async def find_one(self, collection, selector):
        if collection == self.fail_on:
            raise StorageError("database unavailable")
        return await super().find_one(collection, selector)


class StaleStorage(MemoryStorage):
    async def update(self, collection, selector, fields):
        return False


@pytest.fixture
def recording(rooms):
    return RecordingStorage({ROOM: rooms})


@pytest.fixture
def recording_game(recording, io_backend):
    return Game(recording, "en", io_backend)


async def _seed(storage, **fields):
    record = {"username": "alice", "map": "default", "x": 0, "y": 0, "status": "alive", "items": []}
    record.update(fields)
    await storage.insert_one(PLAYER, record)


def _player(storage, username="alice"):
    return next(r for r in storage.collections[PLAYER] if r["username"] == username)


async def test_new_player_sees_room_then_command(game, storage, io_backend):
    done = []
    command = await game.submit("look", "alice", done.append)
    assert command.replies == ["This room looks pretty plain.", "Huh, there's a key here."]
    assert io_backend.outputs == command.replies
    assert done == [command]
    assert _player(storage)["x"] == 0
    assert command.player.room is None


async def test_locked_exit(game, storage, add_player):
    await add_player()
    command = await game.submit("go east", "alice")
    assert command.replies == ["The door is locked."]
    assert (_player(storage)["x"], _player(storage)["y"]) == (0, 0)


async def test_unlocked_exit_by_alias(game, storage, add_player):
    await add_player(items=["key"])
    command = await game.submit("Go E", "alice")
    assert command.replies == ["You unlock the door.", "A dusty storeroom."]
    assert _player(storage)["x"] == 1


async def test_take_item(game, storage, add_player):
    await add_player()
    assert (await game.submit("take the key", "alice")).replies == ["You take the key."]
    assert _player(storage)["items"] == ["key"]
    assert (await game.submit("get key", "alice")).replies == ["You already have it."]


async def test_reset_all_saves_each_category_once(recording_game, recording):
    await _seed(recording, x=1, items=["key"])
    command = await recording_game.submit("reset all", "alice")
    assert command.replies == [recording_game.messages["reset_all"], "This room looks pretty plain."]
    assert recording.updates == [["items"], ["x", "y"]]
    record = _player(recording)
    assert (record["x"], record["y"], record["items"]) == (0, 0, [])


async def test_dead_player_only_reminded(recording_game, recording, io_backend):
    await _seed(recording, y=-1, status="dead")
    command = await recording_game.submit("look", "alice")
    assert command.replies == [recording_game.messages["still_dead"]]
    assert io_backend.outputs == command.replies
    assert recording.updates == []


async def test_dead_player_can_reset(recording_game, recording):
    await _seed(recording, y=-1, status="dead", items=["key"])
    command = await recording_game.submit("reset", "alice")
    assert command.replies == [recording_game.messages["reset"], "This room looks pretty plain."]
    assert recording.updates == [["x", "y"], ["status"]]
    record = _player(recording)
    assert (record["status"], record["items"]) == ("alive", ["key"])


async def test_falling_into_pit(game, storage, add_player):
    await add_player()
    command = await game.submit("go north", "alice")
    assert command.replies == ["You head north.", "It's dark.", "You fall into a pit.", game.messages["dead"]]
    record = _player(storage)
    assert (record["y"], record["status"]) == (-1, "dead")
    assert (await game.submit("go north", "alice")).replies == [game.messages["still_dead"]]


async def test_winning(game, storage, add_player):
    await add_player()
    command = await game.submit("go south", "alice")
    assert command.replies[-2:] == ["You sit on the throne.", game.messages["win"]]
    assert _player(storage)["status"] == "win"
    assert (await game.submit("look", "alice")).replies == [game.messages["still_won"]]


async def test_parse_failure_and_no_match(game, add_player):
    await add_player()
    assert (await game.submit("get key and go east", "alice")).replies == [game.messages["parse_failure"]]
    assert (await game.submit("dance", "alice")).replies == [game.messages["no_match"]]
    assert (await game.submit("reset everything", "alice")).replies == [game.messages["no_match"]]


async def test_builtin_exits(game, add_player):
    await add_player(x=1)
    assert (await game.submit("exits", "alice")).replies == ["Available exits: west"]
    assert (await game.submit("look", "alice")).replies == ["A dusty storeroom."]


@pytest.mark.parametrize("fail_on", [PLAYER, ROOM])
async def test_storage_failure_reports_nothing(rooms, io_backend, fail_on):
    game = Game(FailingStorage({ROOM: rooms}, fail_on=fail_on), "en", io_backend)
    done = []
    with capture_logs() as logs:
        command = await game.submit("look", "alice", done.append)
    assert command.replies == []
    assert io_backend.outputs == []
    assert done == [command]
    assert isinstance(command.error, StorageError)
    failed = [entry for entry in logs if entry["event"] == "turn failed"]
    assert len(failed) == 1
    assert failed[0]["log_level"] == "error"
    assert failed[0]["command"]["text"] == "look"


async def test_update_miss_is_logged(rooms, io_backend):
    storage = StaleStorage({ROOM: rooms})
    game = Game(storage, "en", io_backend)
    await _seed(storage)
    with capture_logs() as logs:
        command = await game.submit("get key", "alice")
    assert command.replies == ["You take the key."]
    assert any(entry["event"] == "player update matched no record" for entry in logs)


async def test_turns_of_one_player_are_serialized(rooms, io_backend):
    storage = SlowStorage({ROOM: rooms})
    game = Game(storage, "en", io_backend)
    first, second = await asyncio.gather(game.submit("look", "bob"), game.submit("look", "bob"))
    assert len(storage.collections[PLAYER]) == 1
    assert first.replies == ["This room looks pretty plain.", "Huh, there's a key here."]
    assert second.replies == ["Huh, there's a key here."]
    assert game._turn_slots == {}


async def test_players_are_per_map(game, storage, add_player):
    await add_player(x=1)
    command = await game.submit("look", "alice", map_name="cellar")
    assert command.replies[0] == game.messages["nowhere"]
    assert len(storage.collections[PLAYER]) == 2


async def test_missing_room(storage, io_backend):
    game = Game(storage, "en", io_backend, origin=(9, 9))
    done = []
    with capture_logs() as logs:
        command = await game.submit("look", "alice", done.append)
    assert command.replies == [game.messages["nowhere"], game.messages["nowhere"]]
    assert done == [command]
    assert any(entry["event"] == "no room at player position" for entry in logs)
    assert (await game.submit("reset", "alice")).replies[0] == game.messages["reset"]


async def test_room_entry_chain_is_bounded(io_backend):
    def bounce(name, x, move):
        return {
            "name": name,
            "x": x,
            "y": 0,
            "map": "default",
            "description": name,
            "attributes": [
                {"type": "command", "name": "enter", "conditions": [{"message": "whoosh", "effect": {"move": move}}]}
            ],
        }

    storage = MemoryStorage({ROOM: [bounce("left", 0, "east"), bounce("right", 1, "west")]})
    game = Game(storage, "en", io_backend)
    done = []
    with capture_logs() as logs:
        command = await game.submit("look", "alice", done.append)
    assert done == [command]
    assert command.replies.count("whoosh") == MAX_ROOM_CHAIN + 1
    assert any(entry["event"] == "room entry chain cut off" for entry in logs)


async def test_run_reads_until_eof(game, io_backend):
    io = io_backend.__class__(["look", "  ", "go north"])
    await game.run("alice", io)
    assert io.outputs == [game.messages["farewell"]]
    assert game.sink.outputs[:2] == ["This room looks pretty plain.", "Huh, there's a key here."]
    assert game.sink.outputs[-1] == game.messages["dead"]


async def test_turn_slots_released_after_failure(rooms, io_backend):
    game = Game(FailingStorage({ROOM: rooms}), "en", io_backend)
    await asyncio.gather(game.submit("look", "alice"), game.submit("look", "bob"))
    assert game._turn_slots == {}


async def test_run_says_goodbye_on_interrupt(game, io_backend):
    class InterruptedIO(io_backend.__class__):
        def get_input(self, prompt=None):
            if self.inputs:
                return self.inputs.pop(0)
            raise KeyboardInterrupt

    io = InterruptedIO(["look"])
    await game.run("alice", io)
    assert io.outputs == [game.messages["farewell"]]
    assert game.sink.outputs == ["This room looks pretty plain.", "Huh, there's a key here."]
