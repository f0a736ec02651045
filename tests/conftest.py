import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from advtxt.game import Game  # noqa: E402
from advtxt.interfaces import IOBackend, PLAYER, ROOM, ReplySink  # noqa: E402
from advtxt.persistence import MemoryStorage  # noqa: E402


class DummyIO(IOBackend, ReplySink):
    def __init__(self, inputs: list[str] | None = None) -> None:
        self.inputs = inputs or []
        self.outputs: list[str] = []

    def get_input(self, prompt: str | None = None) -> str:  # noqa: ARG002 - test stub
        if not self.inputs:
            raise EOFError
        return self.inputs.pop(0)

    def output(self, text: str) -> None:
        self.outputs.append(text)

    def emit(self, reply: str) -> None:
        self.outputs.append(reply)


@pytest.fixture
def io_backend() -> DummyIO:
    return DummyIO()


@pytest.fixture
def rooms() -> list[dict]:
    return [
        {
            "name": "plain_room",
            "x": 0,
            "y": 0,
            "map": "default",
            "description": "This room looks pretty plain.",
            "attributes": [
                {
                    "type": "command",
                    "name": "look",
                    "conditions": [{"message": "Huh, there's a key here."}],
                },
                {
                    "type": "command",
                    "name": "get",
                    "item": "key",
                    "conditions": [
                        {"requires": ["key"], "message": "You already have it."},
                        {"message": "You take the key.", "effect": {"items": ["+key"]}},
                    ],
                },
                {
                    "type": "exit",
                    "name": "east",
                    "aliases": ["e"],
                    "conditions": [
                        {"requires": ["key"], "message": "You unlock the door.", "effect": {"move": "east"}},
                        {"message": "The door is locked."},
                    ],
                },
                {
                    "type": "exit",
                    "name": "north",
                    "conditions": [{"message": "You head north.", "effect": {"move": [0, -1]}}],
                },
                {
                    "type": "exit",
                    "name": "south",
                    "conditions": [{"message": "You head south.", "effect": {"move": "south"}}],
                },
            ],
        },
        {
            "name": "east_room",
            "x": 1,
            "y": 0,
            "map": "default",
            "description": "A dusty storeroom.",
            "attributes": [
                {
                    "type": "exit",
                    "name": "west",
                    "conditions": [{"message": "You head west.", "effect": {"move": "west"}}],
                },
            ],
        },
        {
            "name": "pit",
            "x": 0,
            "y": -1,
            "map": "default",
            "description": "It's dark.",
            "attributes": [
                {
                    "type": "command",
                    "name": "enter",
                    "conditions": [{"message": "You fall into a pit.", "effect": {"status": "dead"}}],
                },
            ],
        },
        {
            "name": "throne_room",
            "x": 0,
            "y": 1,
            "map": "default",
            "description": "A golden throne.",
            "attributes": [
                {
                    "type": "command",
                    "name": "enter",
                    "conditions": [{"message": "You sit on the throne.", "effect": {"status": "win"}}],
                },
            ],
        },
    ]


@pytest.fixture
def storage(rooms) -> MemoryStorage:
    return MemoryStorage({ROOM: rooms})


@pytest.fixture
def game(storage, io_backend) -> Game:
    return Game(storage, "en", io_backend)


@pytest.fixture
def add_player(storage):
    """Store a player record and return it with its ``_id``."""

    async def _add(username: str = "alice", **fields) -> dict:
        record = {"username": username, "map": "default", "x": 0, "y": 0, "status": "alive", "items": []}
        record.update(fields)
        return await storage.insert_one(PLAYER, record)

    return _add
