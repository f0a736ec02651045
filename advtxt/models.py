"""Data models for players, rooms and their attributes."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MAP = "default"
# Name of the implicit command attribute evaluated when a player enters a room.
ENTER = "enter"


class PlayerStatus(Enum):
    ALIVE = "alive"
    DEAD = "dead"
    WIN = "win"


class AttributeType(Enum):
    EXIT = "exit"
    COMMAND = "command"


class Effect(BaseModel):
    move: tuple[int, int] | str | None = None
    items: list[str] = Field(default_factory=list)
    status: PlayerStatus | None = None

    model_config = ConfigDict(extra="forbid")


class Condition(BaseModel):
    requires: list[str] = Field(default_factory=list)
    message: str
    effect: Effect | None = None

    model_config = ConfigDict(extra="forbid")

    def satisfied_by(self, items: set[str]) -> bool:
        """Return True if every required item is held."""
        return all(item in items for item in self.requires)


class Attribute(BaseModel):
    type: AttributeType
    name: str
    item: str | None = None
    aliases: list[str] = Field(default_factory=list)
    conditions: list[Condition] = Field(min_length=1)

    model_config = ConfigDict(extra="forbid")

    def answers_to(self, name: str) -> bool:
        name_cf = name.casefold()
        return self.name.casefold() == name_cf or any(a.casefold() == name_cf for a in self.aliases)


class Room(BaseModel):
    id: Any = Field(default=None, alias="_id")
    x: int
    y: int
    map: str = DEFAULT_MAP
    name: str
    description: str
    attributes: list[Attribute] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @property
    def entry_attribute(self) -> Attribute | None:
        for attribute in self.attributes:
            if attribute.type is AttributeType.COMMAND and attribute.name.casefold() == ENTER:
                return attribute
        return None

    @property
    def exits(self) -> list[Attribute]:
        return [a for a in self.attributes if a.type is AttributeType.EXIT]

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude={"id"}, exclude_none=True)


class Player(BaseModel):
    id: Any = Field(default=None, alias="_id")
    username: str
    map: str = DEFAULT_MAP
    x: int = 0
    y: int = 0
    status: PlayerStatus = PlayerStatus.ALIVE
    items: set[str] = Field(default_factory=set)
    # attached for the duration of one turn, never persisted
    room: Room | None = Field(default=None, exclude=True)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def position(self) -> tuple[int, int]:
        return self.x, self.y

    @property
    def finished(self) -> bool:
        return self.status is not PlayerStatus.ALIVE

    def to_record(self) -> dict[str, Any]:
        """Return the storable fields, without identity or the transient room."""
        return {
            "username": self.username,
            "map": self.map,
            "x": self.x,
            "y": self.y,
            "status": self.status.value,
            "items": sorted(self.items),
        }


__all__ = [
    "DEFAULT_MAP",
    "ENTER",
    "PlayerStatus",
    "AttributeType",
    "Effect",
    "Condition",
    "Attribute",
    "Room",
    "Player",
]
