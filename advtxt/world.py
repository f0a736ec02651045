"""World representation loaded from data files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .interfaces import ROOM
from .models import DEFAULT_MAP, Room


class World:
    """Rooms of one map plus the position new players start at."""

    def __init__(self, data: dict[str, Any]):
        self.map: str = str(data.get("map", DEFAULT_MAP))
        origin = data.get("origin") or (0, 0)
        self.origin: tuple[int, int] = (int(origin[0]), int(origin[1]))
        self.rooms: list[Room] = []
        for room in data.get("rooms", []):
            if isinstance(room, Room):
                self.rooms.append(room)
            else:
                cfg = dict(room)
                cfg.setdefault("map", self.map)
                self.rooms.append(Room.model_validate(cfg))

    @classmethod
    def from_file(cls, path: str | Path) -> World:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        return cls(data)

    def room_at(self, x: int, y: int, map_name: str | None = None) -> Room | None:
        map_name = map_name or self.map
        for room in self.rooms:
            if (room.x, room.y, room.map) == (x, y, map_name):
                return room
        return None

    def collections(self) -> dict[str, list[dict[str, Any]]]:
        """Return the rooms as storage records, ready to seed a store."""

        return {ROOM: [room.to_record() for room in self.rooms]}


def default_world_path(language: str = "en") -> Path:
    """Return the bundled sample world, translated into ``language`` if available."""

    worlds = Path(__file__).resolve().parent / "data" / "worlds"
    translated = worlds / f"default.{language}.yaml"
    return translated if translated.exists() else worlds / "default.yaml"


__all__ = ["World", "default_world_path"]
