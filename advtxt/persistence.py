"""Storage backends and the player/room persistence used by a turn."""

from __future__ import annotations

import itertools
from copy import deepcopy
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .interfaces import PLAYER, ROOM, Storage
from .log import get_logger
from .models import Player, Room

logger = get_logger(__name__)


class StorageError(Exception):
    """The storage backend failed to answer a request."""


def _matches(record: dict[str, Any], selector: dict[str, Any]) -> bool:
    return all(key in record and record[key] == value for key, value in selector.items())


class MemoryStorage(Storage):
    """Keep every collection in a list of dicts.

    Records are copied on the way in and out so callers never share state
    with the store.
    """

    def __init__(self, collections: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self._ids = itertools.count(1)
        self.collections: dict[str, list[dict[str, Any]]] = {PLAYER: [], ROOM: []}
        for name, records in (collections or {}).items():
            for record in records:
                self._insert(name, record)

    def _insert(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        stored = deepcopy(record)
        stored.setdefault("_id", next(self._ids))
        self.collections.setdefault(collection, []).append(stored)
        return deepcopy(stored)

    async def find_one(self, collection: str, selector: dict[str, Any]) -> dict[str, Any] | None:
        for record in self.collections.get(collection, []):
            if _matches(record, selector):
                return deepcopy(record)
        return None

    async def insert_one(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        return self._insert(collection, record)

    async def update(self, collection: str, selector: dict[str, Any], fields: dict[str, Any]) -> bool:
        for record in self.collections.get(collection, []):
            if _matches(record, selector):
                record.update(deepcopy(fields))
                return True
        return False


class YamlStorage(MemoryStorage):
    """Memory storage whose players survive restarts in a YAML save file.

    Parameters
    ----------
    save_path:
        File holding the ``player`` collection.  Rooms are authored content
        and are passed in through ``collections``; they are never written.
    """

    def __init__(self, save_path: str | Path, collections: dict[str, list[dict[str, Any]]] | None = None) -> None:
        super().__init__(collections)
        self.save_path = Path(save_path)
        for record in self.load():
            self._insert(PLAYER, record)
        ids = [r["_id"] for r in self.collections[PLAYER] if isinstance(r.get("_id"), int)]
        if ids:
            self._ids = itertools.count(max(ids) + 1)

    def load(self) -> list[dict[str, Any]]:
        """Return previously saved players if available."""

        if not self.save_path.exists():
            return []
        try:
            with open(self.save_path, encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise StorageError(f"Failed to load save file '{self.save_path}': {exc}") from exc
        players = data.get(PLAYER, []) if isinstance(data, dict) else None
        if not isinstance(players, list) or not all(isinstance(r, dict) for r in players):
            raise StorageError(f"Save file '{self.save_path}' does not hold a '{PLAYER}' list")
        return list(players)

    def save(self) -> None:
        """Persist the player collection."""

        data = {PLAYER: self.collections[PLAYER]}
        try:
            with open(self.save_path, "w", encoding="utf-8") as fh:
                yaml.safe_dump(data, fh, allow_unicode=True)
        except OSError as exc:
            raise StorageError(f"Failed to write save file '{self.save_path}': {exc}") from exc

    async def insert_one(self, collection: str, record: dict[str, Any]) -> dict[str, Any]:
        stored = await super().insert_one(collection, record)
        if collection == PLAYER:
            self.save()
        return stored

    async def update(self, collection: str, selector: dict[str, Any], fields: dict[str, Any]) -> bool:
        updated = await super().update(collection, selector, fields)
        if updated and collection == PLAYER:
            self.save()
        return updated


class GameStore:
    """Load and save players and rooms through a :class:`Storage`.

    Lookups and the player insert raise :class:`StorageError`; updates never
    raise and report failure through the log and their return value.
    """

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    async def find_player(self, username: str, map_name: str) -> Player | None:
        record = await self.storage.find_one(PLAYER, {"username": username, "map": map_name})
        if record is None:
            return None
        try:
            return Player.model_validate(record)
        except ValidationError as exc:
            raise StorageError(f"Invalid player record for '{username}': {exc}") from exc

    async def create_player(self, username: str, map_name: str, origin: tuple[int, int]) -> Player:
        player = Player(username=username, map=map_name, x=origin[0], y=origin[1])
        record = await self.storage.insert_one(PLAYER, player.to_record())
        if record.get("_id") is None:
            raise StorageError(f"Player '{username}' was stored without an identity")
        player.id = record["_id"]
        logger.info("player created", username=username, map=map_name)
        return player

    async def find_room(self, x: int, y: int, map_name: str) -> Room | None:
        record = await self.storage.find_one(ROOM, {"x": x, "y": y, "map": map_name})
        if record is None:
            return None
        try:
            return Room.model_validate(record)
        except ValidationError as exc:
            raise StorageError(f"Invalid room record at ({x}, {y}) in '{map_name}': {exc}") from exc

    async def save_items(self, player: Player) -> bool:
        return await self._update(player, {"items": sorted(player.items)})

    async def save_position(self, player: Player) -> bool:
        return await self._update(player, {"x": player.x, "y": player.y})

    async def save_status(self, player: Player) -> bool:
        return await self._update(player, {"status": player.status.value})

    async def _update(self, player: Player, fields: dict[str, Any]) -> bool:
        try:
            updated = await self.storage.update(PLAYER, {"_id": player.id}, fields)
        except StorageError as exc:
            logger.warning("player update failed", username=player.username, fields=sorted(fields), error=str(exc))
            return False
        if not updated:
            logger.warning(
                "player update matched no record",
                username=player.username,
                player=player.to_record(),
                fields=sorted(fields),
            )
        return bool(updated)


__all__ = ["StorageError", "MemoryStorage", "YamlStorage", "GameStore"]
