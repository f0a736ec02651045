"""Integrity checks for worlds and language packs."""

from __future__ import annotations

from pathlib import Path

import yaml

from .models import AttributeType
from .parser import BUILTIN_KEYS, GET, ParserConfig
from .world import World


def check_translations(language: str, data_dir: Path) -> list[str]:
    """Check a language pack against the English one and report warnings.

    Returns a list of warning messages."""

    warnings: list[str] = []
    for kind in ("messages", "parser"):
        base_path = data_dir / "en" / f"{kind}.en.yaml"
        lang_path = data_dir / language / f"{kind}.{language}.yaml"
        if not (base_path.exists() and lang_path.exists()):
            continue
        with open(base_path, encoding="utf-8") as fh:
            base = yaml.safe_load(fh) or {}
        with open(lang_path, encoding="utf-8") as fh:
            lang = yaml.safe_load(fh) or {}
        if kind == "parser":
            base = base.get("commands", {})
            lang = lang.get("commands", {})
        label = "message" if kind == "messages" else "command"
        for key in base:
            if key not in lang:
                warnings.append(f"Missing translation for {label} '{key}'")
        for key in lang:
            if key not in base:
                warnings.append(f"Unused {label} translation '{key}' ignored")
    return warnings


def validate_parser_config(config: ParserConfig) -> list[str]:
    """Return errors that would leave commands unreachable."""

    errors: list[str] = []
    for key in BUILTIN_KEYS:
        if key not in config.commands:
            errors.append(f"Command '{key}' has no word in language '{config.language}'")
    for alias, key in config.aliases.items():
        if key not in config.commands:
            errors.append(f"Alias '{alias}' points to unknown command '{key}'")
    return errors


def validate_world_structure(w: World, config: ParserConfig) -> list[str]:
    """Validate coordinates, movements and item attributes; return error messages."""

    errors: list[str] = []
    seen: dict[tuple[int, int, str], str] = {}
    get_word = config.command(GET).casefold()

    for room in w.rooms:
        key = (room.x, room.y, room.map)
        if key in seen:
            errors.append(f"Rooms '{seen[key]}' and '{room.name}' share coordinates ({room.x}, {room.y}) in map '{room.map}'")
        else:
            seen[key] = room.name
        for attribute in room.attributes:
            if attribute.name.casefold() == get_word and not attribute.item:
                errors.append(f"Room '{room.name}' has a '{attribute.name}' attribute without an item")
            for condition in attribute.conditions:
                effect = condition.effect
                if effect is None:
                    continue
                if isinstance(effect.move, str) and effect.move.casefold() not in config.directions:
                    errors.append(f"Room '{room.name}' attribute '{attribute.name}' moves in unknown direction '{effect.move}'")
                for token in effect.items:
                    if not token.lstrip("+-"):
                        errors.append(f"Room '{room.name}' attribute '{attribute.name}' has an empty item change")

    if w.room_at(*w.origin) is None:
        errors.append(f"Origin ({w.origin[0]}, {w.origin[1]}) has no room in map '{w.map}'")
    return errors


def check_world_warnings(w: World) -> list[str]:
    """Report authoring mistakes the engine tolerates (first declared wins)."""

    warnings: list[str] = []
    for room in w.rooms:
        seen: set[tuple[AttributeType, str, str]] = set()
        for attribute in room.attributes:
            key = (attribute.type, attribute.name.casefold(), (attribute.item or "").casefold())
            if key in seen:
                warnings.append(f"Room '{room.name}' declares {attribute.type.value} '{attribute.name}' more than once; the first one wins")
            seen.add(key)
    return warnings


__all__ = [
    "check_translations",
    "validate_parser_config",
    "validate_world_structure",
    "check_world_warnings",
]
