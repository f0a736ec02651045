"""Turn one line of player input into a verb and an object."""

from __future__ import annotations

import string
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from .log import get_logger

logger = get_logger(__name__)

GO = "go"
GET = "get"
RESET = "reset"
LOOK = "look"
EXITS = "exits"
BUILTIN_KEYS = (GO, GET, RESET, LOOK, EXITS)


class ParserConfig(BaseModel):
    """Vocabulary of one language.

    ``commands`` maps the internal command keys (``go``, ``get``, ``reset``,
    ``look``, ``exits``) to the word players type; ``aliases`` maps further
    words onto those keys.
    """

    language: str = "en"
    commands: dict[str, str]
    aliases: dict[str, str] = Field(default_factory=dict)
    operators: list[str] = Field(default_factory=list)
    linkers: list[str] = Field(default_factory=list)
    fluff: list[str] = Field(default_factory=list)
    separator: str = "_"
    everything: str = "all"
    directions: dict[str, tuple[int, int]] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    def command(self, key: str) -> str:
        return self.commands.get(key, key)


@dataclass(frozen=True)
class ParsedCommand:
    original: str
    verb: str
    object: str = ""
    original_verb: str | None = None
    operator: str | None = None


class Parser:
    def __init__(self, config: ParserConfig) -> None:
        self.config = config
        self._fluff = {w.casefold() for w in config.fluff}
        self._linkers = {w.casefold() for w in config.linkers}
        self._operators = {w.casefold() for w in config.operators}
        self._canonical = {word.casefold(): word for word in config.commands.values()}
        self._aliases = {alias.casefold(): config.command(key) for alias, key in config.aliases.items()}

    def tokenize(self, text: str) -> list[str]:
        tokens = (token.strip(string.punctuation) for token in text.casefold().split())
        return [token for token in tokens if token and token not in self._fluff]

    def parse(self, text: str) -> ParsedCommand | None:
        """Return the parsed command or None if ``text`` can't be handled.

        Empty input and compound statements ("take key and go north") fail.
        """

        tokens = self.tokenize(text)
        if not tokens:
            return None
        if any(token in self._linkers for token in tokens):
            logger.debug("compound command rejected", text=text)
            return None

        operator = None
        if len(tokens) > 2 and tokens[1] in self._operators:
            operator = tokens[1]
            rest = tokens[2:]
        else:
            rest = tokens[1:]
        obj = self.config.separator.join(rest)

        verb = tokens[0]
        original_verb = None
        alias = self._aliases.get(verb)
        if alias:
            original_verb = verb
            verb = alias
        else:
            verb = self._canonical.get(verb, verb)

        parsed = ParsedCommand(
            original=text,
            verb=verb,
            object=obj,
            original_verb=original_verb,
            operator=operator,
        )
        logger.debug("parsed command", verb=parsed.verb, object=parsed.object)
        return parsed


__all__ = ["GO", "GET", "RESET", "LOOK", "EXITS", "BUILTIN_KEYS", "ParserConfig", "ParsedCommand", "Parser"]
