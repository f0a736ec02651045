"""Bundle the messages and parser vocabulary of one language."""

from __future__ import annotations

from . import i18n
from .parser import Parser, ParserConfig


class LanguageManager:
    """Hold messages, parser configuration and the parser built from it."""

    def __init__(self, language: str, messages: dict[str, str] | None = None, parser_config: ParserConfig | None = None) -> None:
        self.language = language
        self.messages = messages if messages is not None else i18n.load_messages(language)
        self.parser_config = parser_config if parser_config is not None else i18n.load_parser_config(language)
        self.parser = Parser(self.parser_config)


__all__ = ["LanguageManager"]
