"""Simple translation loader."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from .log import get_logger
from .parser import ParserConfig

logger = get_logger(__name__)


def data_dir() -> Path:
    return Path(__file__).resolve().parent / "data"


def _load_yaml(path: Path) -> dict:
    try:
        with open(path, encoding="utf-8") as fh:
            return yaml.safe_load(fh) or {}
    except FileNotFoundError as exc:
        logger.error("Missing file", file=path.name)
        raise SystemExit(f"ERROR: Missing file '{path.name}'") from exc
    except yaml.YAMLError as exc:
        logger.error("Invalid YAML", file=path.name, error=str(exc))
        raise SystemExit(f"ERROR: Invalid YAML in '{path.name}': {exc}") from exc


def load_messages(language: str) -> dict[str, str]:
    """Load translation messages for the given language code."""
    path = data_dir() / language / f"messages.{language}.yaml"
    return _load_yaml(path)


def load_parser_config(language: str) -> ParserConfig:
    """Load the parser vocabulary for the given language code."""
    path = data_dir() / language / f"parser.{language}.yaml"
    data = _load_yaml(path)
    data.setdefault("language", language)
    try:
        return ParserConfig.model_validate(data)
    except ValidationError as exc:
        logger.error("Invalid parser configuration", file=path.name, error=str(exc))
        raise SystemExit(f"ERROR: Invalid parser configuration in '{path.name}'") from exc
