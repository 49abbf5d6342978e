"""TOML config loading for lambdatree.toml."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from lambdatree.errors import ConfigError

CONFIG_NAME = "lambdatree.toml"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ReplConfig:
    prompt: str = "@> "
    exit_command: str = "exit"
    separator: str = "---"
    color: bool = True


@dataclass
class LanguageConfig:
    name: str = "math"


@dataclass
class LoggingConfig:
    level: str = "WARNING"

    @property
    def level_number(self) -> int:
        return logging.getLevelName(self.level)


@dataclass
class LambdaTreeConfig:
    repl: ReplConfig = field(default_factory=ReplConfig)
    language: LanguageConfig = field(default_factory=LanguageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find lambdatree.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> LambdaTreeConfig:
    """Parse a lambdatree.toml file. Raises ConfigError on bad values."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e

    config = LambdaTreeConfig()

    if "repl" in data:
        repl = data["repl"]
        config.repl = ReplConfig(
            prompt=_get(repl, "repl.prompt", "@> ", str),
            exit_command=_get(repl, "repl.exit_command", "exit", str),
            separator=_get(repl, "repl.separator", "---", str),
            color=_get(repl, "repl.color", True, bool),
        )

    if "language" in data:
        lang = data["language"]
        config.language = LanguageConfig(
            name=_get(lang, "language.name", "math", str),
        )

    if "logging" in data:
        log = data["logging"]
        level = _get(log, "logging.level", "WARNING", str).upper()
        if level not in _LEVELS:
            raise ConfigError(
                f"unknown log level {level!r} in {path}",
                notes=[f"expected one of: {', '.join(_LEVELS)}"],
            )
        config.logging = LoggingConfig(level=level)

    return config


def discover_config(start_path: Path | None = None) -> LambdaTreeConfig:
    """Load the nearest lambdatree.toml, or defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return LambdaTreeConfig()


def _get(table: dict, key: str, default, kind: type):
    value = table.get(key.rsplit(".", 1)[-1], default)
    if not isinstance(value, kind):
        raise ConfigError(
            f"`{key}` must be {kind.__name__}, got {type(value).__name__} {value!r}"
        )
    return value
