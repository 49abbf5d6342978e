"""Built-in languages, looked up by name."""

from __future__ import annotations

import difflib
from collections.abc import Callable

from lambdatree.errors import ConfigError, Suggestion
from lambdatree.interpreter import Interpreter
from lambdatree.lang import math

LANGUAGES: dict[str, Callable[[], Interpreter]] = {
    "math": math.build,
}


def load(name: str) -> Interpreter:
    """Build a fresh interpreter for language *name*. Raises ConfigError."""
    builder = LANGUAGES.get(name)
    if builder is None:
        suggestions = [
            Suggestion(f"did you mean `{close}`?", close)
            for close in difflib.get_close_matches(name, LANGUAGES, n=1)
        ]
        raise ConfigError(
            f"unknown language `{name}`",
            notes=[f"available languages: {', '.join(sorted(LANGUAGES))}"],
            suggestions=suggestions,
        )
    return builder()
