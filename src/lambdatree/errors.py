"""Error types and Rust-style colored diagnostic rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lambdatree.source import Span


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str


@dataclass(frozen=True)
class Suggestion:
    """A suggested fix."""

    message: str
    replacement: str


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and suggestions."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    suggestions: list[Suggestion] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors.

    Source lines are looked up in the in-memory *sources* first (keyed by
    span file name, e.g. ``"<stdin>"``) and then on disk.
    """

    def __init__(self, *, color: bool = True, sources: dict[str, str] | None = None) -> None:
        self.color = color
        self._file_cache: dict[str, list[str]] = {}
        for name, text in (sources or {}).items():
            self.add_source(name, text)

    def add_source(self, name: str, text: str) -> None:
        """Register in-memory source text under *name*."""
        self._file_cache[name] = text.splitlines()

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def _get_source_line(self, filename: str, line_num: int) -> str | None:
        """Load and cache source file, return the 1-indexed line."""
        if filename not in self._file_cache:
            try:
                path = Path(filename)
                if path.is_file():
                    self._file_cache[filename] = path.read_text().splitlines()
                else:
                    self._file_cache[filename] = []
            except OSError:
                self._file_cache[filename] = []
        lines = self._file_cache[filename]
        if 1 <= line_num <= len(lines):
            return lines[line_num - 1]
        return None

    def render(self, diag: Diagnostic) -> str:
        lines: list[str] = []
        sev = diag.severity
        color = _COLORS[sev]

        # Header: error[E200]: message
        lines.append(
            f"{self._c(color)}{sev.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        for label in diag.labels:
            span = label.span
            lines.append(f"  {self._c(_BLUE)}-->{self._c(_RESET)} {span}")
            gutter = f"{span.start_line:>4}"
            lines.append(f"  {self._c(_BLUE)}   |{self._c(_RESET)}")

            source_line = self._get_source_line(span.file, span.start_line)
            if source_line is not None:
                lines.append(
                    f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)} {source_line}"
                )
                if span.start_line == span.end_line:
                    caret_len = max(1, span.end_col - span.start_col)
                else:
                    caret_len = max(1, len(source_line) - span.start_col + 1)
                padding = " " * (span.start_col - 1)
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)} "
                    f"{padding}{self._c(color)}{'^' * caret_len}{self._c(_RESET)}"
                )

            if label.message:
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)}   "
                    f"{self._c(color)}{label.message}{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        for suggestion in diag.suggestions:
            lines.append(
                f"  {self._c(_BLUE)}try:{self._c(_RESET)} {suggestion.replacement}"
            )

        return "\n".join(lines)


# ── Exceptions ───────────────────────────────────────────────────


class LambdaTreeError(Exception):
    """Base class for every error raised by lambdatree."""

    code = "E000"

    def __init__(
        self,
        message: str,
        span: Span | None = None,
        *,
        notes: list[str] | None = None,
        suggestions: list[Suggestion] | None = None,
    ) -> None:
        self.message = message
        self.span = span
        self.notes = notes or []
        self.suggestions = suggestions or []
        super().__init__(message)

    def diagnostic(self) -> Diagnostic:
        labels = [DiagnosticLabel(span=self.span, message="")] if self.span else []
        return Diagnostic(
            severity=Severity.ERROR,
            code=self.code,
            message=self.message,
            labels=labels,
            suggestions=list(self.suggestions),
            notes=list(self.notes),
        )


class PatternError(LambdaTreeError):
    """A token pattern failed to compile."""

    code = "E100"


class ParseError(LambdaTreeError):
    """No grammar alternative matched the input."""

    code = "E200"


class GrammarError(LambdaTreeError):
    """The grammar itself is unusable: bad references, bad instructions."""

    code = "E210"


class UndefinedRuleError(GrammarError):
    code = "E211"

    def __init__(self, name: str, span: Span | None = None, **kwargs) -> None:
        self.name = name
        super().__init__(f"no rule named `{name}`", span, **kwargs)


class LeftRecursionError(GrammarError):
    code = "E212"

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(
            f"rule `{cycle[0]}` is left-recursive: {' -> '.join(cycle)}",
            notes=["rewrite the rule so that it consumes input before recursing"],
        )


class EvaluationError(LambdaTreeError):
    """Evaluation produced an error value at the top level."""

    code = "E300"


class ConfigError(LambdaTreeError):
    code = "E400"
