"""Interactive read-eval-print loop."""

from __future__ import annotations

import logging

import click

from lambdatree.config import ReplConfig
from lambdatree.errors import DiagnosticRenderer, LambdaTreeError
from lambdatree.interpreter import Interpreter

logger = logging.getLogger(__name__)


class Repl:
    """Reads lines, runs each through *interpreter* and echoes the result."""

    def __init__(self, interpreter: Interpreter, config: ReplConfig | None = None) -> None:
        self.interpreter = interpreter
        self.config = config or ReplConfig()
        self.renderer = DiagnosticRenderer(color=self.config.color)

    def run(self) -> None:
        """Loop until the exit command or end of input."""
        while True:
            try:
                line = click.prompt(
                    "", prompt_suffix=self.config.prompt, default="", show_default=False,
                )
            except click.Abort:
                click.echo()
                return
            if line.strip() == self.config.exit_command:
                return
            if not line.strip():
                continue
            self.handle(line)

    def handle(self, line: str) -> bool:
        """Run one line, echo its result or diagnostic. Returns True on success."""
        try:
            output = self.interpreter.run(line)
        except LambdaTreeError as e:
            logger.debug("line failed: %s", e)
            self.renderer.add_source("<stdin>", line)
            click.echo(self.renderer.render(e.diagnostic()), err=True)
            click.echo(self.config.separator)
            return False
        click.echo(output)
        click.echo(self.config.separator)
        return True
