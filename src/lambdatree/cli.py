"""lambdatree command line interface."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NoReturn

import click

from lambdatree import __version__
from lambdatree.ast_nodes import Node
from lambdatree.config import LambdaTreeConfig, discover_config, load_config
from lambdatree.cursor import Cursor
from lambdatree.errors import DiagnosticRenderer, LambdaTreeError
from lambdatree.interpreter import Interpreter
from lambdatree.lang import load
from lambdatree.repl import Repl


def _setup_logging(config: LambdaTreeConfig, verbose: int) -> None:
    level = config.logging.level_number
    if verbose == 1:
        level = min(level, logging.INFO)
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _interpreter(ctx: click.Context, lang: str | None) -> Interpreter:
    config: LambdaTreeConfig = ctx.obj
    try:
        return load(lang or config.language.name)
    except LambdaTreeError as e:
        _fail(e, config)


def _fail(error: LambdaTreeError, config: LambdaTreeConfig, source: str = "") -> NoReturn:
    renderer = DiagnosticRenderer(color=config.repl.color)
    if source:
        renderer.add_source("<stdin>", source)
    click.echo(renderer.render(error.diagnostic()), err=True)
    raise SystemExit(1)


@click.group()
@click.version_option(__version__, prog_name="lambdatree")
@click.option("-v", "--verbose", count=True, help="Log more (-v info, -vv debug).")
@click.option(
    "--config", "config_path", type=click.Path(exists=True, dir_okay=False), default=None,
    help="Path to lambdatree.toml (default: search upwards).",
)
@click.pass_context
def main(ctx: click.Context, verbose: int, config_path: str | None) -> None:
    """Backtracking grammar engine and tree-walking evaluator."""
    try:
        if config_path:
            config = load_config(Path(config_path))
        else:
            config = discover_config()
    except LambdaTreeError as e:
        _fail(e, LambdaTreeConfig())
    _setup_logging(config, verbose)
    ctx.obj = config


@main.command()
@click.option("--lang", default=None, help="Language to load.")
@click.pass_context
def repl(ctx: click.Context, lang: str | None) -> None:
    """Start an interactive session."""
    interpreter = _interpreter(ctx, lang)
    Repl(interpreter, ctx.obj.repl).run()


@main.command()
@click.argument("expr")
@click.option("--lang", default=None, help="Language to load.")
@click.pass_context
def run(ctx: click.Context, expr: str, lang: str | None) -> None:
    """Evaluate one expression and print the result."""
    interpreter = _interpreter(ctx, lang)
    try:
        click.echo(interpreter.run(expr))
    except LambdaTreeError as e:
        _fail(e, ctx.obj, expr)


@main.command()
@click.argument("expr")
@click.option("--lang", default=None, help="Language to load.")
@click.pass_context
def view(ctx: click.Context, expr: str, lang: str | None) -> None:
    """View the AST of an expression."""
    interpreter = _interpreter(ctx, lang)
    try:
        ast = interpreter.parse_one(Cursor(expr))
    except LambdaTreeError as e:
        _fail(e, ctx.obj, expr)
    _dump_ast(ast.root, 0)


@main.command()
@click.argument("expr")
@click.option("--lang", default=None, help="Language to load.")
@click.pass_context
def tokens(ctx: click.Context, expr: str, lang: str | None) -> None:
    """List the tokens of an expression."""
    interpreter = _interpreter(ctx, lang)
    try:
        for tok in interpreter.lexer.tokenize(Cursor(expr)):
            click.echo(f"{tok.span}  {tok.token_type:<8} {tok.value!r}")
    except LambdaTreeError as e:
        _fail(e, ctx.obj, expr)


def _dump_ast(node: Node, depth: int) -> None:
    """Print a readable AST dump."""
    indent = "  " * depth
    label = node.rule or ("Token" if node.is_leaf else "Sequence")
    if node.token is not None:
        click.echo(f"{indent}{label} [{node.instruction}] {node.token}")
        return
    click.echo(f"{indent}{label} [{node.instruction}]")
    for child in node.children:
        _dump_ast(child, depth + 1)
