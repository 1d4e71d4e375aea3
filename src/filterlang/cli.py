"""
filterlang CLI.

Commands:
- eval: Parse an expression, evaluate it against variables, print the result
- parse: Parse an expression and print its canonical form or tree
"""

from __future__ import annotations

import json
import logging
import platform
import sys
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from filterlang import __version__
from filterlang.core.errors import EvaluationError, FilterLangError, ParseError
from filterlang.core.expression_lang import MappingLookup, dump, evaluate, parse_expr, unparse

app = typer.Typer(
    help="filterlang - evaluate boolean filter expressions over named variables",
    no_args_is_help=True,
)

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        console.print(f"filterlang {__version__}")
        console.print(
            f"Python {platform.python_version()} ({platform.python_implementation()})",
            highlight=False,
        )
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version information",
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log parsing and variable resolution")
    ] = False,
) -> None:
    """filterlang CLI main callback for global options."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
            stream=sys.stderr,
        )


def _parse_assignment(assignment: str) -> tuple[str, Any]:
    """Split NAME=VALUE; VALUE is read as JSON, falling back to a plain string."""
    name, sep, raw = assignment.partition("=")
    name = name.strip()
    if not sep or not name:
        raise typer.BadParameter(f"Expected NAME=VALUE, got {assignment!r}", param_hint="--var")
    try:
        return name, json.loads(raw)
    except json.JSONDecodeError:
        return name, raw


def _load_context(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise typer.BadParameter(f"Cannot read {path}: {e}", param_hint="--context") from e
    if not isinstance(data, dict):
        raise typer.BadParameter(f"{path} must contain a JSON object", param_hint="--context")
    return data


def _fail(label: str, error: FilterLangError) -> NoReturn:
    err_console.print(f"[red]{label}:[/red] {escape(str(error))}")
    raise typer.Exit(1)


@app.command(name="eval")
def eval_command(
    expression: Annotated[str, typer.Argument(help="Expression to evaluate")],
    var: Annotated[
        list[str] | None,
        typer.Option("--var", help="Variable as NAME=VALUE (VALUE parsed as JSON)"),
    ] = None,
    context: Annotated[
        Path | None,
        typer.Option("--context", "-c", help="JSON file with an object of variables"),
    ] = None,
) -> None:
    """Evaluate an expression and print the resulting value."""
    variables = _load_context(context)
    for assignment in var or []:
        name, value = _parse_assignment(assignment)
        variables[name] = value

    try:
        expr = parse_expr(expression)
    except ParseError as e:
        _fail("Parse error", e)

    try:
        result = evaluate(expr, MappingLookup(variables))
    except EvaluationError as e:
        _fail("Evaluation error", e)

    console.print(escape(str(result)), highlight=False)


@app.command(name="parse")
def parse_command(
    expression: Annotated[str, typer.Argument(help="Expression to parse")],
    tree: Annotated[bool, typer.Option("--dump", help="Print the parsed tree")] = False,
) -> None:
    """Parse an expression and print its canonical form."""
    try:
        expr = parse_expr(expression)
    except ParseError as e:
        _fail("Parse error", e)

    output = dump(expr) if tree else unparse(expr)
    console.print(escape(output), highlight=False)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
