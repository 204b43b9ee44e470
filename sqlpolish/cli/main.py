#!/usr/bin/env python3
"""sqlpolish CLI.

Typer application exposing the formatter:
- ``format`` formats files or stdin, in place or as a check
- ``tokens`` shows the lexer output for a file
- ``presets`` lists and shows the built-in presets
- ``bench`` times repeated format calls
"""

import asyncio
import sys
from typing import Any, Dict, List, Optional, Tuple

import typer
import yaml

from sqlpolish.cli.commands.presets import presets_app
from sqlpolish.cli.display import (
    console,
    display_check_results,
    display_error,
    display_formatted_file,
    display_generic_error,
    display_stats_summary,
    display_tokens_table,
)
from sqlpolish.cli.errors import InvalidOptionAssignmentError, LineRangeError
from sqlpolish.exceptions import SQLPolishError
from sqlpolish.formatter.cache import FormatCache
from sqlpolish.formatter.config import FormatterConfig
from sqlpolish.formatter.engine import FormatterEngine
from sqlpolish.formatter.presets import load_config_file, load_preset
from sqlpolish.formatter.scheduler import format_sql_async
from sqlpolish.formatter.stats import FormatStats
from sqlpolish.logging import configure_logging, get_logger
from sqlpolish.tokenizer import tokenize

logger = get_logger(__name__)

STDIN_NAME = "-"

app = typer.Typer(
    name="sqlpolish",
    help="sqlpolish - SQL tokenizer and formatter",
    add_completion=True,
    no_args_is_help=True,
)

app.add_typer(presets_app, name="presets")


def _version_callback(value: bool) -> None:
    # Eager, so it runs before click asks for a subcommand
    if value:
        from sqlpolish import __version__

        console.print(f"sqlpolish v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output"
    ),
) -> None:
    """sqlpolish - format SQL with configurable style rules.

    Examples:
        sqlpolish format query.sql --preset ssms
        cat query.sql | sqlpolish format --set keyword_case=lower
        sqlpolish presets list
    """
    configure_logging(verbose=verbose)


def parse_assignments(assignments: List[str]) -> Dict[str, Any]:
    """Parse ``--set key=value`` pairs.

    Values are read as YAML scalars, so ``true``, ``2`` and ``lower``
    become a bool, an int and a string.

    Raises:
        InvalidOptionAssignmentError: If an assignment has no ``=`` or no key
    """
    overrides: Dict[str, Any] = {}
    for assignment in assignments:
        key, sep, raw_value = assignment.partition("=")
        key = key.strip()
        if not sep or not key:
            raise InvalidOptionAssignmentError(assignment)
        try:
            value = yaml.safe_load(raw_value) if raw_value.strip() else ""
        except yaml.YAMLError:
            value = raw_value
        overrides[key] = value
    return overrides


def parse_line_range(line_range: str) -> Tuple[int, int]:
    """Parse ``START:END`` into 1-based inclusive line numbers.

    Raises:
        LineRangeError: If the range is malformed or empty
    """
    start_text, sep, end_text = line_range.partition(":")
    if not sep:
        raise LineRangeError(line_range, "expected START:END")
    try:
        start, end = int(start_text), int(end_text)
    except ValueError:
        raise LineRangeError(line_range, "line numbers must be integers")
    if start < 1 or end < start:
        raise LineRangeError(line_range, "START must be at least 1 and not after END")
    return start, end


def build_config(
    preset: Optional[str], config_file: Optional[str], assignments: List[str]
) -> FormatterConfig:
    """Resolve the formatter configuration from CLI options."""
    if preset and config_file:
        raise SQLPolishError(
            "Use either --preset or --config, not both",
            ["Name the preset inside the config file with 'preset: <name>'"],
        )

    if config_file:
        config = load_config_file(config_file)
    else:
        config = load_preset(preset or "default")

    overrides = parse_assignments(assignments)
    if overrides:
        config = config.replace(**overrides)
    return config


def _read_source(path: str) -> str:
    if path == STDIN_NAME:
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _format_source(
    engine: FormatterEngine,
    source: str,
    line_range: Optional[Tuple[int, int]],
    use_async: bool,
) -> str:
    """Format one input, splicing a formatted line range back in."""
    if line_range is None:
        if use_async:
            return asyncio.run(format_sql_async(source, engine.config))
        return engine.format(source)

    start, end = line_range
    formatted_span = engine.format_range(source, start, end)
    lines = source.splitlines()
    spliced = lines[: start - 1] + formatted_span.splitlines() + lines[end:]
    output = "\n".join(spliced)
    if source.endswith(("\n", "\r")):
        output += "\n"
    return output


@app.command("format")
def format_command(
    files: Optional[List[str]] = typer.Argument(
        None, help="SQL files to format; reads stdin when omitted or '-'"
    ),
    preset: Optional[str] = typer.Option(
        None, "--preset", "-p", help="Built-in preset to start from"
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="YAML configuration file"
    ),
    assignments: Optional[List[str]] = typer.Option(
        None, "--set", "-s", help="Override an option: key=value (repeatable)"
    ),
    in_place: bool = typer.Option(
        False, "--in-place", "-i", help="Rewrite files instead of printing"
    ),
    check: bool = typer.Option(
        False, "--check", help="Exit with status 1 if any input would change"
    ),
    lines: Optional[str] = typer.Option(
        None, "--lines", help="Only format lines START:END (1-based, inclusive)"
    ),
    use_async: bool = typer.Option(
        False, "--async", help="Format with the cooperative batch scheduler"
    ),
) -> None:
    """Format SQL files or standard input."""
    paths = files or [STDIN_NAME]
    try:
        config = build_config(preset, config_file, assignments or [])
        line_range = parse_line_range(lines) if lines else None
        if in_place and STDIN_NAME in paths:
            raise SQLPolishError(
                "Cannot rewrite standard input in place", ["Pass file paths with --in-place"]
            )

        engine = FormatterEngine(config)
        changed: List[str] = []
        for path in paths:
            source = _read_source(path)
            output = _format_source(engine, source, line_range, use_async)
            logger.debug(f"Formatted {path}: {len(source)} -> {len(output)} chars")

            if check:
                if output != source:
                    changed.append("<stdin>" if path == STDIN_NAME else path)
            elif in_place:
                if output != source:
                    with open(path, "w", encoding="utf-8") as f:
                        f.write(output)
                    display_formatted_file(path)
            else:
                typer.echo(output, nl=not output.endswith("\n"))

    except SQLPolishError as e:
        display_error(e)
        raise typer.Exit(1)
    except ValueError as e:
        display_error(SQLPolishError(str(e), ["Check the --lines range against the input"]))
        raise typer.Exit(1)
    except OSError as e:
        display_generic_error(e, "reading or writing SQL files")
        raise typer.Exit(1)

    if check:
        display_check_results(changed, len(paths))
        if changed:
            raise typer.Exit(1)


@app.command("tokens")
def tokens_command(
    file: str = typer.Argument(..., help="SQL file to tokenize ('-' for stdin)"),
) -> None:
    """Show the token stream of a SQL file."""
    try:
        source = _read_source(file)
    except OSError as e:
        display_generic_error(e, "reading SQL file")
        raise typer.Exit(1)

    display_tokens_table(tokenize(source), "<stdin>" if file == STDIN_NAME else file)


@app.command("bench")
def bench_command(
    file: str = typer.Argument(..., help="SQL file to format repeatedly"),
    iterations: int = typer.Option(
        100, "--iterations", "-n", min=1, help="Number of format calls"
    ),
    preset: Optional[str] = typer.Option(
        None, "--preset", "-p", help="Built-in preset to benchmark"
    ),
    use_cache: bool = typer.Option(
        False, "--cache", help="Put a result cache in front of the engine"
    ),
) -> None:
    """Time repeated format calls on one file."""
    try:
        source = _read_source(file)
        config = load_preset(preset or "default")
    except SQLPolishError as e:
        display_error(e)
        raise typer.Exit(1)
    except OSError as e:
        display_generic_error(e, "reading SQL file")
        raise typer.Exit(1)

    stats = FormatStats(window=max(iterations, 1))
    engine = FormatterEngine(config, cache=FormatCache() if use_cache else None, stats=stats)
    for _ in range(iterations):
        engine.format(source)

    display_stats_summary(stats.summary(), file, iterations)


def cli() -> None:
    """Entry point for the CLI application.

    Handles top-level error catching and provides consistent exit behavior.
    """
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n⚠️  [yellow]Operation cancelled by user[/yellow]")
        raise typer.Exit(130)  # Standard exit code for SIGINT


if __name__ == "__main__":
    # Direct execution support
    cli()
