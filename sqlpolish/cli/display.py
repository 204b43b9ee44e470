"""Rich display functions for the sqlpolish CLI.

Formatted SQL is written to stdout untouched. Everything else a command
reports (check results, errors, tables) goes through the Rich consoles
below so it never mixes with piped SQL output.
"""

import json
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from sqlpolish.exceptions import SQLPolishError
from sqlpolish.formatter.stats import StatsSummary
from sqlpolish.tokenizer.tokens import Token

console = Console()
err_console = Console(stderr=True)


# Success Display Functions
def display_formatted_file(path: str) -> None:
    """Report a file rewritten in place."""
    err_console.print(f"✅ [green]Formatted[/green] [cyan]{escape(path)}[/cyan]")


def display_check_results(changed: List[str], checked: int) -> None:
    """Display the outcome of ``format --check``.

    Args:
        changed: Inputs whose formatting would change
        checked: Number of inputs checked
    """
    if not changed:
        err_console.print(
            f"✅ [bold green]{checked} file(s) already formatted[/bold green]"
        )
        return

    for path in changed:
        err_console.print(f"❌ [bold red]Would reformat[/bold red] [cyan]{escape(path)}[/cyan]")
    err_console.print(
        f"\n💡 [yellow]{len(changed)} of {checked} file(s) would be reformatted[/yellow]"
    )


def display_tokens_table(tokens: List[Token], source_name: str) -> None:
    """Display the token stream of a file.

    Args:
        tokens: Tokens produced by the lexer
        source_name: File name shown in the title
    """
    if not tokens:
        console.print(f"📋 [yellow]No tokens in {source_name}[/yellow]")
        return

    table = Table(
        title=f"Tokens in {source_name} ({len(tokens)})",
        show_header=True,
        header_style="bold blue",
    )
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Col", justify="right", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Text", style="white")
    table.add_column("Category", style="magenta")

    for token in tokens:
        category = token.category.value if token.category else ""
        if token.is_temp_table:
            category = "temp_table"
        table.add_row(
            str(token.line),
            str(token.col),
            token.kind.value,
            escape(repr(token.text)),
            category,
        )

    console.print(table)


def display_presets_list(presets: List[Dict[str, Any]]) -> None:
    """Display the built-in presets.

    Args:
        presets: Preset documents with name and description
    """
    console.print(f"📋 [bold blue]Available presets ({len(presets)})[/bold blue]")

    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Preset", style="cyan")
    table.add_column("Overrides", style="white", justify="right")
    table.add_column("Description", style="dim")

    for preset in presets:
        table.add_row(preset["name"], str(len(preset["options"])), preset["description"])

    console.print(table)


def display_stats_summary(summary: StatsSummary, source_name: str, iterations: int) -> None:
    """Display benchmark timings.

    Args:
        summary: Timing summary from FormatStats
        source_name: Benchmarked file
        iterations: Number of format calls made
    """
    console.print(
        f"⏱️  [bold blue]Benchmark: {source_name}[/bold blue] ({iterations} iterations)"
    )

    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Metric", style="cyan", width=16)
    table.add_column("Value", style="white", justify="right")

    table.add_row("Timed calls", str(summary.count))
    table.add_row("Mean", f"{summary.mean_ms:.3f} ms")
    table.add_row("Min", f"{summary.min_ms:.3f} ms")
    table.add_row("Max", f"{summary.max_ms:.3f} ms")
    table.add_row("p95", f"{summary.p95_ms:.3f} ms")
    table.add_row("Cache hit rate", f"{summary.cache_hit_rate:.1%}")

    console.print(table)


# Error Display Functions
def display_error(error: SQLPolishError, title: str = "Error") -> None:
    """Display a sqlpolish error as a panel with its suggestions.

    Args:
        error: The error to show
        title: Panel title
    """
    lines = [f"[bold red]{escape(error.message)}[/bold red]"]
    if error.suggestions:
        lines.append("")
        lines.append("💡 [bold yellow]Suggestions:[/bold yellow]")
        for suggestion in error.suggestions:
            lines.append(f"   • {escape(suggestion)}")

    err_console.print(Panel("\n".join(lines), title=title, border_style="red"))


def display_generic_error(error: Exception, context: str = "") -> None:
    """Display generic error with context.

    Args:
        error: Exception that occurred
        context: Optional context about where the error occurred
    """
    context_text = f" during {context}" if context else ""
    err_console.print(f"❌ [bold red]Error{context_text}[/bold red]")
    err_console.print(f"🔍 [dim]{escape(str(error))}[/dim]")


# Utility Display Functions
def display_json_output(data: Any) -> None:
    """Display JSON output with proper formatting.

    Args:
        data: Data to display as JSON
    """
    try:
        json_str = json.dumps(data, indent=2, ensure_ascii=False)
        console.print(json_str, markup=False, highlight=False)
    except (TypeError, ValueError) as e:
        err_console.print(f"❌ [red]Error formatting JSON output: {e}[/red]")
