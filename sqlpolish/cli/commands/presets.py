"""Preset CLI commands for sqlpolish.

Lists the built-in formatter presets and shows the full option set a
preset resolves to.
"""

import typer
import yaml

from sqlpolish.cli.display import (
    console,
    display_error,
    display_json_output,
    display_presets_list,
)
from sqlpolish.exceptions import SQLPolishError
from sqlpolish.formatter.presets import list_presets, load_preset, read_preset
from sqlpolish.logging import get_logger

logger = get_logger(__name__)

# Create the presets command group
presets_app = typer.Typer(
    name="presets",
    help="List and inspect formatter presets",
)


@presets_app.command("list")
def list_command(
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Print preset names only",
    ),
) -> None:
    """List the built-in presets."""
    names = list_presets()
    if quiet:
        for name in names:
            console.print(name, markup=False)
    else:
        display_presets_list([read_preset(name) for name in names])

    logger.debug(f"Listed {len(names)} presets")


@presets_app.command("show")
def show_command(
    name: str = typer.Argument(..., help="Preset name"),
    format: str = typer.Option("yaml", "--format", help="Output format: yaml or json"),
) -> None:
    """Show every option value a preset resolves to."""
    if format not in ("yaml", "json"):
        display_error(
            SQLPolishError(
                f"Unsupported output format '{format}'", ["Use --format yaml or --format json"]
            )
        )
        raise typer.Exit(1)

    try:
        options = load_preset(name).to_dict()
    except SQLPolishError as e:
        display_error(e, "Preset error")
        raise typer.Exit(1)

    if format == "json":
        display_json_output(options)
    else:
        typer.echo(yaml.safe_dump(options, sort_keys=True, default_flow_style=False), nl=False)
