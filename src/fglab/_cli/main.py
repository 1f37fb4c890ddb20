import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from fglab._config import ConfigError, get_settings
from fglab._engine import calculate_marginal
from fglab._errors import FactorGraphError
from fglab._io import export_messages_to_toml, load_messages_from_toml, message_to_dict
from fglab._messages import Family
from fglab._nodes import NODE_TYPES

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Factor graph message passing CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _message_table(title: str, data: dict[str, object]) -> Table:
    table = Table(show_header=True, header_style="bold cyan", title=title)
    table.add_column("Parameter", style="bold")
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(escape(key), escape(str(value)))
    return table


@app.command()
def marginal(
    input: Annotated[  # noqa: A002
        Path,
        typer.Argument(help="Path to a TOML file with [forward] and [backward] messages"),
    ],
    *,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output TOML file"),
    ] = None,
    forward_name: Annotated[
        str,
        typer.Option("--forward", help="Name of the forward message table"),
    ] = "forward",
    backward_name: Annotated[
        str,
        typer.Option("--backward", help="Name of the backward message table"),
    ] = "backward",
) -> None:
    """Combine a forward and a backward message into the marginal belief."""
    if not input.exists():
        err_console.print(f"[red]Error: Input file not found: {input}[/red]")
        raise typer.Exit(code=1)

    err_console.print(f"[cyan]Loading messages from:[/cyan] {input}")
    try:
        messages = load_messages_from_toml(input)
    except (ValidationError, ValueError) as e:
        err_console.print(f"[red]Error: Invalid message file {input}:[/red]\n{escape(str(e))}")
        raise typer.Exit(code=1) from e

    missing = [name for name in (forward_name, backward_name) if name not in messages]
    if missing:
        err_console.print(f"[red]Error: Missing message table(s): {', '.join(missing)}[/red]")
        raise typer.Exit(code=1)

    forward = messages[forward_name]
    backward = messages[backward_name]
    logger.debug(f"Forward message: {forward!r}")
    logger.debug(f"Backward message: {backward!r}")

    try:
        belief = calculate_marginal(forward, backward)
    except FactorGraphError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    out_console.print(_message_table("Marginal", message_to_dict(belief)))

    if output is not None:
        export_messages_to_toml({"marginal": belief}, output)
        err_console.print(f"[green]✓ Marginal written to {output}[/green]")


@app.command()
def rules() -> None:
    """List the update rules registered for every node kind."""
    table = Table(show_header=True, header_style="bold cyan", box=None, title="Update rules")
    table.add_column("Node", style="bold")
    table.add_column("Rule")
    table.add_column("Families", style="dim")

    num_rules = 0
    for node_type in NODE_TYPES:
        for rule in node_type.rules:
            if rule.families == frozenset(Family):
                families = "any"
            else:
                families = ", ".join(sorted(str(family) for family in rule.families))
            table.add_row(str(node_type.kind), rule.name, families)
            num_rules += 1

    out_console.print(table)
    out_console.print(f"[dim]{num_rules} rules[/dim]")


@app.command()
def config() -> None:
    """Show the engine settings in effect for the current directory."""
    try:
        settings = get_settings()
    except ConfigError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Setting", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("depth_budget", str(settings.depth_budget))
    table.add_row("fallback_mean", str(settings.fallback_mean))
    table.add_row("fallback_variance", str(settings.fallback_variance))
    out_console.print(table)


def main() -> None:
    app()
