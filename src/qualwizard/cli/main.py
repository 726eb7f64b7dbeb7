"""
qualwizard CLI - index suggestion wizard.

Usage:
    qualwizard suggest top_quals.json --database prod
    qualwizard suggest top_quals.json -d prod --strategy insertion --seed 42
    qualwizard suggest top_quals.json -d prod --format dot | dot -Tsvg > graph.svg
    qualwizard schema
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from qualwizard import __version__
from qualwizard.config import SolverStrategy, get_config
from qualwizard.datasource import DataSource, DataSourceRegistry
from qualwizard.exceptions import ParseError, QualWizardError
from qualwizard.output.renderers import OutputFormat, render_dot, render_json
from qualwizard.output.schema import get_json_schema
from qualwizard.wizard.solver import get_solver
from qualwizard.wizard.suggest import requester_from_config
from qualwizard.wizard.wizard import ProgressEvent, Wizard

app = typer.Typer(
    name="qualwizard",
    help="Index suggestion wizard for PostgreSQL workload predicates",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"qualwizard version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging."),
    ] = False,
) -> None:
    """qualwizard - index suggestion wizard."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _print_tour(wizard: Wizard) -> None:
    if not wizard.shortest_path:
        console.print(Panel(
            "[yellow]No quals to visit.[/yellow]",
            title="qualwizard",
            border_style="yellow",
        ))
        return

    table = Table(title=f"Suggested exploration order ({wizard.solver.name})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Qual")
    table.add_column("Same table", justify="center")
    table.add_column("Value", justify="right")
    table.add_column("Shared attributes")
    table.add_column("Missing", style="dim")

    for step, link in enumerate(wizard.shortest_path, 1):
        value = "[yellow]pending[/yellow]" if link.value is None else f"{link.value:g}"
        shared = ", ".join(
            f"{entry.relname or entry.relid}.{entry.attname or entry.attnum}"
            for entry in link.overlap
        )
        missing = ", ".join(q.label for q in link.missing)
        table.add_row(
            str(step),
            link.target.label or str(link.target.id),
            "[green]yes[/green]" if link.samerel else "no",
            value,
            shared,
            missing,
        )

    console.print(table)
    pending = len(wizard.unresolved_links)
    console.print(
        f"[dim]{len(wizard.qual_nodes)} qual(s), {len(wizard.links)} link(s), "
        f"{pending} pending suggestion(s), total distance {wizard.tour_distance():g}[/dim]"
    )


@app.command()
def suggest(
    quals_file: Annotated[
        Path,
        typer.Argument(
            help="Path to the collected qual batches (JSON)",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ],
    database: Annotated[
        str,
        typer.Option("--database", "-d", help="Database the quals were collected on"),
    ],
    datasource: Annotated[
        str,
        typer.Option("--datasource", help="Name under which the input is registered"),
    ] = "wizard_quals",
    strategy: Annotated[
        Optional[SolverStrategy],
        typer.Option("--strategy", "-s", help="Tour heuristic (defaults to config)"),
    ] = None,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", help="Seed for the insertion heuristic"),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.TEXT,
    suggest_url: Annotated[
        Optional[str],
        typer.Option("--suggest-url", help="Base URL of the suggestion server"),
    ] = None,
    send_suggestions: Annotated[
        bool,
        typer.Option(
            "--send-suggestions/--no-send-suggestions",
            help="POST suggestion requests for incomplete links",
        ),
    ] = True,
) -> None:
    """
    Build the qual graph and print the suggested exploration order.

    Examples:

        $ qualwizard suggest top_quals.json --database prod
        $ qualwizard suggest top_quals.json -d prod --format json > wizard.json
    """
    config = get_config()
    requester = requester_from_config(config, enabled=send_suggestions, base_url=suggest_url)

    wizard: Wizard | None = None
    try:
        registry = DataSourceRegistry.get_instance()
        source = registry.get(datasource) or registry.register(DataSource(datasource))
        wizard = Wizard.from_json(
            {"datasource": datasource, "database": database},
            registry=registry,
            requester=requester,
            solver=get_solver(strategy, config=config, seed=seed),
            config=config,
        )

        def show_progress(event: ProgressEvent) -> None:
            error_console.print(f"[dim]{event.stage} ({event.percent:.0f}%)[/dim]")

        if output_format == OutputFormat.TEXT:
            wizard.on_progress(show_progress)

        source.load(quals_file)

        if output_format == OutputFormat.JSON:
            console.print_json(render_json(wizard))
        elif output_format == OutputFormat.DOT:
            print(render_dot(wizard))
        else:
            _print_tour(wizard)

    except ParseError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        if e.detail:
            error_console.print(f"\n[dim]{e.detail}[/dim]")
        raise typer.Exit(code=1)
    except QualWizardError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(code=1)
    finally:
        if wizard is not None:
            wizard.close()
        requester.close()


@app.command()
def schema() -> None:
    """Print the JSON Schema of the `--format json` output."""
    console.print_json(json.dumps(get_json_schema()))


if __name__ == "__main__":
    app()
