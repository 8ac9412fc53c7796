"""Command-line interface for API Doc Capture.

This module provides a Click-based CLI to synthesize schema fragments from
example files and to inspect exported scenario files.
"""

import json
import sys
from pathlib import Path
from typing import Any, Optional

import click
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from apidoc_capture import __version__
from apidoc_capture.config import configure_logging
from apidoc_capture.core.scenario_collector import ScenarioCollector
from apidoc_capture.core.schema_factory import create_schema
from apidoc_capture.exceptions import ApiDocCaptureException, ExampleLoadException

console = Console()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def load_example(path: str) -> Any:
    """Load an example value from a JSON or YAML file.

    Args:
        path: Path to a .json, .yaml or .yml file

    Returns:
        Parsed value

    Raises:
        FileNotFoundError: File doesn't exist
        ExampleLoadException: Unsupported extension or invalid syntax
    """
    example_file = Path(path)
    if not example_file.exists():
        raise FileNotFoundError(f"Example file not found: {path}")

    suffix = example_file.suffix.lower()
    with open(example_file, encoding="utf-8") as f:
        if suffix in [".yaml", ".yml"]:
            try:
                return yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ExampleLoadException(f"Invalid YAML in {path}: {e}") from e
        if suffix == ".json":
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise ExampleLoadException(f"Invalid JSON in {path}: {e}") from e

    raise ExampleLoadException(
        f"Unsupported file format: {example_file.suffix}. Expected .json, .yaml, or .yml"
    )


@click.group()
@click.version_option(version=__version__, prog_name="apidoc-capture")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level (default: APIDOC_CAPTURE_LOG_LEVEL or WARNING)",
)
def cli(log_level: Optional[str]):
    """API Doc Capture - OpenAPI schemas from executed HTTP examples.

    Infers schema fragments from example values and inspects scenario
    files exported by test runs.
    """
    configure_logging(log_level)


@cli.command()
@click.argument("example_path", type=click.Path(exists=True))
@click.option(
    "--no-example",
    is_flag=True,
    help="Leave example values out of the schema",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Write the schema to a JSON file",
)
def schema(example_path: str, no_example: bool, output: Optional[str]):
    """Infer an OpenAPI schema fragment from an example file.

    Example:
        apidoc-capture schema user.json
        apidoc-capture schema user.yaml --no-example
        apidoc-capture schema user.json --output user.schema.json
    """
    try:
        value = load_example(example_path)
        fragment = create_schema(value, include_example=not no_example)

        console.print_json(json.dumps(fragment))

        if output:
            with open(output, "w", encoding="utf-8") as f:
                json.dump(fragment, f, indent=2)
            console.print(f"\n[dim]Schema written to:[/dim] {output}")

    except (ApiDocCaptureException, OSError) as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        sys.exit(1)


@cli.command()
@click.argument("export_path", type=click.Path(exists=True))
def scenarios(export_path: str):
    """Show scenarios from an exported scenario file.

    Example:
        apidoc-capture scenarios build/scenarios.json
    """
    try:
        results = ScenarioCollector.load_json(export_path)

        if not results:
            console.print("\n[yellow]No scenarios found in export.[/yellow]")
            return

        table = Table(title=f"Captured Scenarios ({len(results)})", show_header=True)
        table.add_column("#", style="dim", width=3)
        table.add_column("Method", style="cyan")
        table.add_column("URL", style="green")
        table.add_column("Status", style="yellow")
        table.add_column("Description")

        for idx, result in enumerate(results, 1):
            table.add_row(
                str(idx),
                result.method,
                result.url,
                str(result.response.get("status", "")),
                result.options.get("description") or result.test_suite_description or "",
            )

        console.print()
        console.print(table)

        statuses = [r.response.get("status") for r in results]
        failures = sum(1 for s in statuses if isinstance(s, int) and s >= 400)
        console.print(
            Panel(
                f"[cyan]Requests:[/cyan] {len(results)}\n"
                f"[cyan]Error responses:[/cyan] {failures}",
                title="Summary",
                border_style="green",
            )
        )

    except (ApiDocCaptureException, OSError) as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        sys.exit(1)


def main():
    """Entry point for CLI application."""
    cli()


if __name__ == "__main__":
    main()
