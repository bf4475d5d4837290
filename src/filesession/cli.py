"""Command line interface for inspecting and cleaning a record store.

Provides commands for listing, showing, deleting and sweeping records in a
storage directory.
"""

import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from filesession.config import load_config_from_env
from filesession.errors import StorageConfigurationError
from filesession.observability.logging import setup_logging
from filesession.store import RecordStore

console = Console()


def build_store(directory: Optional[Path]) -> RecordStore:
    """Build a store from the environment, overriding the directory if given.

    Args:
        directory: Storage directory from the --directory flag

    Returns:
        Configured RecordStore

    Raises:
        click.ClickException: If the storage directory cannot be used
    """
    config = load_config_from_env()
    if directory is not None:
        config = config.model_copy(update={"storage_directory": directory})

    try:
        return RecordStore.from_config(config)
    except StorageConfigurationError as e:
        raise click.ClickException(e.message) from e


@click.group()
@click.version_option(version="0.1.0", prog_name="filesession")
@click.option(
    "--directory",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="FILESESSION_STORAGE_DIRECTORY",
    help="Storage directory (defaults to FILESESSION_STORAGE_DIRECTORY)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Log level for store diagnostics",
)
@click.pass_context
def cli(ctx: click.Context, directory: Optional[Path], log_level: str) -> None:
    """filesession - file-backed store for expiring records."""
    setup_logging(log_level=log_level, json_logs=False)
    ctx.obj = build_store(directory)


@cli.command(name="list")
@click.pass_obj
def list_records(store: RecordStore) -> None:
    """List record ids without reading them.

    Examples:
        filesession --directory /tmp/sess list
    """
    for record_id in store.list_ids():
        click.echo(record_id)


@cli.command(name="show")
@click.argument("record_id")
@click.pass_obj
def show_record(store: RecordStore, record_id: str) -> None:
    """Print a record as JSON.

    Reading applies the normal expiry and corruption checks, so an expired
    or unreadable record is removed and reported as missing.
    """
    record = store.read(record_id)
    if record is None:
        raise click.ClickException(f"Record '{record_id}' not found")

    click.echo(json.dumps(record.model_dump(mode="json"), indent=2))


@cli.command(name="delete")
@click.argument("record_id")
@click.pass_obj
def delete_record(store: RecordStore, record_id: str) -> None:
    """Delete a record (a missing record is not an error)."""
    store.delete(record_id)
    console.print(f"[green]Deleted[/green] {record_id}")


@cli.command(name="sweep")
@click.pass_obj
def sweep_records(store: RecordStore) -> None:
    """Remove expired and unreadable records.

    Examples:
        filesession --directory /tmp/sess sweep
    """
    result = store.sweep()

    table = Table(title=f"Sweep of {store.configured_directory}")
    table.add_column("Outcome", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("kept", str(result.kept))
    table.add_row("expired", str(result.expired))
    table.add_row("corrupt", str(result.corrupt))
    table.add_row("skipped", str(result.skipped))
    console.print(table)


def main() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
