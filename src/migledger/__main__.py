"""CLI entry point for migledger.

Operator commands for provisioning the ledger tables, inspecting and
repairing ledger state, and clearing a lock left by a crashed runner.
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

import click

from migledger import __version__
from migledger.errors import MigLedgerError

if TYPE_CHECKING:
    from migledger.models.records import MigrationRecord
    from migledger.target import MigrationTarget

T = TypeVar("T")

config_option = click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)


@asynccontextmanager
async def _open_target(config: Path | None) -> AsyncIterator["MigrationTarget"]:
    from migledger.config.loader import load_config
    from migledger.storage.factory import StorageBackendFactory
    from migledger.target import MigrationTarget
    from migledger.utils.logging import configure_logging

    cfg = load_config(config)
    configure_logging(cfg.logging)

    store = StorageBackendFactory(cfg).create_store()
    await store.initialize()
    try:
        yield MigrationTarget.from_config(store, cfg)
    finally:
        await store.close()


def _run(config: Path | None, action: Callable[["MigrationTarget"], Awaitable[T]]) -> T:
    """Open the target, run one action against it, and map ledger errors to exit code 1."""

    async def main() -> T:
        async with _open_target(config) as target:
            return await action(target)

    try:
        return asyncio.run(main())
    except MigLedgerError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Migration ledger and lock.

    Tracks which schema migrations have been applied to a target and
    serializes migration runs across processes through a shared lock.
    """
    pass


@cli.command()
@config_option
def provision(config: Path | None) -> None:
    """Create the migrations and lock tables if missing."""
    target = _run(config, _provision)
    click.echo(
        f"Tables ready: {target.options.table_name}, {target.options.lock_table_name}"
    )


async def _provision(target: "MigrationTarget") -> "MigrationTarget":
    await target.provision()
    return target


@cli.command()
@config_option
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def deprovision(config: Path | None, yes: bool) -> None:
    """Delete the migrations and lock tables, losing all ledger history."""
    if not yes:
        click.confirm("This deletes all migration history. Continue?", abort=True)
    _run(config, lambda target: target.deprovision())
    click.echo("Tables deleted")


@cli.command()
@config_option
def status(config: Path | None) -> None:
    """Show recorded migrations, the current migration and the lock state."""

    async def collect(target: "MigrationTarget") -> tuple[list["MigrationRecord"], bool]:
        return await target.records(), await target.is_locked()

    records, locked = _run(config, collect)

    if not records:
        click.echo("No migrations recorded.")
    for record in records:
        click.echo(f"  {record.id}  {'DIRTY' if record.dirty else 'done'}")

    dirty = [r.id for r in records if r.dirty]
    if dirty:
        click.echo(f"Current: unavailable (dirty migration {dirty[0]})")
    elif records:
        click.echo(f"Current: {records[-1].id}")
    else:
        click.echo("Current: none")

    click.echo(f"Lock: {'held' if locked else 'free'}")


@cli.command()
@click.argument("migration_id")
@config_option
def add(migration_id: str, config: Path | None) -> None:
    """Record MIGRATION_ID as started (dirty)."""
    _run(config, lambda target: target.add(migration_id))
    click.echo(f"Added {migration_id} (dirty)")


@cli.command()
@click.argument("migration_id")
@config_option
def remove(migration_id: str, config: Path | None) -> None:
    """Delete the record of MIGRATION_ID."""
    _run(config, lambda target: target.remove(migration_id))
    click.echo(f"Removed {migration_id}")


@cli.command()
@click.argument("migration_id")
@config_option
def start(migration_id: str, config: Path | None) -> None:
    """Mark MIGRATION_ID as started (dirty)."""
    _run(config, lambda target: target.start_migration(migration_id))
    click.echo(f"Marked {migration_id} dirty")


@cli.command()
@click.argument("migration_id")
@config_option
def finish(migration_id: str, config: Path | None) -> None:
    """Mark MIGRATION_ID as finished (clean)."""
    _run(config, lambda target: target.finish_migration(migration_id))
    click.echo(f"Marked {migration_id} done")


@cli.command()
@config_option
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def unlock(config: Path | None, yes: bool) -> None:
    """Force release the migration lock.

    Only use this when the holder is known to be gone; a running
    migration loses its exclusivity.
    """
    if not yes:
        click.confirm("Force release the migration lock?", abort=True)
    _run(config, lambda target: target.force_release())
    click.echo("Lock released")


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
