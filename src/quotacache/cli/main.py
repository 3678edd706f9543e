"""
CLI for quotacache.

Commands:
    quotacache set KEY VALUE - Store a value, optionally with a TTL
    quotacache get KEY - Print a stored value
    quotacache remove KEY - Remove a value
    quotacache flush - Remove all (or only expired) values of a bucket
    quotacache keys - List the keys of a bucket
    quotacache stats - Show bucket and store usage
    quotacache config - Show current configuration
    quotacache version - Print version
"""

from __future__ import annotations

from typing import Annotated, NoReturn, Optional

import orjson
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from quotacache import __version__
from quotacache.cache import CacheBucket, CacheRegistry
from quotacache.config import Settings, clear_settings_cache, get_settings
from quotacache.exceptions import InvalidKeyError, InvalidNamespaceError
from quotacache.logging import setup_logging
from quotacache.stores import SQLiteStore

app = typer.Typer(
    name="quotacache",
    help="quotacache - TTL key-value cache over a size-limited SQLite store",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)

BucketOption = Annotated[
    str,
    typer.Option("--bucket", "-b", help="Bucket name (default bucket if omitted)"),
]


def _load_settings() -> Settings:
    """Load settings, exiting with a message if they are invalid."""
    try:
        clear_settings_cache()
        return get_settings()
    except ValidationError as e:
        error_console.print(f"[red]Error:[/red] Configuration is invalid.\n{e}")
        raise typer.Exit(1)


def _open_bucket(bucket: str) -> tuple[SQLiteStore, CacheBucket]:
    settings = _load_settings()
    setup_logging(settings.LOG_LEVEL, log_file=settings.LOG_FILE)
    store = SQLiteStore(settings.STORE_PATH, capacity=settings.STORE_CAPACITY)
    registry = CacheRegistry.from_settings(store, settings)
    if not registry.supported():
        store.close()
        error_console.print(
            f"[red]Error:[/red] Store at {settings.STORE_PATH} is not usable."
        )
        raise typer.Exit(1)
    try:
        return store, registry.bucket(bucket)
    except InvalidNamespaceError as e:
        store.close()
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)


def _reject_key(error: InvalidKeyError) -> NoReturn:
    error_console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(2)


@app.command("set")
def set_value(
    key: Annotated[str, typer.Argument(help="Cache key")],
    value: Annotated[str, typer.Argument(help="Value to store")],
    ttl: Annotated[
        Optional[int],
        typer.Option("--ttl", "-t", help="Time units until the value expires"),
    ] = None,
    bucket: BucketOption = "",
    as_json: Annotated[
        bool,
        typer.Option("--json", "-j", help="Parse VALUE as JSON before storing"),
    ] = False,
) -> None:
    """Store a value."""
    payload: object = value
    if as_json:
        try:
            payload = orjson.loads(value)
        except orjson.JSONDecodeError as e:
            error_console.print(f"[red]Error:[/red] VALUE is not valid JSON: {e}")
            raise typer.Exit(2)

    store, cache = _open_bucket(bucket)
    try:
        stored = cache.set(key, payload, ttl)
    except InvalidKeyError as e:
        _reject_key(e)
    finally:
        store.close()

    if not stored:
        error_console.print(f"[red]Could not store[/red] {key!r}")
        raise typer.Exit(1)
    console.print(f"[green]Stored[/green] {key!r}")


@app.command("get")
def get_value(
    key: Annotated[str, typer.Argument(help="Cache key")],
    bucket: BucketOption = "",
) -> None:
    """Print a stored value as JSON."""
    store, cache = _open_bucket(bucket)
    try:
        value = cache.get(key)
    except InvalidKeyError as e:
        _reject_key(e)
    finally:
        store.close()

    if value is None:
        error_console.print(f"[yellow]Not found:[/yellow] {key!r}")
        raise typer.Exit(1)
    console.print_json(orjson.dumps(value).decode("utf-8"))


@app.command()
def remove(
    key: Annotated[str, typer.Argument(help="Cache key")],
    bucket: BucketOption = "",
) -> None:
    """Remove a value."""
    store, cache = _open_bucket(bucket)
    try:
        cache.remove(key)
    except InvalidKeyError as e:
        _reject_key(e)
    finally:
        store.close()
    console.print(f"Removed {key!r}")


@app.command()
def flush(
    bucket: BucketOption = "",
    expired: Annotated[
        bool,
        typer.Option("--expired", "-e", help="Only remove expired values"),
    ] = False,
) -> None:
    """Remove the values of a bucket without touching other data."""
    store, cache = _open_bucket(bucket)
    try:
        if expired:
            cache.flush_expired()
        else:
            cache.flush()
    finally:
        store.close()
    console.print("Flushed expired values" if expired else "Flushed all values")


@app.command()
def keys(bucket: BucketOption = "") -> None:
    """List the keys stored in a bucket."""
    store, cache = _open_bucket(bucket)
    try:
        names = sorted(cache.keys())
    finally:
        store.close()

    for name in names:
        console.print(name, markup=False, highlight=False)


@app.command()
def stats(bucket: BucketOption = "") -> None:
    """Show bucket entry counts and store usage."""
    store, cache = _open_bucket(bucket)
    try:
        summary = cache.stats()
        usage = store.usage
        capacity = store.capacity
    finally:
        store.close()

    table = Table(title="Bucket", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for name, value in summary.to_dict().items():
        table.add_row(name, str(value) if value != "" else "<default>")
    table.add_row("store usage", f"{usage} / {capacity}")
    console.print(table)


@app.command()
def config() -> None:
    """Show current configuration."""
    settings = _load_settings()

    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for key, value in settings.display().items():
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def version() -> None:
    """Print the version number."""
    console.print(f"quotacache version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
