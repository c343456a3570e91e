"""Inspect and edit a file-backed settings store from the command line."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import click
from rich import box
from rich.console import Console
from rich.table import Table

from ..domain.exceptions import SerializationError, StoreError
from ..infrastructure.config import ENV_STORE_PATH
from ..infrastructure.file_store import FileSettingsStore
from ..infrastructure.serialization import detect_and_decode

BLOB_PREVIEW_BYTES = 16


def describe_type(value: Any) -> str:
    """Name the primitive type a stored value has."""
    if isinstance(value, bytes):
        return "data"
    if isinstance(value, datetime):
        return "date"
    if isinstance(value, bool):
        return "bool"
    return type(value).__name__


def render_value(value: Any) -> str:
    """Render a stored value for humans; blobs are decoded when they hold JSON or msgpack."""
    if isinstance(value, bytes):
        try:
            decoded = detect_and_decode(value, Any)
        except SerializationError:
            preview = value[:BLOB_PREVIEW_BYTES].hex()
            suffix = "..." if len(value) > BLOB_PREVIEW_BYTES else ""
            return f"<{len(value)} bytes: {preview}{suffix}>"
        return json.dumps(decoded, default=str)
    if isinstance(value, datetime):
        return value.isoformat()
    return repr(value) if isinstance(value, str) else str(value)


def to_json_value(value: Any) -> Any:
    """Convert a stored value to something ``json.dumps`` accepts."""
    if isinstance(value, bytes):
        return {"bytes": len(value), "hex": value.hex()}
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list):
        return [to_json_value(item) for item in value]
    return value


def _open_store(path: Path) -> FileSettingsStore:
    try:
        return FileSettingsStore(path)
    except StoreError as e:
        raise click.ClickException(e.message) from e


@click.group()
@click.option(
    "--store",
    "-s",
    "store_path",
    envvar=ENV_STORE_PATH,
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Settings file to inspect",
)
@click.pass_context
def cli(ctx: click.Context, store_path: Path):
    """Inspect a typed-prefs settings file."""
    ctx.obj = {"store_path": store_path, "console": Console()}


@cli.command("list")
@click.option("--prefix", "-p", default="", help="Only show keys starting with this prefix")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_keys(ctx: click.Context, prefix: str, as_json: bool):
    """List stored keys with their type and value."""
    store = _open_store(ctx.obj["store_path"])
    entries = {
        key: value
        for key, value in sorted(store.dictionary_representation().items())
        if key.startswith(prefix)
    }

    if as_json:
        click.echo(json.dumps({key: to_json_value(v) for key, v in entries.items()}, indent=2))
        return

    console: Console = ctx.obj["console"]
    if not entries:
        console.print("[yellow]No settings stored[/yellow]")
        return

    table = Table(title=str(store.path), box=box.ROUNDED)
    table.add_column("Key", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Value")
    for key, value in entries.items():
        table.add_row(key, describe_type(value), render_value(value))
    console.print(table)


@cli.command("get")
@click.argument("key")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def get_key(ctx: click.Context, key: str, as_json: bool):
    """Show the value stored under KEY."""
    store = _open_store(ctx.obj["store_path"])
    value = store.get(key)
    if value is None:
        click.echo(f"Key '{key}' is not set", err=True)
        ctx.exit(1)

    if as_json:
        payload = {"key": key, "type": describe_type(value), "value": to_json_value(value)}
        click.echo(json.dumps(payload))
    else:
        click.echo(render_value(value))


@cli.command("delete")
@click.argument("key")
@click.pass_context
def delete_key(ctx: click.Context, key: str):
    """Remove KEY so settings bound to it fall back to their initial value."""
    store = _open_store(ctx.obj["store_path"])
    if not store.contains(key):
        click.echo(f"Key '{key}' is not set", err=True)
        ctx.exit(1)
    try:
        store.remove(key)
    except StoreError as e:
        raise click.ClickException(e.message) from e
    ctx.obj["console"].print(f"[green]Removed[/green] {key}")


@cli.command("clear")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def clear_store(ctx: click.Context, yes: bool):
    """Remove every key from the store."""
    store = _open_store(ctx.obj["store_path"])
    if not yes:
        click.confirm(f"Remove all {len(store.keys())} keys from {store.path}?", abort=True)
    try:
        removed = store.wipe()
    except StoreError as e:
        raise click.ClickException(e.message) from e
    ctx.obj["console"].print(f"[green]Removed {removed} keys[/green]")


def main():
    """Entry point for the ``typed-prefs`` console script."""
    cli()


if __name__ == "__main__":
    main()
