"""``global-option`` command line interface.

Every command is a thin wrapper over :class:`OptionStore`; the CLI turns
False results into readable errors.
"""

from __future__ import annotations

import csv
import io
import json
import pprint
from typing import Any, Optional

import click
import yaml

from .config import BaseConfig
from .context import OptionsContext, create_options_context
from .domain.repositories.option import OptionQuery, OptionRow
from .errors import ProtectedOptionError, TraversalError
from .logging_config import setup_logging
from .serialization import maybe_unserialize, same_value
from .services.traverser import DataTraverser, parse_key_path

DEFAULT_LIST_FIELDS = ("option_name", "option_value")
LIST_FIELDS = ("option_id", "option_name", "option_value", "autoload", "size_bytes")


def _context(ctx: click.Context) -> OptionsContext:
    return ctx.find_object(OptionsContext)


def read_value(raw: str, fmt: str) -> Any:
    """Decode a value passed on the command line."""
    if fmt == "json":
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise click.ClickException(f"Invalid JSON: {raw}") from exc
    return raw


def render_value(value: Any, fmt: str) -> str:
    if fmt == "json":
        return json.dumps(value, default=str)
    if fmt == "yaml":
        return yaml.safe_dump(value, default_flow_style=False, sort_keys=False).rstrip("\n")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return pprint.pformat(value)
    return str(value)


def _read_stdin() -> str:
    stream = click.get_text_stream("stdin")
    if stream.isatty():
        return ""
    return stream.read()


def _value_from_arg_or_stdin(value: Optional[str]) -> str:
    if value is not None:
        return value
    return _read_stdin()


def _row_fields(row: OptionRow) -> dict[str, Any]:
    decoded = maybe_unserialize(row.value)
    return {
        "option_id": row.id,
        "option_name": row.name,
        "option_value": decoded if isinstance(decoded, str) else row.value,
        "autoload": row.autoload,
        "size_bytes": row.size_bytes,
    }


def render_table(items: list[dict[str, Any]], fields: list[str]) -> str:
    widths = {f: len(f) for f in fields}
    for item in items:
        for f in fields:
            widths[f] = max(widths[f], len(str(item.get(f, ""))))
    border = "+" + "+".join("-" * (widths[f] + 2) for f in fields) + "+"

    def line(values: dict[str, Any]) -> str:
        return "|" + "|".join(f" {str(values.get(f, '')):<{widths[f]}} " for f in fields) + "|"

    lines = [border, line({f: f for f in fields}), border]
    lines.extend(line(item) for item in items)
    lines.append(border)
    return "\n".join(lines)


def render_csv(items: list[dict[str, Any]], fields: list[str]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fields, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    writer.writerows(items)
    return buffer.getvalue().rstrip("\n")


def _success(message: str) -> None:
    click.echo(f"Success: {message}")


@click.group(name="global-option")
@click.option(
    "--database-url",
    envvar="GLOBAL_OPTIONS_DATABASE_URL",
    default=None,
    help="SQLAlchemy URL of the options database.",
)
@click.pass_context
def cli(ctx: click.Context, database_url: Optional[str]) -> None:
    """Retrieve and set global options."""

    if isinstance(ctx.obj, OptionsContext):
        return
    config = BaseConfig()
    if database_url:
        config.DATABASE_URL = database_url
    setup_logging(config)
    ctx.obj = create_options_context(config)


@cli.command("get")
@click.argument("key")
@click.option("--format", "fmt", type=click.Choice(["plaintext", "json", "yaml"]), default="plaintext")
@click.pass_context
def get_command(ctx: click.Context, key: str, fmt: str) -> None:
    """Get the value for a global option."""

    value = _context(ctx).options.get(key, False)
    if value is False:
        raise click.ClickException(f"Could not get '{key}' option. Does it exist?")
    click.echo(render_value(value, fmt))


@cli.command("add")
@click.argument("key")
@click.argument("value", required=False)
@click.option("--format", "fmt", type=click.Choice(["plaintext", "json"]), default="plaintext")
@click.option("--autoload", type=click.Choice(["yes", "no"]), default=None)
@click.pass_context
def add_command(ctx: click.Context, key: str, value: Optional[str], fmt: str, autoload: Optional[str]) -> None:
    """Add a new global option value. Errors if it already exists."""

    parsed = read_value(_value_from_arg_or_stdin(value), fmt)
    try:
        added = _context(ctx).options.add(key, parsed, "yes" if autoload == "yes" else "no")
    except ProtectedOptionError as exc:
        raise click.ClickException(str(exc)) from exc
    if not added:
        raise click.ClickException(f"Could not add global option '{key}'. Does it already exist?")
    _success(f"Added '{key}' global option.")


@cli.command("list")
@click.option("--search", default=None, help="Name pattern; * and ? are wildcards.")
@click.option("--exclude", default=None, help="Name pattern to leave out.")
@click.option("--autoload", type=click.Choice(["on", "off"]), default=None)
@click.option("--transients/--no-transients", default=False, help="List only transients, or none of them.")
@click.option("--field", default=None, help="Print only this field.")
@click.option("--fields", default=None, help="Comma separated fields to show.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["table", "json", "csv", "count", "yaml", "total_bytes"]),
    default="table",
)
@click.option(
    "--orderby",
    type=click.Choice(["option_id", "option_name", "option_value"]),
    default="option_id",
)
@click.option("--order", type=click.Choice(["asc", "desc"]), default="asc")
@click.pass_context
def list_command(
    ctx: click.Context,
    search: Optional[str],
    exclude: Optional[str],
    autoload: Optional[str],
    transients: bool,
    field: Optional[str],
    fields: Optional[str],
    fmt: str,
    orderby: str,
    order: str,
) -> None:
    """List global options and their values."""

    query = OptionQuery(search=search, exclude=exclude, autoload=autoload, transients=transients)
    rows = _context(ctx).repository.scan(query)

    if fmt == "total_bytes":
        click.echo(str(sum(row.size_bytes for row in rows)))
        return
    if fmt == "count":
        click.echo(str(len(rows)))
        return

    items = [_row_fields(row) for row in rows]
    if orderby != "option_id":
        items.sort(key=lambda item: str(item[orderby]), reverse=order == "desc")
    elif order == "desc":
        items.reverse()

    if field:
        if field not in LIST_FIELDS:
            raise click.ClickException(f"Invalid field: {field}.")
        for item in items:
            click.echo(str(item[field]))
        return

    selected = fields.split(",") if fields else list(DEFAULT_LIST_FIELDS)
    invalid = [name for name in selected if name not in LIST_FIELDS]
    if invalid:
        raise click.ClickException(f"Invalid field: {', '.join(invalid)}.")

    projected = [{name: item[name] for name in selected} for item in items]
    if fmt == "json":
        click.echo(json.dumps(projected, default=str))
    elif fmt == "yaml":
        click.echo(yaml.safe_dump(projected, default_flow_style=False, sort_keys=False).rstrip("\n"))
    elif fmt == "csv":
        click.echo(render_csv(projected, selected))
    else:
        click.echo(render_table(projected, selected))


@click.command("update")
@click.argument("key")
@click.argument("value", required=False)
@click.option("--autoload", type=click.Choice(["yes", "no"]), default=None)
@click.option("--format", "fmt", type=click.Choice(["plaintext", "json"]), default="plaintext")
@click.pass_context
def update_command(ctx: click.Context, key: str, value: Optional[str], autoload: Optional[str], fmt: str) -> None:
    """Update a global option value, adding it when missing."""

    options = _context(ctx).options
    parsed = read_value(_value_from_arg_or_stdin(value), fmt)
    try:
        parsed = options.sanitize(key, parsed)
        old_value = options.sanitize(key, options.get(key))
        if same_value(parsed, old_value) and autoload is None:
            _success(f"Value passed for '{key}' global option is unchanged.")
            return
        updated = options.update(key, parsed, autoload)
    except ProtectedOptionError as exc:
        raise click.ClickException(str(exc)) from exc
    if not updated:
        raise click.ClickException(f"Could not update global option '{key}'.")
    _success(f"Updated '{key}' global option.")


cli.add_command(update_command)
cli.add_command(update_command, name="set")


@cli.command("delete")
@click.argument("key")
@click.pass_context
def delete_command(ctx: click.Context, key: str) -> None:
    """Delete a global option."""

    try:
        deleted = _context(ctx).options.delete(key)
    except ProtectedOptionError as exc:
        raise click.ClickException(str(exc)) from exc
    if not deleted:
        raise click.ClickException(f"Could not delete '{key}' global option. Does it exist?")
    _success(f"Deleted '{key}' global option.")


@cli.command("pluck")
@click.argument("key")
@click.argument("key_path", nargs=-1, required=True)
@click.option("--format", "fmt", type=click.Choice(["plaintext", "json", "yaml"]), default="plaintext")
@click.pass_context
def pluck_command(ctx: click.Context, key: str, key_path: tuple[str, ...], fmt: str) -> None:
    """Get a nested value from a global option."""

    value = _context(ctx).options.get(key, False)
    if value is False:
        ctx.exit(1)
    try:
        value = DataTraverser(value).get(parse_key_path(key_path))
    except TraversalError:
        ctx.exit(1)
    click.echo(render_value(value, fmt))


@cli.command("patch")
@click.argument("action", type=click.Choice(["insert", "update", "delete"]))
@click.argument("key")
@click.argument("key_path", nargs=-1, required=True)
@click.option("--format", "fmt", type=click.Choice(["plaintext", "json"]), default="plaintext")
@click.pass_context
def patch_command(ctx: click.Context, action: str, key: str, key_path: tuple[str, ...], fmt: str) -> None:
    """Update a nested value in a global option.

    For insert and update the new value is the last KEY_PATH item, or stdin
    when stdin is piped.
    """

    segments = list(key_path)
    patch_value: Any = None
    if action != "delete":
        stdin_value = _read_stdin()
        if stdin_value:
            patch_value = read_value(stdin_value.strip(), fmt)
        elif len(segments) > 1:
            patch_value = read_value(segments.pop(), fmt)
        else:
            raise click.ClickException("Please provide a value to patch.")

    options = _context(ctx).options
    try:
        old_value = options.sanitize(key, options.get(key))
        traverser = DataTraverser(old_value)
        getattr(traverser, action)(parse_key_path(segments), patch_value)
        patched = options.sanitize(key, traverser.value())
        if same_value(patched, old_value):
            _success(f"Value passed for '{key}' global option is unchanged.")
            return
        updated = options.update(key, patched)
    except TraversalError as exc:
        raise click.ClickException(str(exc)) from exc
    except ProtectedOptionError as exc:
        raise click.ClickException(str(exc)) from exc
    if not updated:
        raise click.ClickException(f"Could not update global option '{key}'.")
    _success(f"Updated '{key}' global option.")


def main() -> None:  # pragma: no cover - console entry point
    cli(prog_name="global-option")


if __name__ == "__main__":  # pragma: no cover
    main()
