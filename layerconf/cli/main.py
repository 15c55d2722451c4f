"""CLI commands for inspecting layered configuration."""

import json
import sys
import uuid
from pathlib import Path

import click
import structlog

from layerconf import __version__
from layerconf.config.constants import COMPONENT_CLI
from layerconf.config.conversion import split_array
from layerconf.config.error_hints import format_config_error
from layerconf.config.errors import ConfigError, TypeConversionError
from layerconf.config.keys import transform_key
from layerconf.config.loader import ConfigLoader
from layerconf.config.models import KeyFormat, LoadReport, ValueType
from layerconf.config.store import ConfigStore
from layerconf.lifecycle import InstanceLock, InstanceLockError, LockFileError
from layerconf.observability.logging import bind_run_context, configure_logging
from layerconf.settings import get_logging_settings


logger = structlog.get_logger()

# Extra tokens are handed to the config CLI scanner untouched
PASSTHROUGH_SETTINGS = {"ignore_unknown_options": True}


def _echo_error(error: ConfigError, include_hint: bool = True) -> None:
    expected_type = error.expected_type if isinstance(error, TypeConversionError) else None
    record = error.to_dict()
    formatted = format_config_error(
        location=record["loc"],
        message=record["msg"],
        error_type=record["type"],
        expected_type=expected_type,
        include_hint=include_hint,
    )
    click.echo(f"  - {formatted}", err=True)


def _load_store(files: tuple[Path, ...], args: tuple[str, ...]) -> tuple[ConfigLoader, LoadReport]:
    """Load files, environment and CLI tokens into a fresh store."""
    run_id = str(uuid.uuid4())
    bind_run_context(run_id)

    loader = ConfigLoader(ConfigStore(), run_id=run_id)
    report = loader.load(files=files, argv=list(args))

    if report.remaining_args:
        click.echo(
            f"Ignoring unrecognized arguments: {' '.join(report.remaining_args)}",
            err=True,
        )
    return loader, report


file_option = click.option(
    "--file",
    "-f",
    "files",
    multiple=True,
    type=click.Path(path_type=Path),
    help="Configuration file (INI, JSON or YAML). Repeatable; later files win.",
)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--json-logs/--no-json-logs",
    default=True,
    help="Use JSON format for logs (default: true).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress console logging.")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Append log records to this file.",
)
def cli(json_logs: bool, verbose: bool, quiet: bool, log_file: Path | None) -> None:
    """Layered configuration store CLI."""
    settings = get_logging_settings()
    level = "DEBUG" if verbose else settings.effective_level
    try:
        configure_logging(
            level=level,
            json_format=json_logs,
            log_file=log_file or settings.log_file,
            quiet=quiet or settings.be_quiet,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command(context_settings=PASSTHROUGH_SETTINGS)
@click.argument("key")
@click.option("--default", "default", default="", help="Value used when the key is absent.")
@click.option(
    "--type",
    "value_type",
    type=click.Choice([value_type.value for value_type in ValueType]),
    default=ValueType.STRING.value,
    help="Type applied at read time (default: string).",
)
@click.option("--source", "show_source", is_flag=True, help="Print the value's source tag too.")
@file_option
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def get(
    key: str,
    default: str,
    value_type: str,
    show_source: bool,
    files: tuple[Path, ...],
    args: tuple[str, ...],
) -> None:
    """Print the value of KEY after loading every source.

    Extra arguments such as --config-database-host=db1 are applied as
    command-line configuration.
    """
    loader, _ = _load_store(files, args)
    result = loader.store.resolve(key, default, value_type)

    if not result.ok:
        click.echo("Configuration lookup failed:", err=True)
        _echo_error(result.error)
        sys.exit(1)

    value = result.unwrap()
    if value_type == ValueType.ARRAY.value:
        for item in split_array(value):
            click.echo(item)
    else:
        click.echo(value)

    if show_source:
        click.echo(f"source: {result.source}", err=True)


@cli.command(context_settings=PASSTHROUGH_SETTINGS)
@file_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def dump(files: tuple[Path, ...], output_format: str, args: tuple[str, ...]) -> None:
    """Print every key with its value and source."""
    loader, _ = _load_store(files, args)
    entries = loader.store.items()

    if output_format == "json":
        output = {entry.key: {"value": entry.value, "source": entry.source} for entry in entries}
        click.echo(json.dumps(output, indent=2, sort_keys=True))
        return

    for entry in entries:
        click.echo(f"{entry.key}={entry.value}  [{entry.source}]")


@cli.command(context_settings=PASSTHROUGH_SETTINGS)
@file_option
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def validate(files: tuple[Path, ...], args: tuple[str, ...]) -> None:
    """Load every source and check that no key is empty."""
    log = logger.bind(component=COMPONENT_CLI)
    loader, report = _load_store(files, args)
    result = loader.validate()

    problems = [error for error in report.errors if error.error_type != "unsupported_format"]
    if result.ok and not problems:
        click.echo("Configuration is valid!")
        click.echo(f"  Keys: {len(loader.store)}")
        click.echo(f"  Files: {len(report.files_loaded)}")
        if report.fallbacks:
            click.echo(f"  INI fallbacks: {', '.join(report.fallbacks)}")
        return

    log.warning(
        "config_validate_failed",
        empty_key_count=result.error_count,
        load_error_count=len(problems),
    )
    click.echo("Configuration validation failed:", err=True)
    for error in problems:
        _echo_error(error)
    for key in result.empty_keys:
        formatted = format_config_error(
            location=key,
            message="value is empty",
            error_type="empty_value",
            include_hint=True,
        )
        click.echo(f"  - {formatted}", err=True)
    sys.exit(1)


@cli.command()
@click.argument("key")
@click.option(
    "--to",
    "target",
    type=click.Choice([key_format.value for key_format in KeyFormat]),
    default=KeyFormat.DOT.value,
    help="Target notation (default: dot).",
)
def transform(key: str, target: str) -> None:
    """Convert KEY between dot, kebab, snake and env notation."""
    try:
        click.echo(transform_key(key, target))
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
def lock(path: Path) -> None:
    """Acquire an instance lock at PATH, print our PID and release it."""
    instance_lock = InstanceLock(path)
    try:
        with instance_lock:
            click.echo(str(instance_lock.pid))
    except (InstanceLockError, LockFileError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
