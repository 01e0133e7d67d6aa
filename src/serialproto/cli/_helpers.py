"""Helper functions for the serialproto CLI."""

import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from ..config import (
    GeneratorConfig,
    find_config_file,
    format_validation_error,
    load_config,
)
from ..exceptions import ConfigError

console = Console()
err_console = Console(stderr=True)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]✗ Error:[/red] {escape(message)}")


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr through rich so stdout stays clean."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def parse_options(values: list[str] | None) -> dict[str, str]:
    """Parse ``key=value`` pairs given on the command line.

    Raises:
        typer.BadParameter: If a value has no ``=`` or an empty key.
    """
    options: dict[str, str] = {}
    for value in values or []:
        key, sep, option_value = value.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(
                f"Invalid option '{value}'. Expected format 'key=value'",
                param_hint="--option",
            )
        options[key.strip()] = option_value
    return options


def resolve_settings(
    config_path: Path | None,
    descriptors: str | None = None,
    package: str | None = None,
    options: dict[str, str] | None = None,
    output: Path | None = None,
) -> tuple[GeneratorConfig, Path]:
    """Merge command-line values over the config file.

    Returns:
        The merged settings and the directory descriptor modules are imported
        from.

    Raises:
        ConfigError: If the config is invalid or no descriptors are configured.
    """
    config_path = config_path or find_config_file()
    settings = load_config(config_path) if config_path else GeneratorConfig()
    search_path = config_path.parent if config_path else Path.cwd()

    merged_options = {**settings.options, **(options or {})}
    try:
        settings = GeneratorConfig.model_validate(
            {
                "descriptors": descriptors or settings.descriptors,
                "package": package if package is not None else settings.package,
                "options": merged_options,
                "output": output or settings.output,
            }
        )
    except ValidationError as e:
        raise ConfigError(format_validation_error(e)) from e

    if settings.descriptors is None:
        raise ConfigError(
            "No descriptors configured. Pass --descriptors module:attribute or set "
            "'descriptors' in [tool.serialproto]"
        )
    return settings, search_path
