"""Command-line interface for serialproto."""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from .._collector import collect_custom_types
from ..config import load_descriptors
from ..exceptions import ConfigError, ProtoGenerationError
from ..protobuf_schema import ProtoExporter
from ._helpers import (
    configure_logging,
    console,
    parse_options,
    print_error,
    print_success,
    resolve_settings,
)

app = typer.Typer(help="Generate proto2 schemas from serial descriptors")

DescriptorsOption = Annotated[
    str | None,
    typer.Option(
        ...,
        "--descriptors",
        "-d",
        help="Root descriptors as module:attribute",
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to config file (pyproject.toml or serialproto.toml)",
    ),
]

VerboseOption = Annotated[
    bool,
    typer.Option(..., "--verbose", "-v", help="Show debug logging on stderr"),
]


@app.command()
def generate(  # noqa: PLR0913
    descriptors: DescriptorsOption = None,
    package: Annotated[
        str | None,
        typer.Option(..., "--package", "-p", help="Protobuf package name"),
    ] = None,
    option: Annotated[
        list[str] | None,
        typer.Option(
            ...,
            "--option",
            "-O",
            help="File option as key=value. May be repeated.",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(..., "--output", "-o", help="Output file (default: stdout)"),
    ] = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Generate a proto2 schema.

    Examples:
        # Print the schema for the descriptors in myapp/schema.py
        serialproto generate -d myapp.schema:DESCRIPTORS -p com.myapp

        # Write it to a file with a java_package option
        serialproto generate -d myapp.schema:DESCRIPTORS -O java_package=com.myapp -o out.proto
    """  # noqa: E501
    configure_logging(verbose)
    try:
        settings, search_path = resolve_settings(
            config, descriptors, package, parse_options(option), output
        )
        assert settings.descriptors is not None
        roots = load_descriptors(settings.descriptors, search_path)

        exporter = ProtoExporter(package=settings.package, options=settings.options)
        proto_content = exporter.export_schema(roots, settings.output)

        if settings.output:
            print_success(f"Wrote Protocol Buffer schema to {settings.output}")
        else:
            typer.echo(proto_content, nl=False)

    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(1) from e
    except ProtoGenerationError as e:
        print_error(f"Generation error: {e}")
        raise typer.Exit(1) from e
    except typer.Exit:
        raise
    except typer.BadParameter:
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(1) from e


@app.command()
def types(
    descriptors: DescriptorsOption = None,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """List the messages and enums a schema would declare."""
    configure_logging(verbose)
    try:
        settings, search_path = resolve_settings(config, descriptors)
        assert settings.descriptors is not None
        declarations = collect_custom_types(
            load_descriptors(settings.descriptors, search_path)
        )

        if not declarations:
            console.print("[yellow]No custom types found[/yellow]")
            return

        table = Table(title="Custom Types")
        table.add_column("Identifier", style="cyan")
        table.add_column("Serial Name", style="green")
        table.add_column("Kind")

        for declaration in declarations:
            table.add_row(
                declaration.name,
                escape(declaration.descriptor.serial_name),
                declaration.descriptor.kind.name,
            )

        console.print(table)
        console.print(f"\n[dim]Total: {len(declarations)} types[/dim]")

    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(1) from e
    except ProtoGenerationError as e:
        print_error(f"Generation error: {e}")
        raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
