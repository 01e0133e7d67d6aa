"""Tests for serialproto CLI."""

from pathlib import Path
from textwrap import dedent

import pytest
from pytest import MonkeyPatch
from typer.testing import CliRunner

from serialproto.cli.main import app

runner = CliRunner()

EXPECTED_SCHEMA = dedent(
    """\
    syntax = "proto2";

    package com.example;
    option java_package = "com.example.proto";

    // serial name 'com.example.Point'
    message Point {
      required int32 x = 1;
      required int32 y = 2;
    }

    // serial name 'com.example.Color'
    enum Color {
      RED = 0;
      GREEN = 1;
    }
    """
)


@pytest.fixture
def module_name(tmp_path: Path) -> str:
    """Unique module name so tests never share an imported module."""
    return f"schema_{tmp_path.name}"


@pytest.fixture
def cli_project(tmp_path: Path, monkeypatch: MonkeyPatch, module_name: str) -> Path:
    """Create a project with a descriptors module and a pyproject config."""
    (tmp_path / f"{module_name}.py").write_text(
        dedent(
            """
            from serialproto.descriptors import INT, element, enum_of, map_of, record

            COLOR = enum_of("com.example.Color", "RED", "GREEN")
            POINT = record(
                "com.example.Point",
                element("x", INT),
                element("y", INT),
                element("shade", COLOR),
            )
            DESCRIPTORS = [
                record("com.example.Point", element("x", INT), element("y", INT)),
                COLOR,
            ]
            BAD = record("com.example.Bad", element("m", map_of(POINT, INT)))
            """
        )
    )
    (tmp_path / "pyproject.toml").write_text(
        dedent(
            f"""
            [project]
            name = "demo"

            [tool.serialproto]
            descriptors = "{module_name}:DESCRIPTORS"
            package = "com.example"

            [tool.serialproto.options]
            java_package = "com.example.proto"
            """
        )
    )
    monkeypatch.chdir(tmp_path)

    return tmp_path


# ============================================================================
# Generate
# ============================================================================


def test_generate_to_stdout(cli_project: Path) -> None:
    """Test generating with settings from pyproject.toml."""
    result = runner.invoke(app, ["generate"])

    assert result.exit_code == 0
    assert result.stdout == EXPECTED_SCHEMA


def test_generate_to_file(cli_project: Path) -> None:
    """Test writing the schema to an output file."""
    output = cli_project / "out" / "schema.proto"

    result = runner.invoke(app, ["generate", "--output", str(output)])

    assert result.exit_code == 0
    assert "✓" in result.stdout
    assert "Wrote Protocol Buffer schema" in result.stdout
    assert output.read_text(encoding="utf-8") == EXPECTED_SCHEMA


def test_generate_overrides_config(cli_project: Path, module_name: str) -> None:
    """Test that command-line values take precedence over the config."""
    result = runner.invoke(
        app,
        [
            "generate",
            "--descriptors",
            f"{module_name}:COLOR",
            "--package",
            "other.pkg",
            "-O",
            "java_package=other.proto",
            "-O",
            "optimize_for=SPEED",
        ],
    )

    assert result.exit_code == 0
    assert "package other.pkg;" in result.stdout
    assert 'option java_package = "other.proto";' in result.stdout
    assert 'option optimize_for = "SPEED";' in result.stdout
    assert "message Point" not in result.stdout
    assert "enum Color {" in result.stdout


def test_generate_with_explicit_config(tmp_path: Path, module_name: str) -> None:
    """Test reading settings from a serialproto.toml given with --config."""
    (tmp_path / f"{module_name}.py").write_text(
        dedent(
            """
            from serialproto.descriptors import STRING, element, record

            def build():
                return record("com.example.Note", element("text", STRING))
            """
        )
    )
    config_file = tmp_path / "serialproto.toml"
    config_file.write_text(f'[serialproto]\ndescriptors = "{module_name}:build"\n')

    result = runner.invoke(app, ["generate", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "message Note {" in result.stdout
    assert "package" not in result.stdout


def test_generate_invalid_package(cli_project: Path) -> None:
    """Test that an invalid package name fails."""
    result = runner.invoke(app, ["generate", "--package", "first.1digit"])

    assert result.exit_code == 1
    assert "✗" in result.stdout
    assert "Incorrect protobuf package name" in " ".join(result.stdout.split())


def test_generate_bad_option(cli_project: Path) -> None:
    """Test that options without a value separator are usage errors."""
    result = runner.invoke(app, ["generate", "-O", "java_package"])

    assert result.exit_code == 2


def test_generate_schema_error(cli_project: Path, module_name: str) -> None:
    """Test that protobuf rule violations are reported."""
    result = runner.invoke(app, ["generate", "-d", f"{module_name}:BAD"])

    assert result.exit_code == 1
    output = " ".join(result.stdout.split())
    assert "Generation error" in output
    assert "Illegal type for map key" in output


def test_generate_missing_attribute(cli_project: Path, module_name: str) -> None:
    """Test that a missing descriptors attribute is reported."""
    result = runner.invoke(app, ["generate", "-d", f"{module_name}:MISSING"])

    assert result.exit_code == 1
    assert "has no attribute" in " ".join(result.stdout.split())


def test_generate_without_descriptors(
    tmp_path: Path, monkeypatch: MonkeyPatch
) -> None:
    """Test that generation needs descriptors from somewhere."""
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["generate"])

    assert result.exit_code == 1
    assert "No descriptors configured" in result.stdout


def test_generate_invalid_config(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    """Test that invalid config values are reported."""
    (tmp_path / "serialproto.toml").write_text('[serialproto]\nunknown = "x"\n')
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["generate"])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.stdout


# ============================================================================
# Types
# ============================================================================


def test_types(cli_project: Path) -> None:
    """Test listing the declared types."""
    result = runner.invoke(app, ["types"])

    assert result.exit_code == 0
    assert "Custom Types" in result.stdout
    assert "Point" in result.stdout
    assert "Color" in result.stdout
    assert "ENUM" in result.stdout
    assert "Total: 2 types" in result.stdout


def test_types_with_collisions(cli_project: Path, module_name: str) -> None:
    """Test that deduplicated identifiers are shown."""
    (cli_project / f"dup_{module_name}.py").write_text(
        dedent(
            """
            from serialproto.descriptors import record

            ROOTS = [record("a.Item"), record("b.Item")]
            """
        )
    )

    result = runner.invoke(app, ["types", "-d", f"dup_{module_name}:ROOTS"])

    assert result.exit_code == 0
    assert "Item_2" in result.stdout
    assert "Total: 2 types" in result.stdout


def test_types_empty(cli_project: Path, module_name: str) -> None:
    """Test listing when only scalars are given."""
    (cli_project / f"scalars_{module_name}.py").write_text(
        "from serialproto.descriptors import INT\n\nROOTS = [INT]\n"
    )

    result = runner.invoke(app, ["types", "-d", f"scalars_{module_name}:ROOTS"])

    assert result.exit_code == 0
    assert "No custom types found" in result.stdout
