"""Configuration loading for the serialproto command line.

Configuration is read from ``[serialproto]`` in ``serialproto.toml`` or from
``[tool.serialproto]`` in ``pyproject.toml``:

```toml
[tool.serialproto]
descriptors = "myapp.schema:DESCRIPTORS"
package = "com.myapp"
output = "protos/myapp.proto"

[tool.serialproto.options]
java_package = "com.myapp.proto"
```
"""

import importlib
import sys
import tomllib
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ._naming import is_full_ident
from .descriptors import SerialDescriptor
from .exceptions import ConfigError

CONFIG_FILE_NAMES: Final = ("serialproto.toml", "pyproject.toml")


class GeneratorConfig(BaseModel):
    """Settings for generating a schema.

    Attributes:
        descriptors: Import path of the root descriptors, ``module:attribute``.
        package: Protobuf package name.
        options: File options written as ``option key = "value";``.
        output: File the schema is written to. Printed to stdout when unset.
    """

    model_config = ConfigDict(extra="forbid")

    descriptors: str | None = None
    package: str | None = None
    options: dict[str, str] = Field(default_factory=dict)
    output: Path | None = None

    @field_validator("descriptors")
    @classmethod
    def validate_descriptors(cls, descriptors: str | None) -> str | None:
        """Check the import path has the form ``module:attribute``."""
        if descriptors is not None:
            module_name, _, attribute = descriptors.partition(":")
            if not module_name or not attribute:
                raise ValueError(
                    f"Invalid descriptors path '{descriptors}'. "
                    "Expected format 'module:attribute'"
                )
        return descriptors

    @field_validator("package")
    @classmethod
    def validate_package(cls, package: str | None) -> str | None:
        """Check the package is a dot-separated sequence of identifiers."""
        if package is not None and not is_full_ident(package):
            raise ValueError(f"Incorrect protobuf package name '{package}'")
        return package


def find_config_file(directory: Path | None = None) -> Path | None:
    """Find the first config file in ``directory`` that has a serialproto section.

    Args:
        directory: Directory to search. Defaults to the current directory.

    Returns:
        Path to the config file, or None if there is none.
    """
    directory = directory or Path.cwd()
    for name in CONFIG_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file() and _read_section(candidate) is not None:
            return candidate
    return None


def load_config(config_path: Path | None = None) -> GeneratorConfig:
    """Load generator settings.

    Args:
        config_path: Explicit config file. When omitted, the current directory
            is searched and defaults are used if nothing is found.

    Returns:
        Validated settings. A relative ``output`` is resolved against the
        config file's directory.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    if config_path is None:
        config_path = find_config_file()
        if config_path is None:
            return GeneratorConfig()

    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    section = _read_section(config_path) or {}
    try:
        config = GeneratorConfig.model_validate(section)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid configuration in {config_path}: {format_validation_error(e)}"
        ) from e

    if config.output is not None and not config.output.is_absolute():
        config = config.model_copy(
            update={"output": config_path.parent / config.output}
        )
    return config


def format_validation_error(error: ValidationError) -> str:
    """Render pydantic errors as ``field: message`` pairs on one line."""
    return "; ".join(
        f"{'.'.join(str(loc) for loc in detail['loc'])}: {detail['msg']}"
        for detail in error.errors()
    )


def _read_section(config_path: Path) -> dict[str, Any] | None:
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    if config_path.name == "pyproject.toml":
        section = data.get("tool", {}).get("serialproto")
    else:
        section = data.get("serialproto")

    if section is not None and not isinstance(section, dict):
        raise ConfigError(f"serialproto section in {config_path} must be a table")
    return section


def load_descriptors(
    import_path: str, search_path: Path | None = None
) -> list[SerialDescriptor]:
    """Import root descriptors from ``module:attribute``.

    The attribute may be a descriptor, a list or tuple of descriptors, or a
    callable returning either.

    Args:
        import_path: Import path of the descriptors.
        search_path: Directory added to the import path so that modules next
            to the config file can be found. Defaults to the current directory.

    Returns:
        Root descriptors.

    Raises:
        ConfigError: If the module or attribute cannot be loaded or does not
            hold descriptors.
    """
    module_name, _, attribute = import_path.partition(":")
    if not module_name or not attribute:
        raise ConfigError(
            f"Invalid descriptors path '{import_path}'. "
            "Expected format 'module:attribute'"
        )

    directory = str(search_path or Path.cwd())
    if directory not in sys.path:
        sys.path.insert(0, directory)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import module '{module_name}': {e}") from e

    try:
        value = getattr(module, attribute)
    except AttributeError as e:
        raise ConfigError(
            f"Module '{module_name}' has no attribute '{attribute}'"
        ) from e

    if callable(value):
        value = value()

    if isinstance(value, SerialDescriptor):
        return [value]
    if isinstance(value, list | tuple) and all(
        isinstance(item, SerialDescriptor) for item in value
    ):
        return list(value)

    raise ConfigError(
        f"'{import_path}' must be a SerialDescriptor or a list of SerialDescriptor, "
        f"got {type(value).__name__}"
    )
