"""Utilities for producing legal protobuf identifiers."""

import re
from typing import Final

INCORRECT_IDENT_CHAR_REGEX: Final = re.compile("[^A-Za-z0-9_]")
IDENT_REGEX: Final = re.compile("[A-Za-z][A-Za-z0-9_]*")


def make_ident(name: str) -> str:
    """Convert an arbitrary name to a legal protobuf identifier.

    Every character outside ``[A-Za-z0-9_]`` is replaced with ``_``. If the
    result still does not start with a letter it is prefixed with ``a``.

    Args:
        name: Name to convert.

    Returns:
        Identifier matching ``[A-Za-z][A-Za-z0-9_]*``.
    """
    replaced = INCORRECT_IDENT_CHAR_REGEX.sub("_", name)
    if IDENT_REGEX.fullmatch(replaced) is None:
        return f"a{replaced}"
    return replaced


def short_name(serial_name: str) -> str:
    """Return the last dot-separated segment of a serial name."""
    return serial_name.rsplit(".", 1)[-1]


def type_ident(serial_name: str) -> str:
    """Derive the identifier of a type or enum entry from its serial name."""
    return make_ident(short_name(serial_name))


def is_full_ident(name: str) -> bool:
    """Check if a name is a protobuf full identifier (``ident { "." ident }``)."""
    return all(IDENT_REGEX.fullmatch(part) for part in name.split("."))


def remove_line_breaks(text: str) -> str:
    """Replace newlines and carriage returns so text fits on a comment line."""
    return text.replace("\n", " ").replace("\r", " ")
