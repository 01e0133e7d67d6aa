"""Intermediate representation of a generated .proto file."""

from typing import Literal, NotRequired, TypedDict


class ProtoField(TypedDict):
    """A message field."""

    name: str
    type: str
    number: int
    label: NotRequired[Literal["required", "optional", "repeated"]]
    comments: list[str]


class ProtoMessage(TypedDict):
    """A message declaration."""

    kind: Literal["message"]
    name: str
    serial_name: str
    fields: list[ProtoField]


class ProtoEnum(TypedDict):
    """An enum declaration.

    Values are kept as ordered (name, number) pairs so that colliding names
    stay visible in the output.
    """

    kind: Literal["enum"]
    name: str
    serial_name: str
    values: list[tuple[str, int]]


class ProtoFile(TypedDict):
    """A complete proto file."""

    syntax: str
    package: NotRequired[str]
    options: dict[str, str]
    definitions: list[ProtoMessage | ProtoEnum]
