"""Shared fixtures for serialproto tests."""

import pytest

from serialproto.descriptors import (
    INT,
    LONG,
    SerialDescriptor,
    element,
    enum_of,
    record,
    sealed,
)
from serialproto.protobuf_schema import ProtoSchemaGenerator

TARGET_PACKAGE = "com.example.scheme"


@pytest.fixture
def generator() -> ProtoSchemaGenerator:
    """Create a Protocol Buffer schema generator with a package."""
    return ProtoSchemaGenerator(package=TARGET_PACKAGE)


@pytest.fixture
def options_class() -> SerialDescriptor:
    """A record with a single int field."""
    return record("com.example.OptionsClass", element("i", INT))


@pytest.fixture
def letters_enum() -> SerialDescriptor:
    """An enumeration with two entries."""
    return enum_of("com.example.Letters", "FIRST", "SECOND")


@pytest.fixture
def sealed_class() -> SerialDescriptor:
    """A sealed hierarchy with two concrete variants."""
    return sealed(
        "com.example.SealedClass",
        record("com.example.SealedClass.Impl1", element("int", INT)),
        record("com.example.SealedClass.Impl2", element("long", LONG)),
    )
