"""Tests for descriptors.py."""

import pytest
from pydantic import ValidationError

from serialproto._classifier import ProtoCategory, classify
from serialproto.descriptors import (
    BYTE,
    INT,
    STRING,
    FieldMetadata,
    IntegerType,
    ProtoNumber,
    ProtoType,
    SerialDescriptor,
    SerialKind,
    byte_array,
    element,
    enum_of,
    list_of,
    map_of,
    open_polymorphic,
    primitive,
    record,
    sealed,
)
from serialproto.exceptions import UnrecognizedDescriptorError

# ============================================================================
# Annotations and Field Metadata
# ============================================================================


def test_proto_number_must_be_positive() -> None:
    """Tests that field number overrides are validated."""
    assert ProtoNumber(number=1).number == 1

    with pytest.raises(ValidationError):
        ProtoNumber(number=0)

    with pytest.raises(ValidationError):
        ProtoNumber(number=-3)


def test_field_metadata_defaults() -> None:
    """Tests metadata of an element without annotations."""
    metadata = FieldMetadata.from_annotations([])

    assert metadata.number is None
    assert metadata.integer_type is IntegerType.DEFAULT


def test_field_metadata_from_annotations() -> None:
    """Tests that known annotations are resolved and others ignored."""
    metadata = FieldMetadata.from_annotations(
        ["unrelated", ProtoNumber(number=7), ProtoType(type=IntegerType.FIXED)]
    )

    assert metadata.number == 7
    assert metadata.integer_type is IntegerType.FIXED


def test_field_metadata_ignores_ambiguous_numbers() -> None:
    """Tests that several number overrides fall back to positional numbering."""
    metadata = FieldMetadata.from_annotations(
        [ProtoNumber(number=3), ProtoNumber(number=4)]
    )

    assert metadata.number is None


def test_field_metadata_first_integer_type_wins() -> None:
    """Tests that the first integer representation is used."""
    metadata = FieldMetadata.from_annotations(
        [ProtoType(type=IntegerType.SIGNED), ProtoType(type=IntegerType.FIXED)]
    )

    assert metadata.integer_type is IntegerType.SIGNED


def test_element_resolves_metadata_once() -> None:
    """Tests that elements carry resolved metadata."""
    field = element("a", INT, ProtoNumber(number=9), optional=True)

    assert field.metadata.number == 9
    assert field.is_optional is True
    assert field.annotations == (ProtoNumber(number=9),)


# ============================================================================
# Builders
# ============================================================================


def test_primitive_rejects_non_primitive_kind() -> None:
    """Tests that primitive() only accepts primitive kinds."""
    with pytest.raises(ValueError, match="not a primitive kind"):
        primitive(SerialKind.LIST)


def test_primitive_default_serial_name() -> None:
    """Tests default serial names of primitives."""
    assert INT.serial_name == "Int"
    assert primitive(SerialKind.LONG, "kotlin.Long").serial_name == "kotlin.Long"


def test_enum_entries_are_objects() -> None:
    """Tests that enum entries carry qualified serial names."""
    letters = enum_of("com.example.Letters", "FIRST", "SECOND")

    assert letters.kind is SerialKind.ENUM
    assert [e.name for e in letters.elements] == ["FIRST", "SECOND"]
    assert [d.serial_name for d in letters.element_descriptors] == [
        "com.example.Letters.FIRST",
        "com.example.Letters.SECOND",
    ]
    assert all(d.kind is SerialKind.OBJECT for d in letters.element_descriptors)


def test_sealed_shape(sealed_class: SerialDescriptor) -> None:
    """Tests that sealed descriptors expose variants through the value element."""
    assert [e.name for e in sealed_class.elements] == ["type", "value"]
    assert sealed_class.get_element_descriptor(0) is STRING

    value = sealed_class.get_element_descriptor(1)
    assert value.kind is SerialKind.CONTEXTUAL
    assert [d.serial_name for d in value.element_descriptors] == [
        "com.example.SealedClass.Impl1",
        "com.example.SealedClass.Impl2",
    ]


def test_open_polymorphic_shape() -> None:
    """Tests that open polymorphic descriptors have an empty contextual value."""
    abstract = open_polymorphic("com.example.Abstract")

    value = abstract.get_element_descriptor(1)
    assert value.kind is SerialKind.CONTEXTUAL
    assert value.elements_count == 0


def test_get_element_descriptor_out_of_range() -> None:
    """Tests indexing past the last element."""
    with pytest.raises(IndexError, match="has no element at index 1"):
        list_of(INT).get_element_descriptor(1)


def test_recursive_descriptor_repr() -> None:
    """Tests that cyclic descriptors can be built and printed."""
    node = record("com.example.Node")
    node.add_element("value", INT).add_element("next", node, optional=True)

    assert node.get_element_descriptor(1) is node
    assert repr(node) == (
        "SerialDescriptor(serial_name='com.example.Node', kind=CLASS, "
        "elements_count=2)"
    )
    assert "com.example.Node" in repr(node.elements[1])


# ============================================================================
# Classification
# ============================================================================


@pytest.mark.parametrize(
    ("descriptor", "category"),
    [
        (INT, ProtoCategory.SCALAR),
        (STRING, ProtoCategory.SCALAR),
        (byte_array(), ProtoCategory.SCALAR),
        (list_of(BYTE, "List<Byte>"), ProtoCategory.SCALAR),
        (list_of(INT), ProtoCategory.REPEATED),
        (map_of(STRING, INT), ProtoCategory.MAP),
        (record("com.example.R"), ProtoCategory.MESSAGE),
        (SerialDescriptor("com.example.O", SerialKind.OBJECT), ProtoCategory.MESSAGE),
        (enum_of("com.example.E", "A"), ProtoCategory.ENUM),
        (open_polymorphic("com.example.P"), ProtoCategory.OPEN),
        (sealed("com.example.S"), ProtoCategory.SEALED),
        (
            SerialDescriptor("com.example.C", SerialKind.CONTEXTUAL),
            ProtoCategory.CONTEXTUAL,
        ),
    ],
)
def test_classify(descriptor: SerialDescriptor, category: ProtoCategory) -> None:
    """Tests classification of every descriptor shape."""
    assert classify(descriptor) is category


def test_classify_unknown_kind() -> None:
    """Tests that an unknown kind is a structural error."""
    descriptor = SerialDescriptor("com.example.Odd", "ODD")  # type: ignore[arg-type]

    with pytest.raises(
        UnrecognizedDescriptorError,
        match="serial name 'com.example.Odd' and kind 'ODD'",
    ):
        classify(descriptor)


def test_classify_list_without_item() -> None:
    """Tests that a list with no item descriptor is a structural error."""
    with pytest.raises(UnrecognizedDescriptorError, match="must have 1 element"):
        classify(SerialDescriptor("Broken", SerialKind.LIST))


def test_category_properties() -> None:
    """Tests which categories are declared as messages."""
    assert ProtoCategory.CONTEXTUAL.is_message
    assert ProtoCategory.SEALED.is_message
    assert not ProtoCategory.ENUM.is_message
    assert not ProtoCategory.MAP.is_message
