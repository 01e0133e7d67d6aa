"""Structural type descriptors consumed by the schema generator.

A descriptor describes the shape of one serializable type: its kind, its serial
name, and its ordered elements. Descriptors are read-only as far as the
generator is concerned; the builder functions at the bottom of this module are
the supported way to construct them.

Example:
    ```python
    from serialproto.descriptors import INT, STRING, element, record

    user = record(
        "com.example.User",
        element("id", INT),
        element("name", STRING, optional=True),
    )
    ```
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field


class SerialKind(Enum):
    """Closed set of descriptor kinds."""

    BOOLEAN = "BOOLEAN"
    BYTE = "BYTE"
    CHAR = "CHAR"
    SHORT = "SHORT"
    INT = "INT"
    LONG = "LONG"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    STRING = "STRING"
    LIST = "LIST"
    MAP = "MAP"
    CLASS = "CLASS"
    OBJECT = "OBJECT"
    ENUM = "ENUM"
    OPEN = "OPEN"
    SEALED = "SEALED"
    CONTEXTUAL = "CONTEXTUAL"

    @property
    def is_primitive(self: Self) -> bool:
        """Whether this kind is a primitive scalar."""
        return self in _PRIMITIVE_KINDS

    def __str__(self: Self) -> str:
        """Return the kind name as used in error messages."""
        return self.name


_PRIMITIVE_KINDS = frozenset(
    {
        SerialKind.BOOLEAN,
        SerialKind.BYTE,
        SerialKind.CHAR,
        SerialKind.SHORT,
        SerialKind.INT,
        SerialKind.LONG,
        SerialKind.FLOAT,
        SerialKind.DOUBLE,
        SerialKind.STRING,
    }
)


class IntegerType(Enum):
    """Wire representation of 32 and 64-bit integers."""

    DEFAULT = "DEFAULT"
    SIGNED = "SIGNED"
    FIXED = "FIXED"


class ProtoNumber(BaseModel):
    """Annotation overriding the protobuf field number of an element."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(gt=0)


class ProtoType(BaseModel):
    """Annotation selecting the integer representation of an element."""

    model_config = ConfigDict(frozen=True)

    type: IntegerType = IntegerType.DEFAULT


class FieldMetadata(BaseModel):
    """Protobuf-relevant metadata resolved from element annotations.

    Attributes:
        number: Explicit field number, or None to number by position.
        integer_type: Representation used for 32 and 64-bit integers.
    """

    model_config = ConfigDict(frozen=True)

    number: int | None = Field(default=None, gt=0)
    integer_type: IntegerType = IntegerType.DEFAULT

    @classmethod
    def from_annotations(cls, annotations: Iterable[Any]) -> Self:
        """Resolve metadata from an element's annotations.

        An explicit number is only used when exactly one ``ProtoNumber`` is
        attached. The first ``ProtoType`` wins. Other annotations are ignored.

        Args:
            annotations: Annotations attached to the element.

        Returns:
            Resolved field metadata.
        """
        items = list(annotations)
        numbers = [a.number for a in items if isinstance(a, ProtoNumber)]
        integer_types = [a.type for a in items if isinstance(a, ProtoType)]
        return cls(
            number=numbers[0] if len(numbers) == 1 else None,
            integer_type=integer_types[0] if integer_types else IntegerType.DEFAULT,
        )


@dataclass(eq=False, repr=False)
class ElementDescriptor:
    """One element of a composite descriptor.

    Attributes:
        name: Element name as declared by the serializable type.
        descriptor: Descriptor of the element's type.
        annotations: Annotations attached to the element.
        is_optional: Whether the element has a default value and may be omitted.
        metadata: Field metadata resolved from ``annotations``.
    """

    name: str
    descriptor: "SerialDescriptor"
    annotations: tuple[Any, ...] = ()
    is_optional: bool = False
    metadata: FieldMetadata = field(init=False)

    def __post_init__(self: Self) -> None:
        self.annotations = tuple(self.annotations)
        self.metadata = FieldMetadata.from_annotations(self.annotations)

    def __repr__(self: Self) -> str:
        return (
            f"ElementDescriptor(name={self.name!r}, "
            f"serial_name={self.descriptor.serial_name!r})"
        )


@dataclass(eq=False, repr=False)
class SerialDescriptor:
    """Shape of one serializable type.

    Descriptor graphs may contain cycles, so equality is identity and the
    representation does not recurse into elements.

    Attributes:
        serial_name: Dotted, framework-qualified name of the type.
        kind: Kind of the type.
        elements: Ordered elements. Lists have one (the item), maps have two
            (key and value).
    """

    serial_name: str
    kind: SerialKind
    elements: list[ElementDescriptor] = field(default_factory=list)

    @property
    def elements_count(self: Self) -> int:
        """Number of elements."""
        return len(self.elements)

    @property
    def element_descriptors(self: Self) -> list["SerialDescriptor"]:
        """Descriptors of all elements, in order."""
        return [element.descriptor for element in self.elements]

    def get_element_descriptor(self: Self, index: int) -> "SerialDescriptor":
        """Get the descriptor of the element at ``index``.

        Raises:
            IndexError: If the descriptor has no such element.
        """
        if not 0 <= index < len(self.elements):
            raise IndexError(
                f"Descriptor '{self.serial_name}' of kind '{self.kind}' has no "
                f"element at index {index}"
            )
        return self.elements[index].descriptor

    def add_element(
        self: Self,
        name: str,
        descriptor: "SerialDescriptor",
        *annotations: Any,
        optional: bool = False,
    ) -> Self:
        """Append an element, returning the descriptor for chaining.

        This is how recursive types are built: create the record first, then
        add elements that refer back to it.
        """
        self.elements.append(
            ElementDescriptor(name, descriptor, annotations, is_optional=optional)
        )
        return self

    def __repr__(self: Self) -> str:
        return (
            f"SerialDescriptor(serial_name={self.serial_name!r}, "
            f"kind={self.kind.name}, elements_count={self.elements_count})"
        )


def primitive(kind: SerialKind, serial_name: str | None = None) -> SerialDescriptor:
    """Create a primitive scalar descriptor.

    Args:
        kind: A primitive kind.
        serial_name: Serial name, defaults to the capitalized kind name.

    Raises:
        ValueError: If ``kind`` is not primitive.
    """
    if not kind.is_primitive:
        raise ValueError(f"Kind '{kind}' is not a primitive kind")
    return SerialDescriptor(serial_name or kind.name.capitalize(), kind)


BOOLEAN = primitive(SerialKind.BOOLEAN)
BYTE = primitive(SerialKind.BYTE)
CHAR = primitive(SerialKind.CHAR)
SHORT = primitive(SerialKind.SHORT)
INT = primitive(SerialKind.INT)
LONG = primitive(SerialKind.LONG)
FLOAT = primitive(SerialKind.FLOAT)
DOUBLE = primitive(SerialKind.DOUBLE)
STRING = primitive(SerialKind.STRING)


def element(
    name: str,
    descriptor: SerialDescriptor,
    *annotations: Any,
    optional: bool = False,
) -> ElementDescriptor:
    """Create an element for :func:`record`."""
    return ElementDescriptor(name, descriptor, annotations, is_optional=optional)


def list_of(item: SerialDescriptor, serial_name: str = "List") -> SerialDescriptor:
    """Create an ordered list descriptor."""
    return SerialDescriptor(serial_name, SerialKind.LIST, [element("0", item)])


def byte_array(serial_name: str = "ByteArray") -> SerialDescriptor:
    """Create a byte sequence descriptor, rendered as ``bytes``."""
    return list_of(BYTE, serial_name)


def map_of(
    key: SerialDescriptor, value: SerialDescriptor, serial_name: str = "Map"
) -> SerialDescriptor:
    """Create a key-value map descriptor."""
    return SerialDescriptor(
        serial_name, SerialKind.MAP, [element("0", key), element("1", value)]
    )


def record(serial_name: str, *elements: ElementDescriptor) -> SerialDescriptor:
    """Create a fixed-field record descriptor."""
    return SerialDescriptor(serial_name, SerialKind.CLASS, list(elements))


def object_of(serial_name: str) -> SerialDescriptor:
    """Create a singleton object descriptor."""
    return SerialDescriptor(serial_name, SerialKind.OBJECT)


def enum_of(serial_name: str, *entries: str) -> SerialDescriptor:
    """Create an enumeration descriptor.

    Each entry becomes an element whose descriptor is an object named
    ``<serial_name>.<entry>``.
    """
    return SerialDescriptor(
        serial_name,
        SerialKind.ENUM,
        [element(entry, object_of(f"{serial_name}.{entry}")) for entry in entries],
    )


def contextual(
    serial_name: str, *elements: ElementDescriptor
) -> SerialDescriptor:
    """Create a contextual descriptor whose encoding is resolved elsewhere."""
    return SerialDescriptor(serial_name, SerialKind.CONTEXTUAL, list(elements))


def sealed(serial_name: str, *variants: SerialDescriptor) -> SerialDescriptor:
    """Create a sealed polymorphic descriptor over known concrete variants.

    The descriptor has a ``type`` string element and a contextual ``value``
    element whose elements are the variants.
    """
    value = contextual(
        f"Sealed<{serial_name}>",
        *(element(variant.serial_name, variant) for variant in variants),
    )
    return SerialDescriptor(
        serial_name,
        SerialKind.SEALED,
        [element("type", STRING), element("value", value)],
    )


def open_polymorphic(serial_name: str) -> SerialDescriptor:
    """Create an open polymorphic descriptor resolved at runtime."""
    return SerialDescriptor(
        serial_name,
        SerialKind.OPEN,
        [
            element("type", STRING),
            element("value", contextual(f"Polymorphic<{serial_name}>")),
        ],
    )
