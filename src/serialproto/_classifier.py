"""Classification of descriptors into protobuf categories."""

from enum import Enum
from typing import Self

from .descriptors import SerialDescriptor, SerialKind
from .exceptions import UnrecognizedDescriptorError


class ProtoCategory(Enum):
    """How a descriptor is represented in a protobuf schema."""

    SCALAR = "scalar"
    MESSAGE = "message"
    ENUM = "enum"
    REPEATED = "repeated"
    MAP = "map"
    SEALED = "sealed"
    OPEN = "open"
    CONTEXTUAL = "contextual"

    @property
    def is_message(self: Self) -> bool:
        """Whether the category is declared or referenced as a message."""
        return self in {
            ProtoCategory.MESSAGE,
            ProtoCategory.SEALED,
            ProtoCategory.OPEN,
            ProtoCategory.CONTEXTUAL,
        }


def is_byte_string(descriptor: SerialDescriptor) -> bool:
    """Check if a descriptor is a list of bytes, rendered as ``bytes``."""
    return (
        descriptor.kind is SerialKind.LIST
        and descriptor.elements_count > 0
        and descriptor.get_element_descriptor(0).kind is SerialKind.BYTE
    )


def classify(descriptor: SerialDescriptor) -> ProtoCategory:  # noqa: PLR0911
    """Classify a descriptor.

    Args:
        descriptor: Descriptor to classify.

    Returns:
        The protobuf category of the descriptor.

    Raises:
        UnrecognizedDescriptorError: If the descriptor's kind is unknown or a
            container descriptor is missing its elements.
    """
    match descriptor.kind:
        case (
            SerialKind.BOOLEAN
            | SerialKind.BYTE
            | SerialKind.CHAR
            | SerialKind.SHORT
            | SerialKind.INT
            | SerialKind.LONG
            | SerialKind.FLOAT
            | SerialKind.DOUBLE
            | SerialKind.STRING
        ):
            return ProtoCategory.SCALAR
        case SerialKind.LIST:
            _require_elements(descriptor, 1)
            if is_byte_string(descriptor):
                return ProtoCategory.SCALAR
            return ProtoCategory.REPEATED
        case SerialKind.MAP:
            _require_elements(descriptor, 2)
            return ProtoCategory.MAP
        case SerialKind.CLASS | SerialKind.OBJECT:
            return ProtoCategory.MESSAGE
        case SerialKind.ENUM:
            return ProtoCategory.ENUM
        case SerialKind.SEALED:
            _require_elements(descriptor, 2)
            return ProtoCategory.SEALED
        case SerialKind.OPEN:
            return ProtoCategory.OPEN
        case SerialKind.CONTEXTUAL:
            return ProtoCategory.CONTEXTUAL
        case _:
            raise UnrecognizedDescriptorError(
                "Unrecognized custom type with serial name "
                f"'{descriptor.serial_name}' and kind '{descriptor.kind}'"
            )


def _require_elements(descriptor: SerialDescriptor, count: int) -> None:
    if descriptor.elements_count < count:
        raise UnrecognizedDescriptorError(
            f"Descriptor with serial name '{descriptor.serial_name}' and kind "
            f"'{descriptor.kind}' must have {count} element(s) but has "
            f"{descriptor.elements_count}"
        )
