"""Discovery of the custom types reachable from a set of descriptors."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import assert_never

from ._classifier import ProtoCategory, classify
from ._naming import type_ident
from .descriptors import SerialDescriptor


@dataclass(frozen=True)
class CustomTypeDeclaration:
    """A type that gets its own message or enum declaration.

    Attributes:
        name: Unique protobuf identifier of the declaration.
        descriptor: Descriptor of the declared type.
    """

    name: str
    descriptor: SerialDescriptor


def collect_custom_types(
    descriptors: Iterable[SerialDescriptor],
) -> tuple[CustomTypeDeclaration, ...]:
    """Collect every distinct custom type reachable from ``descriptors``.

    Types are returned in the order a depth-first walk first reaches them.
    Each distinct serial name is collected once, which also terminates cycles.
    Names are the sanitized last segment of the serial name; on collision a
    ``_2``, ``_3``, ... suffix is appended.

    Args:
        descriptors: Root descriptors.

    Returns:
        Declarations in discovery order.

    Raises:
        UnrecognizedDescriptorError: If a reachable descriptor cannot be
            classified.
    """
    declarations: dict[str, CustomTypeDeclaration] = {}
    for descriptor in _find_custom_descriptors(descriptors):
        base_name = type_ident(descriptor.serial_name)
        name = base_name
        variant_number = 1
        while name in declarations:
            variant_number += 1
            name = f"{base_name}_{variant_number}"
        declarations[name] = CustomTypeDeclaration(name, descriptor)

    return tuple(declarations.values())


def _find_custom_descriptors(
    descriptors: Iterable[SerialDescriptor],
) -> list[SerialDescriptor]:
    found: dict[str, SerialDescriptor] = {}
    pending = list(descriptors)
    pending.reverse()

    while pending:
        descriptor = pending.pop()
        category = classify(descriptor)

        match category:
            case ProtoCategory.SCALAR | ProtoCategory.CONTEXTUAL:
                continue
            case ProtoCategory.MESSAGE:
                if descriptor.serial_name in found:
                    continue
                found[descriptor.serial_name] = descriptor
                pending.extend(reversed(descriptor.element_descriptors))
            case ProtoCategory.ENUM | ProtoCategory.OPEN:
                found.setdefault(descriptor.serial_name, descriptor)
            case ProtoCategory.REPEATED:
                pending.append(descriptor.get_element_descriptor(0))
            case ProtoCategory.MAP:
                pending.append(descriptor.get_element_descriptor(1))
            case ProtoCategory.SEALED:
                found.setdefault(descriptor.serial_name, descriptor)
                # Variants are revisited each time the sealed type is reached.
                variants = descriptor.get_element_descriptor(1).element_descriptors
                pending.extend(
                    variant
                    for variant in reversed(variants)
                    if variant.serial_name not in found
                )
            case _:
                assert_never(category)

    return list(found.values())
