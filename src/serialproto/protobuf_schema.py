"""Protocol Buffer (proto2) schema generation from serial descriptors."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Literal, Self, assert_never

from ._classifier import ProtoCategory, classify, is_byte_string
from ._collector import CustomTypeDeclaration, collect_custom_types
from ._naming import is_full_ident, make_ident, remove_line_breaks, type_ident
from ._protobuf_types import ProtoEnum, ProtoField, ProtoFile, ProtoMessage
from .descriptors import ElementDescriptor, IntegerType, SerialDescriptor, SerialKind
from .exceptions import (
    FieldGenerationError,
    InvalidPackageNameError,
    SchemaConstraintError,
    UnexpectedGenerationError,
    UnrecognizedDescriptorError,
)

logger = logging.getLogger(__name__)

DEFAULT_VALUE_WARNING: Final = (
    "WARNING: field has a default value that is not present in the scheme"
)


@dataclass
class ProtoTypeInfo:
    """Information about a converted Protocol Buffer field type."""

    type_name: str
    label: Literal["required", "optional", "repeated"] | None = None
    comments: list[str] = field(default_factory=list)


class ProtoSchemaGenerator:
    """Generates proto2 schemas from serial descriptors.

    The generator only holds its configuration; every call to
    :meth:`generate_schema` works on local state, so an instance can be shared.
    """

    SYNTAX: Final = "proto2"

    _BASIC_TYPE_MAPPING: Mapping[SerialKind, str] = {
        SerialKind.BOOLEAN: "bool",
        SerialKind.FLOAT: "float",
        SerialKind.DOUBLE: "double",
        SerialKind.STRING: "string",
    }

    _INT32_KINDS: frozenset[SerialKind] = frozenset(
        {SerialKind.BYTE, SerialKind.CHAR, SerialKind.SHORT, SerialKind.INT}
    )

    _INT32_TYPE_MAPPING: Mapping[IntegerType, str] = {
        IntegerType.DEFAULT: "int32",
        IntegerType.SIGNED: "sint32",
        IntegerType.FIXED: "fixed32",
    }

    _INT64_TYPE_MAPPING: Mapping[IntegerType, str] = {
        IntegerType.DEFAULT: "int64",
        IntegerType.SIGNED: "sint64",
        IntegerType.FIXED: "fixed64",
    }

    def __init__(
        self: Self,
        package: str | None = None,
        options: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the Protocol Buffer schema generator.

        Args:
            package: Protobuf package name (e.g., "com.mycompany.events").
            options: File options rendered as ``option <key> = "<value>";`` in
                iteration order. Values are not escaped.

        Raises:
            InvalidPackageNameError: If ``package`` is not a dot-separated
                sequence of legal identifiers.
        """
        if package is not None and not is_full_ident(package):
            raise InvalidPackageNameError(package)
        self.package = package
        self.options = dict(options or {})

    def generate_schema(self: Self, descriptors: Iterable[SerialDescriptor]) -> ProtoFile:
        """Generate a proto file definition.

        Args:
            descriptors: Root descriptors. Every custom type reachable from them
                is declared.

        Returns:
            Proto file definition.
        """
        declarations = collect_custom_types(descriptors)
        logger.debug("Collected %d custom types", len(declarations))

        type_names = {
            declaration.descriptor.serial_name: declaration.name
            for declaration in declarations
        }

        proto_file: ProtoFile = {
            "syntax": self.SYNTAX,
            "options": dict(self.options),
            "definitions": [
                self._generate_definition(declaration, type_names)
                for declaration in declarations
            ],
        }
        if self.package is not None:
            proto_file["package"] = self.package

        return proto_file

    def _generate_definition(
        self: Self,
        declaration: CustomTypeDeclaration,
        type_names: Mapping[str, str],
    ) -> ProtoMessage | ProtoEnum:
        """Generate the enum or message for a collected type."""
        category = classify(declaration.descriptor)
        if category is ProtoCategory.ENUM:
            return self._generate_enum_schema(declaration)
        if category.is_message:
            return self._generate_message_schema(declaration, type_names)
        raise UnrecognizedDescriptorError(
            "Custom type can be enum or message but found kind "
            f"'{declaration.descriptor.kind}'"
        )

    def _generate_enum_schema(
        self: Self, declaration: CustomTypeDeclaration
    ) -> ProtoEnum:
        """Generate a Protocol Buffer enum.

        Entries are numbered by position, starting at zero.
        """
        # TODO: entry identifiers are not deduplicated, so two entries whose
        # sanitized names collide produce an invalid enum.
        values = [
            (type_ident(entry.serial_name), number)
            for number, entry in enumerate(declaration.descriptor.element_descriptors)
        ]
        return {
            "kind": "enum",
            "name": declaration.name,
            "serial_name": declaration.descriptor.serial_name,
            "values": values,
        }

    def _generate_message_schema(
        self: Self,
        declaration: CustomTypeDeclaration,
        type_names: Mapping[str, str],
    ) -> ProtoMessage:
        """Generate a Protocol Buffer message with one field per element."""
        descriptor = declaration.descriptor
        return {
            "kind": "message",
            "name": declaration.name,
            "serial_name": descriptor.serial_name,
            "fields": [
                self._generate_field_schema(declaration, index, type_names)
                for index in range(descriptor.elements_count)
            ],
        }

    def _generate_field_schema(
        self: Self,
        declaration: CustomTypeDeclaration,
        index: int,
        type_names: Mapping[str, str],
    ) -> ProtoField:
        """Generate Protocol Buffer field for a single element.

        Args:
            declaration: Message that owns the element.
            index: Position of the element.
            type_names: Mapping of serial names to declared identifiers.

        Returns:
            Protocol Buffer field definition.

        Raises:
            FieldGenerationError: If the element's type breaks a protobuf rule.
            UnexpectedGenerationError: If resolving the element's type fails for
                any other reason.
        """
        message = declaration.descriptor
        element = message.elements[index]
        field_name = make_ident(element.name)

        comments: list[str] = []
        if element.name != field_name:
            comments.append(
                f"original field name '{remove_line_breaks(element.name)}'"
            )

        if element.is_optional:
            comments.append(DEFAULT_VALUE_WARNING)
            logger.warning(
                "Field '%s' in serializable class '%s' has a default value that "
                "is not present in the scheme",
                field_name,
                message.serial_name,
            )

        try:
            proto_type = self._convert_field_type(message, element, type_names)
        except SchemaConstraintError as e:
            raise FieldGenerationError(
                declaration.name, message.serial_name, field_name, str(e)
            ) from e
        except Exception as e:
            raise UnexpectedGenerationError(
                declaration.name, message.serial_name, field_name, str(e)
            ) from e

        comments.extend(proto_type.comments)
        field_schema: ProtoField = {
            "name": field_name,
            "type": proto_type.type_name,
            "number": element.metadata.number or index + 1,
            "comments": comments,
        }
        if proto_type.label:
            field_schema["label"] = proto_type.label
        return field_schema

    def _convert_field_type(
        self: Self,
        message: SerialDescriptor,
        element: ElementDescriptor,
        type_names: Mapping[str, str],
    ) -> ProtoTypeInfo:
        """Convert an element's descriptor to a field type."""
        descriptor = element.descriptor
        category = classify(descriptor)

        match category:
            case ProtoCategory.MAP:
                return self._convert_map(descriptor, type_names)
            case ProtoCategory.REPEATED:
                return self._convert_list(descriptor, type_names)
            case (
                ProtoCategory.SCALAR
                | ProtoCategory.MESSAGE
                | ProtoCategory.ENUM
                | ProtoCategory.SEALED
                | ProtoCategory.OPEN
                | ProtoCategory.CONTEXTUAL
            ):
                comments: list[str] = []
                if category is ProtoCategory.CONTEXTUAL:
                    comments = self._contextual_comments(
                        message, descriptor, type_names
                    )
                return ProtoTypeInfo(
                    type_name=self._named_type_name(
                        descriptor, type_names, element.metadata.integer_type
                    ),
                    label="optional" if element.is_optional else "required",
                    comments=comments,
                )
            case _:
                assert_never(category)

    def _contextual_comments(
        self: Self,
        message: SerialDescriptor,
        descriptor: SerialDescriptor,
        type_names: Mapping[str, str],
    ) -> list[str]:
        """Describe a contextual field, listing variants inside sealed messages."""
        if classify(message) is not ProtoCategory.SEALED:
            return ["contextual message type"]

        comments = ["decoded as message with one of these types:"]
        for variant in descriptor.element_descriptors:
            variant_name = type_names.get(
                variant.serial_name, type_ident(variant.serial_name)
            )
            comments.append(
                f"  message {variant_name}, serial name "
                f"'{remove_line_breaks(variant.serial_name)}'"
            )
        return comments

    def _convert_map(
        self: Self,
        descriptor: SerialDescriptor,
        type_names: Mapping[str, str],
    ) -> ProtoTypeInfo:
        """Convert a map descriptor to a ``map<K, V>`` field type."""
        key = descriptor.get_element_descriptor(0)
        value = descriptor.get_element_descriptor(1)

        if (
            classify(key) is not ProtoCategory.SCALAR
            or key.kind in {SerialKind.FLOAT, SerialKind.DOUBLE}
            or is_byte_string(key)
        ):
            raise SchemaConstraintError(
                f"Illegal type for map key: serial name '{key.serial_name}' and "
                f"kind '{key.kind}'. As map key type in protobuf allowed only "
                "scalar type except for floating point types and bytes."
            )

        value_category = classify(value)
        if value_category is ProtoCategory.REPEATED:
            raise SchemaConstraintError(
                "List is not allowed as a map value type in protobuf"
            )
        if value_category is ProtoCategory.MAP:
            raise SchemaConstraintError(
                "Map is not allowed as a map value type in protobuf"
            )

        key_type = self._scalar_type_name(key)
        value_type = self._named_type_name(value, type_names)
        return ProtoTypeInfo(type_name=f"map<{key_type}, {value_type}>")

    def _convert_list(
        self: Self,
        descriptor: SerialDescriptor,
        type_names: Mapping[str, str],
    ) -> ProtoTypeInfo:
        """Convert a list descriptor to a repeated field type."""
        item = descriptor.get_element_descriptor(0)
        item_category = classify(item)
        if item_category is ProtoCategory.REPEATED:
            raise SchemaConstraintError("List is not allowed as a list element")
        if item_category is ProtoCategory.MAP:
            raise SchemaConstraintError("Map is not allowed as a list element")

        return ProtoTypeInfo(
            type_name=self._named_type_name(item, type_names), label="repeated"
        )

    def _named_type_name(
        self: Self,
        descriptor: SerialDescriptor,
        type_names: Mapping[str, str],
        integer_type: IntegerType = IntegerType.DEFAULT,
    ) -> str:
        """Get the protobuf type name of a scalar, custom or contextual type."""
        category = classify(descriptor)
        match category:
            case ProtoCategory.SCALAR:
                return self._scalar_type_name(descriptor, integer_type)
            case ProtoCategory.CONTEXTUAL:
                return "bytes"
            case (
                ProtoCategory.MESSAGE
                | ProtoCategory.ENUM
                | ProtoCategory.SEALED
                | ProtoCategory.OPEN
            ):
                return type_names[descriptor.serial_name]
            case ProtoCategory.REPEATED | ProtoCategory.MAP:
                raise SchemaConstraintError(
                    f"Descriptor with serial name '{descriptor.serial_name}' and "
                    f"kind '{descriptor.kind}' isn't named protobuf type"
                )
            case _:
                assert_never(category)

    def _scalar_type_name(
        self: Self,
        descriptor: SerialDescriptor,
        integer_type: IntegerType = IntegerType.DEFAULT,
    ) -> str:
        """Get the protobuf type name of a scalar descriptor."""
        if is_byte_string(descriptor):
            return "bytes"
        if descriptor.kind in self._INT32_KINDS:
            return self._INT32_TYPE_MAPPING[integer_type]
        if descriptor.kind is SerialKind.LONG:
            return self._INT64_TYPE_MAPPING[integer_type]
        return self._BASIC_TYPE_MAPPING[descriptor.kind]

    def proto_file_to_string(self: Self, proto_file: ProtoFile) -> str:
        """Convert ProtoFile definition to .proto file string.

        Args:
            proto_file: Proto file definition.

        Returns:
            Proto file content as string.
        """
        lines = [f'syntax = "{proto_file["syntax"]}";', ""]

        if "package" in proto_file:
            lines.append(f"package {proto_file['package']};")

        lines.extend(
            f'option {key} = "{value}";' for key, value in proto_file["options"].items()
        )

        for definition in proto_file["definitions"]:
            lines.append("")
            if definition["kind"] == "enum":
                lines.extend(self._enum_to_string(definition))
            else:
                lines.extend(self._message_to_string(definition))

        return "\n".join(lines) + "\n"

    def _message_to_string(self: Self, message: ProtoMessage) -> list[str]:
        """Convert ProtoMessage to string lines."""
        lines = [
            f"// serial name '{remove_line_breaks(message['serial_name'])}'",
            f"message {message['name']} {{",
        ]
        for proto_field in message["fields"]:
            lines.extend(self._field_to_string(proto_field))
        lines.append("}")
        return lines

    def _field_to_string(self: Self, proto_field: ProtoField) -> list[str]:
        """Convert ProtoField to string lines, comments first."""
        lines = [f"  // {comment}" for comment in proto_field["comments"]]

        label = proto_field.get("label")
        prefix = f"{label} " if label else ""
        lines.append(
            f"  {prefix}{proto_field['type']} {proto_field['name']} = "
            f"{proto_field['number']};"
        )
        return lines

    def _enum_to_string(self: Self, enum: ProtoEnum) -> list[str]:
        """Convert ProtoEnum to string lines."""
        lines = [
            f"// serial name '{remove_line_breaks(enum['serial_name'])}'",
            f"enum {enum['name']} {{",
        ]
        lines.extend(
            f"  {value_name} = {value_number};"
            for value_name, value_number in enum["values"]
        )
        lines.append("}")
        return lines


class ProtoExporter:
    """Export serial descriptors to a Protocol Buffer .proto file."""

    def __init__(
        self: Self,
        package: str | None = None,
        options: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the Protocol Buffer exporter.

        Args:
            package: Protobuf package name.
            options: File options, rendered in iteration order.
        """
        self.generator = ProtoSchemaGenerator(package=package, options=options)

    def export_schema(
        self: Self,
        descriptors: Iterable[SerialDescriptor],
        output_path: str | Path | None = None,
    ) -> str:
        """Generate a schema and optionally write it to a file.

        Args:
            descriptors: Root descriptors.
            output_path: Optional file path to save schema (.proto file).

        Returns:
            Protocol Buffer file as a string.

        Example:
            ```python
            exporter = ProtoExporter(package="com.myapp")
            proto = exporter.export_schema([user_descriptor], "protos/user.proto")
            ```
        """
        proto_file = self.generator.generate_schema(descriptors)
        proto_content = self.generator.proto_file_to_string(proto_file)

        if output_path:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(proto_content, encoding="utf-8")
            logger.info("Wrote Protocol Buffer schema to %s", output_path)

        return proto_content


def generate_proto(
    descriptors: Iterable[SerialDescriptor],
    package_name: str | None = None,
    options: Mapping[str, str] | None = None,
) -> str:
    """Generate a proto2 schema for the given descriptors.

    Args:
        descriptors: Root descriptors. Every custom type reachable from them is
            declared, in discovery order.
        package_name: Optional protobuf package name.
        options: Optional file options.

    Returns:
        The schema document.

    Raises:
        InvalidPackageNameError: If ``package_name`` is not a full identifier.
            Raised before any descriptor is visited.
        UnrecognizedDescriptorError: If a descriptor cannot be classified.
        FieldGenerationError: If a field breaks a protobuf rule.
        UnexpectedGenerationError: If generating a field fails unexpectedly.

    Example:
        ```python
        from serialproto import generate_proto
        from serialproto.descriptors import INT, element, record

        schema = generate_proto(
            [record("com.example.Point", element("x", INT), element("y", INT))],
            package_name="com.example",
        )
        ```
    """
    generator = ProtoSchemaGenerator(package=package_name, options=options)
    return generator.proto_file_to_string(generator.generate_schema(descriptors))
