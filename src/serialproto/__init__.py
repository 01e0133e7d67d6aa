"""serialproto - proto2 schemas from structural type descriptors.

A package for publishing Protocol Buffer schemas for types whose encoding
already follows protobuf wire conventions.
"""

from ._collector import CustomTypeDeclaration, collect_custom_types
from ._version import __version__
from .descriptors import (
    ElementDescriptor,
    FieldMetadata,
    IntegerType,
    ProtoNumber,
    ProtoType,
    SerialDescriptor,
    SerialKind,
)
from .exceptions import (
    ConfigError,
    FieldGenerationError,
    InvalidPackageNameError,
    ProtoGenerationError,
    SchemaConstraintError,
    UnexpectedGenerationError,
    UnrecognizedDescriptorError,
)
from .protobuf_schema import ProtoExporter, ProtoSchemaGenerator, generate_proto

__all__ = [
    "ConfigError",
    "CustomTypeDeclaration",
    "ElementDescriptor",
    "FieldGenerationError",
    "FieldMetadata",
    "IntegerType",
    "InvalidPackageNameError",
    "ProtoExporter",
    "ProtoGenerationError",
    "ProtoNumber",
    "ProtoSchemaGenerator",
    "ProtoType",
    "SchemaConstraintError",
    "SerialDescriptor",
    "SerialKind",
    "UnexpectedGenerationError",
    "UnrecognizedDescriptorError",
    "__version__",
    "collect_custom_types",
    "generate_proto",
]
