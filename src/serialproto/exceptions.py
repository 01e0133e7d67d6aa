"""Exceptions raised while generating Protocol Buffer schemas."""

from typing import Self


class ProtoGenerationError(Exception):
    """Base exception for all schema generation errors."""


class InvalidPackageNameError(ProtoGenerationError, ValueError):
    """Raised when the protobuf package name is not a full identifier."""

    def __init__(self: Self, package: str) -> None:
        """Initialize the error.

        Args:
            package: The rejected package name.
        """
        self.package = package
        super().__init__(f"Incorrect protobuf package name '{package}'")


class UnrecognizedDescriptorError(ProtoGenerationError):
    """Raised when a descriptor has a shape the generator does not understand."""


class SchemaConstraintError(ProtoGenerationError, ValueError):
    """Raised when a type combination violates protobuf rules."""


class FieldGenerationError(SchemaConstraintError):
    """Raised when a single message field violates protobuf rules.

    Attributes:
        message_name: Identifier of the message that owns the field.
        serial_name: Serial name of the owning message.
        field_name: Identifier of the offending field.
    """

    def __init__(
        self: Self,
        message_name: str,
        serial_name: str,
        field_name: str,
        reason: str,
    ) -> None:
        """Initialize the error.

        Args:
            message_name: Identifier of the message that owns the field.
            serial_name: Serial name of the owning message.
            field_name: Identifier of the offending field.
            reason: Description of the underlying problem.
        """
        self.message_name = message_name
        self.serial_name = serial_name
        self.field_name = field_name
        super().__init__(
            f"An error occurred during value generation for field {field_name} "
            f"of message {message_name} (serial name {serial_name}): {reason}"
        )


class UnexpectedGenerationError(ProtoGenerationError):
    """Raised when resolving a field fails for a reason other than a rule.

    Attributes:
        message_name: Identifier of the message that owns the field.
        serial_name: Serial name of the owning message.
        field_name: Identifier of the field being generated.
    """

    def __init__(
        self: Self,
        message_name: str,
        serial_name: str,
        field_name: str,
        reason: str,
    ) -> None:
        """Initialize the error.

        Args:
            message_name: Identifier of the message that owns the field.
            serial_name: Serial name of the owning message.
            field_name: Identifier of the field being generated.
            reason: Description of the underlying problem.
        """
        self.message_name = message_name
        self.serial_name = serial_name
        self.field_name = field_name
        super().__init__(
            f"Unexpected error occurred during value generation for field "
            f"{field_name} of message {message_name} (serial name {serial_name}): "
            f"{reason}"
        )


class ConfigError(Exception):
    """Raised when configuration is missing, invalid, or cannot be loaded."""
