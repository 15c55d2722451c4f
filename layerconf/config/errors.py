"""Error taxonomy for the configuration engine.

Every error carries an ``error_type`` code. The codes double as keys into
:mod:`layerconf.config.error_hints` so that front ends can print
remediation hints next to the raw message.
"""

from typing import ClassVar


class ConfigError(Exception):
    """Base class for configuration engine errors."""

    error_type: ClassVar[str] = "config_error"

    def __init__(self, message: str, *, key: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human readable description.
            key: Configuration key or file path the error relates to.
        """
        self.key = key
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Render the error as a loc/msg/type record."""
        return {
            "loc": self.key or "",
            "msg": str(self),
            "type": self.error_type,
        }


class InvalidKeyError(ConfigError):
    """Raised when a key is empty or missing on read or write."""

    error_type: ClassVar[str] = "invalid_key"

    def __init__(self, operation: str) -> None:
        """Initialize the error.

        Args:
            operation: Name of the operation that received the bad key.
        """
        self.operation = operation
        super().__init__(f"{operation}() requires a non-empty configuration key")


class UndefinedKeyError(ConfigError):
    """Raised in strict mode when an absent key is read without a default."""

    error_type: ClassVar[str] = "undefined_key"

    def __init__(self, key: str) -> None:
        """Initialize the error.

        Args:
            key: The normalized key that was not found.
        """
        super().__init__(
            f"Configuration key '{key}' not found and no default provided",
            key=key,
        )


class TypeConversionError(ConfigError):
    """Raised when a value does not match the requested type's grammar."""

    error_type: ClassVar[str] = "type_conversion"

    def __init__(self, key: str, expected_type: str, value: str) -> None:
        """Initialize the error.

        Args:
            key: The configuration key being read.
            expected_type: The requested type tag.
            value: The raw value that failed conversion.
        """
        self.expected_type = expected_type
        self.value = value
        super().__init__(
            f"Configuration key '{key}' expected {expected_type}, got '{value}'",
            key=key,
        )


class FileUnreadableError(ConfigError):
    """A configured file is missing or unreadable."""

    error_type: ClassVar[str] = "file_unreadable"

    def __init__(self, path: str, reason: str = "not found or not readable") -> None:
        """Initialize the error.

        Args:
            path: The configuration file path.
            reason: Why the file could not be read.
        """
        self.path = path
        super().__init__(f"Configuration file {reason}: {path}", key=path)


class UnsupportedFormatError(ConfigError):
    """No flattener is available for a structured file format.

    This error is soft: loaders record it and fall back to INI parsing.
    """

    error_type: ClassVar[str] = "unsupported_format"

    def __init__(self, path: str, file_format: str, tool: str) -> None:
        """Initialize the error.

        Args:
            path: The configuration file path.
            file_format: The detected format name.
            tool: The flattener that is unavailable.
        """
        self.path = path
        self.file_format = file_format
        self.tool = tool
        super().__init__(
            f"{file_format.upper()} format not supported ({tool} not available), "
            "falling back to INI parser",
            key=path,
        )


class DocumentParseError(ConfigError):
    """A JSON or YAML document could not be parsed."""

    error_type: ClassVar[str] = "document_parse_error"

    def __init__(self, path: str, detail: str) -> None:
        """Initialize the error.

        Args:
            path: The configuration file path.
            detail: Parser error message.
        """
        self.path = path
        super().__init__(f"Cannot parse {path}: {detail}", key=path)


class MappingError(ConfigError):
    """An override mapping definition is malformed."""

    error_type: ClassVar[str] = "invalid_mapping"
