"""Layered configuration store and loaders."""

from layerconf.config.cli_scanner import CliParseResult
from layerconf.config.errors import (
    ConfigError,
    DocumentParseError,
    FileUnreadableError,
    InvalidKeyError,
    MappingError,
    TypeConversionError,
    UndefinedKeyError,
    UnsupportedFormatError,
)
from layerconf.config.keys import normalize_key, transform_key
from layerconf.config.loader import ConfigLoader
from layerconf.config.models import (
    ConfigEntry,
    ConfigValue,
    FileFormat,
    KeyFormat,
    LoadReport,
    MappingKind,
    ValidationResult,
    ValueType,
)
from layerconf.config.overrides import OverrideRegistry
from layerconf.config.state_machine import ConfigState, ConfigStateError
from layerconf.config.store import ConfigStore


__all__ = [
    "CliParseResult",
    "ConfigEntry",
    "ConfigError",
    "ConfigLoader",
    "ConfigState",
    "ConfigStateError",
    "ConfigStore",
    "ConfigValue",
    "DocumentParseError",
    "FileFormat",
    "FileUnreadableError",
    "InvalidKeyError",
    "KeyFormat",
    "LoadReport",
    "MappingError",
    "MappingKind",
    "OverrideRegistry",
    "TypeConversionError",
    "UndefinedKeyError",
    "UnsupportedFormatError",
    "ValidationResult",
    "ValueType",
    "normalize_key",
    "transform_key",
]
