"""Data models for the configuration store."""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict

from layerconf.config.errors import ConfigError


class KeyFormat(str, Enum):
    """Key notations supported by ``transform_key``."""

    DOT = "dot"
    KEBAB = "kebab"
    SNAKE = "snake"
    ENV = "env"


class ValueType(str, Enum):
    """Type tags accepted at read time."""

    STRING = "string"
    INT = "int"
    BOOL = "bool"
    ARRAY = "array"


class MappingKind(str, Enum):
    """Kinds of explicit override mappings."""

    ENV = "env"
    CLI = "cli"
    SHORT = "short"


class FileFormat(str, Enum):
    """Configuration file formats, selected by extension."""

    INI = "ini"
    JSON = "json"
    YAML = "yaml"


class ConfigEntry(BaseModel):
    """A stored value together with its provenance.

    Entries are immutable: a write replaces the whole entry so value and
    source never drift apart.

    Attributes:
        key: Normalized dot-delimited key.
        value: Raw string value; typing happens at read time.
        source: Provenance tag (``manual``, ``cli:...``, ``env:...``, ``file:...``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str
    value: str
    source: str


@dataclass(frozen=True)
class ConfigValue:
    """Result of a non-raising lookup.

    Exactly one of ``value`` and ``error`` is meaningful: when ``error`` is
    set the lookup failed and ``value`` is ``None``.
    """

    key: str
    value: str | None
    source: str
    error: ConfigError | None = None

    @property
    def ok(self) -> bool:
        """Whether the lookup produced a usable value."""
        return self.error is None

    def unwrap(self) -> str:
        """Return the value or raise the recorded error."""
        if self.error is not None:
            raise self.error
        return self.value if self.value is not None else ""


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a shallow store validation."""

    ok: bool
    error_count: int
    empty_keys: tuple[str, ...] = ()


@dataclass(frozen=True)
class Assignment:
    """A pending write discovered by a scanner."""

    key: str
    value: str
    source: str


@dataclass
class LoadReport:
    """Summary of one loader invocation.

    Attributes:
        files_loaded: Files that were parsed (including INI fallbacks).
        files_skipped: Files that could not be read.
        keys_written: Number of writes performed.
        fallbacks: Files parsed as INI because no flattener was available.
        errors: Recoverable errors encountered while loading.
        remaining_args: CLI tokens left for the host's own parser.
    """

    files_loaded: list[str] = field(default_factory=list)
    files_skipped: list[str] = field(default_factory=list)
    keys_written: int = 0
    fallbacks: list[str] = field(default_factory=list)
    errors: list[ConfigError] = field(default_factory=list)
    remaining_args: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Whether the load finished without recoverable errors."""
        return not self.errors

    def merge(self, other: "LoadReport") -> None:
        """Fold another report into this one."""
        self.files_loaded.extend(other.files_loaded)
        self.files_skipped.extend(other.files_skipped)
        self.keys_written += other.keys_written
        self.fallbacks.extend(other.fallbacks)
        self.errors.extend(other.errors)
        self.remaining_args.extend(other.remaining_args)

    def error_records(self) -> list[dict[str, str]]:
        """Return errors as loc/msg/type records."""
        return [error.to_dict() for error in self.errors]
