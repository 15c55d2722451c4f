"""In-memory configuration store.

The store maps normalized keys to :class:`ConfigEntry` records. Priority is
not computed: the last write to a key wins, and loaders encode precedence by
the order in which they run (files, then environment, then CLI, then manual
writes). See :class:`layerconf.config.loader.ConfigLoader`.
"""

from collections.abc import Iterator

import structlog

from layerconf.config.constants import (
    COMPONENT_CONFIG,
    SOURCE_MANUAL,
    SOURCE_UNDEFINED,
)
from layerconf.config.conversion import convert_value, split_array
from layerconf.config.errors import (
    ConfigError,
    InvalidKeyError,
    UndefinedKeyError,
)
from layerconf.config.keys import normalize_key
from layerconf.config.models import (
    ConfigEntry,
    ConfigValue,
    MappingKind,
    ValidationResult,
    ValueType,
)
from layerconf.config.overrides import OverrideRegistry
from layerconf.settings.engine import EngineSettings


logger = structlog.get_logger()


class ConfigStore:
    """Multi-source key-value store with per-key provenance.

    Each instance is independent; create one per application (or per test)
    and pass it to the loaders.

    Usage:
        store = ConfigStore()
        store.set("database.host", "db.example.com")
        port = store.get("database.port", "5432", "int")
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        overrides: OverrideRegistry | None = None,
    ) -> None:
        """Initialize an empty store.

        Args:
            settings: Engine switches. Read from ``CONFIG_*`` env vars when
                omitted.
            overrides: Mapping registry. Seeded from the settings' env
                prefixes and suffixes when omitted.
        """
        self.settings = settings if settings is not None else EngineSettings()
        self.overrides = overrides or OverrideRegistry(
            env_prefixes=self.settings.prefix_list(),
            env_suffixes=self.settings.suffix_list(),
        )
        self._entries: dict[str, ConfigEntry] = {}
        self._log = logger.bind(component=COMPONENT_CONFIG)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        try:
            return self.normalize(key) in self._entries
        except InvalidKeyError:
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def normalize(self, key: str) -> str:
        """Normalize a key according to the store's case sensitivity."""
        return normalize_key(key, case_sensitive=self.settings.case_sensitive)

    def set(self, key: str, value: str, source: str = SOURCE_MANUAL) -> ConfigEntry:
        """Store a value, replacing any prior value and source.

        Args:
            key: Configuration key.
            value: Raw string value.
            source: Provenance tag.

        Returns:
            The stored entry.

        Raises:
            InvalidKeyError: If the key is empty.
        """
        if not key or not key.strip():
            raise InvalidKeyError("set")

        entry = ConfigEntry(key=self.normalize(key), value=value, source=source)
        self._entries[entry.key] = entry
        self._log.debug("config_key_set", key=entry.key, value=value, source=source)
        return entry

    def entry(self, key: str) -> ConfigEntry | None:
        """Return the stored entry for a key, if any."""
        try:
            return self._entries.get(self.normalize(key))
        except InvalidKeyError:
            return None

    def source_of(self, key: str) -> str:
        """Return the provenance tag of a key, or ``undefined``."""
        entry = self.entry(key)
        return entry.source if entry is not None else SOURCE_UNDEFINED

    def resolve(
        self,
        key: str,
        default: str = "",
        value_type: ValueType | str = ValueType.STRING,
    ) -> ConfigValue:
        """Look up a key without raising.

        Resolution order: stored value, then a non-empty default, then an
        empty value (or an error in strict mode). The result is converted
        to ``value_type``.

        Args:
            key: Configuration key.
            default: Fallback used when the key is absent.
            value_type: Type tag applied at read time.

        Returns:
            ConfigValue carrying either the value or the error.
        """
        if not key or not key.strip():
            return ConfigValue(
                key=key or "",
                value=None,
                source=SOURCE_UNDEFINED,
                error=InvalidKeyError("get"),
            )

        normalized = self.normalize(key)
        entry = self._entries.get(normalized)

        if entry is not None:
            raw, source = entry.value, entry.source
            self._log.debug("config_key_read", key=normalized, source=source)
        elif default:
            raw, source = default, SOURCE_UNDEFINED
            self._log.debug("config_default_used", key=normalized, value=default)
        elif self.settings.strict_undefined:
            error = UndefinedKeyError(normalized)
            self._log.warning("config_key_undefined", key=normalized)
            return ConfigValue(
                key=normalized, value=None, source=SOURCE_UNDEFINED, error=error
            )
        else:
            raw, source = "", SOURCE_UNDEFINED
            self._log.debug("config_key_undefined_empty", key=normalized)

        try:
            converted = convert_value(normalized, raw, value_type)
        except ConfigError as e:
            self._log.warning("config_type_conversion_failed", key=normalized, error=str(e))
            return ConfigValue(key=normalized, value=None, source=source, error=e)

        return ConfigValue(key=normalized, value=converted, source=source)

    def get(
        self,
        key: str,
        default: str = "",
        value_type: ValueType | str = ValueType.STRING,
    ) -> str:
        """Read a value, converting it to the requested type.

        Raises:
            InvalidKeyError: If the key is empty.
            UndefinedKeyError: If the key is absent, no default is given and
                the store is in strict mode.
            TypeConversionError: If the value does not match the type.
        """
        return self.resolve(key, default, value_type).unwrap()

    def get_int(self, key: str, default: int | None = None) -> int:
        """Read a value as a Python int."""
        fallback = "" if default is None else str(default)
        return int(self.get(key, fallback, ValueType.INT))

    def get_bool(self, key: str, default: bool | None = None) -> bool:
        """Read a value as a Python bool."""
        fallback = "" if default is None else str(default).lower()
        return self.get(key, fallback, ValueType.BOOL) == "true"

    def get_list(self, key: str, default: str = "") -> list[str]:
        """Read an array value and split it on commas."""
        return split_array(self.get(key, default, ValueType.ARRAY))

    def items(self) -> list[ConfigEntry]:
        """Return all entries sorted by key."""
        return [self._entries[key] for key in sorted(self._entries)]

    def to_dict(self) -> dict[str, str]:
        """Return a key to value mapping sorted by key."""
        return {entry.key: entry.value for entry in self.items()}

    def validate(self) -> ValidationResult:
        """Flag every key whose value is empty.

        Returns:
            ValidationResult with one error per empty value.
        """
        empty_keys = tuple(entry.key for entry in self.items() if entry.value == "")
        for key in empty_keys:
            self._log.warning("config_key_empty", key=key)

        if empty_keys:
            self._log.error("config_validation_failed", validation_error_count=len(empty_keys))
        else:
            self._log.debug("config_validation_passed", key_count=len(self._entries))

        return ValidationResult(
            ok=not empty_keys, error_count=len(empty_keys), empty_keys=empty_keys
        )

    def define_override(self, kind: MappingKind | str, source: str, target: str) -> None:
        """Register an explicit env, cli or short-option mapping."""
        self.overrides.define(kind, source, target)

    def add_env_prefix(self, prefix: str) -> bool:
        """Register an additional environment variable prefix."""
        return self.overrides.add_env_prefix(prefix)

    def add_env_suffix(self, suffix: str) -> bool:
        """Register an additional environment variable suffix."""
        return self.overrides.add_env_suffix(suffix)
