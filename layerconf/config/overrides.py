"""Explicit override mappings and environment patterns."""

import structlog

from layerconf.config.constants import COMPONENT_CONFIG
from layerconf.config.errors import MappingError
from layerconf.config.models import MappingKind


logger = structlog.get_logger()


class OverrideRegistry:
    """Registry of explicit env/CLI mappings plus env prefix and suffix lists.

    Mappings are registered by the host application before loading. They are
    append-only: defining the same source twice replaces its target but no
    mapping is ever removed.
    """

    def __init__(
        self,
        env_prefixes: list[str] | None = None,
        env_suffixes: list[str] | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            env_prefixes: Initial prefixes to scan, in match order.
            env_suffixes: Initial suffixes to scan, in match order.
        """
        self._mappings: dict[MappingKind, dict[str, str]] = {
            kind: {} for kind in MappingKind
        }
        self._env_prefixes: list[str] = list(env_prefixes or [])
        self._env_suffixes: list[str] = list(env_suffixes or [])

    @property
    def env_mappings(self) -> dict[str, str]:
        """Environment variable name to config key."""
        return dict(self._mappings[MappingKind.ENV])

    @property
    def cli_mappings(self) -> dict[str, str]:
        """Long CLI option to config key."""
        return dict(self._mappings[MappingKind.CLI])

    @property
    def short_mappings(self) -> dict[str, str]:
        """Single-character CLI flag to config key."""
        return dict(self._mappings[MappingKind.SHORT])

    @property
    def env_prefixes(self) -> tuple[str, ...]:
        """Registered env prefixes in match order."""
        return tuple(self._env_prefixes)

    @property
    def env_suffixes(self) -> tuple[str, ...]:
        """Registered env suffixes in match order."""
        return tuple(self._env_suffixes)

    def define(self, kind: MappingKind | str, source: str, target: str) -> None:
        """Register an explicit mapping.

        Args:
            kind: ``env``, ``cli`` or ``short``.
            source: Env var name, long option (``--db-host``) or short
                option (``-h``).
            target: Config key the source writes to.

        Raises:
            MappingError: If the kind is unknown or source/target is empty.
        """
        if not source or not target:
            raise MappingError(
                "define_override() requires mapping kind, source, and target"
            )
        try:
            mapping_kind = MappingKind(kind)
        except ValueError as e:
            raise MappingError(f"Unknown mapping type: {kind}", key=source) from e

        self._mappings[mapping_kind][source] = target
        logger.debug(
            "config_mapping_added",
            component=COMPONENT_CONFIG,
            kind=mapping_kind.value,
            source=source,
            target=target,
        )

    def lookup(self, kind: MappingKind, source: str) -> str | None:
        """Return the mapped key for a source, if any."""
        return self._mappings[kind].get(source)

    def add_env_prefix(self, prefix: str) -> bool:
        """Add a prefix to scan; a trailing underscore is appended if missing.

        Returns:
            True if the prefix was added, False if already registered.

        Raises:
            MappingError: If the prefix is empty.
        """
        if not prefix:
            raise MappingError("add_env_prefix() requires a prefix parameter")
        if not prefix.endswith("_"):
            prefix = f"{prefix}_"
        if prefix in self._env_prefixes:
            return False
        self._env_prefixes.append(prefix)
        logger.debug("config_env_prefix_added", component=COMPONENT_CONFIG, prefix=prefix)
        return True

    def add_env_suffix(self, suffix: str) -> bool:
        """Add a suffix to scan; a leading underscore is prepended if missing.

        Returns:
            True if the suffix was added, False if already registered.

        Raises:
            MappingError: If the suffix is empty.
        """
        if not suffix:
            raise MappingError("add_env_suffix() requires a suffix parameter")
        if not suffix.startswith("_"):
            suffix = f"_{suffix}"
        if suffix in self._env_suffixes:
            return False
        self._env_suffixes.append(suffix)
        logger.debug("config_env_suffix_added", component=COMPONENT_CONFIG, suffix=suffix)
        return True
