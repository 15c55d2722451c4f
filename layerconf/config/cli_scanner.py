"""Command-line option scanning.

The scanner shares ``argv`` with the host script's own option parser. It
consumes only the tokens it recognises and hands everything else back, in
order, through :attr:`CliParseResult.remaining`.

Recognised shapes, in precedence order:

1. ``--config-file PATH`` / ``--config-file=PATH``
2. ``--strict-config``, ``--permissive-config``, ``--auto-transform-keys``,
   ``--no-auto-transform-keys``
3. ``--config-KEY=VALUE`` / ``--config-KEY VALUE``
4. ``-x VALUE`` for a registered short option
5. ``--option=VALUE`` / ``--option VALUE`` for a registered long option
6. ``--kebab-option=VALUE`` / ``--kebab-option VALUE`` when kebab-to-dot is on
"""

from dataclasses import dataclass, field

import structlog

from layerconf.config.constants import (
    AUTO_TRANSFORM_FLAG,
    COMPONENT_CONFIG,
    CONFIG_FILE_OPTION,
    NO_AUTO_TRANSFORM_FLAG,
    PERMISSIVE_CONFIG_FLAG,
    SOURCE_CLI_PREFIX,
    STRICT_CONFIG_FLAG,
)
from layerconf.config.keys import transform_key
from layerconf.config.models import Assignment, KeyFormat, MappingKind
from layerconf.config.overrides import OverrideRegistry
from layerconf.settings.engine import EngineSettings


logger = structlog.get_logger()

_MODULE_FLAGS: dict[str, tuple[str, bool]] = {
    STRICT_CONFIG_FLAG: ("strict_mode", True),
    PERMISSIVE_CONFIG_FLAG: ("strict_mode", False),
    AUTO_TRANSFORM_FLAG: ("auto_transform_keys", True),
    NO_AUTO_TRANSFORM_FLAG: ("auto_transform_keys", False),
}


@dataclass
class CliParseResult:
    """Outcome of scanning an argument vector.

    Attributes:
        remaining: Tokens the scanner does not own, in original order.
        config_files: Paths given with ``--config-file``.
        assignments: Config writes in argument order.
        flags: Engine switches set by module-control flags.
    """

    remaining: list[str] = field(default_factory=list)
    config_files: list[str] = field(default_factory=list)
    assignments: list[Assignment] = field(default_factory=list)
    flags: dict[str, bool] = field(default_factory=dict)


def _split_inline(token: str) -> tuple[str, str | None]:
    """Split ``--name=value`` into name and value; value is None without ``=``."""
    name, sep, value = token.partition("=")
    return (name, value) if sep else (token, None)


def _is_short_option(token: str) -> bool:
    return len(token) == 2 and token[0] == "-" and token[1].isascii() and token[1].isalpha()


class CliScanner:
    """Stateful left-to-right scanner over one argument vector."""

    def __init__(self, registry: OverrideRegistry, settings: EngineSettings) -> None:
        """Initialize the scanner.

        Args:
            registry: Explicit CLI and short-option mappings.
            settings: Engine switches; module-control flags update the
                scan's view of ``auto_transform_keys`` as they are seen.
        """
        self._registry = registry
        self._settings = settings
        self._auto_transform = settings.auto_transform_keys

    def _key_from_option(self, name: str) -> str:
        if self._auto_transform:
            return transform_key(name, KeyFormat.DOT)
        return name.strip()

    def _take_value(
        self, argv: list[str], index: int, inline: str | None
    ) -> tuple[str, int]:
        """Return the option value and how many tokens the option used."""
        if inline is not None:
            return inline, 1
        if index + 1 < len(argv):
            return argv[index + 1], 2
        return "", 1

    def scan(self, argv: list[str]) -> CliParseResult:
        """Scan the argument vector.

        Args:
            argv: Arguments without the program name.

        Returns:
            CliParseResult with staged assignments and untouched tokens.
        """
        result = CliParseResult()
        cli_prefix = self._settings.cli_prefix
        index = 0

        while index < len(argv):
            token = argv[index]
            name, inline = _split_inline(token)

            if name == CONFIG_FILE_OPTION:
                path, used = self._take_value(argv, index, inline)
                if path:
                    result.config_files.append(path)
                index += used
                continue

            if token in _MODULE_FLAGS:
                attribute, enabled = _MODULE_FLAGS[token]
                result.flags[attribute] = enabled
                if attribute == "auto_transform_keys":
                    self._auto_transform = enabled
                index += 1
                continue

            if cli_prefix and name.startswith(cli_prefix) and len(name) > len(cli_prefix):
                value, used = self._take_value(argv, index, inline)
                key = self._key_from_option(name[len(cli_prefix) :])
                self._stage(result, key, value, token)
                index += used
                continue

            if _is_short_option(token):
                mapped = self._registry.lookup(MappingKind.SHORT, token)
                if mapped is not None and self._settings.support_short_opts:
                    value, used = self._take_value(argv, index, None)
                    self._stage(result, mapped, value, token)
                    index += used
                    continue
                result.remaining.append(token)
                index += 1
                continue

            if token.startswith("--") and len(name) > 2:
                mapped = self._registry.lookup(MappingKind.CLI, name)
                if mapped is not None:
                    value, used = self._take_value(argv, index, inline)
                    self._stage(result, mapped, value, token)
                    index += used
                    continue

                bare = name[2:]
                if self._settings.kebab_to_dot and "-" in bare.strip("-"):
                    value, used = self._take_value(argv, index, inline)
                    if self._auto_transform:
                        key = transform_key(bare, KeyFormat.DOT)
                    else:
                        key = bare.replace("-", ".")
                    self._stage(result, key, value, token)
                    index += used
                    continue

            result.remaining.append(token)
            index += 1

        return result

    def _stage(self, result: CliParseResult, key: str, value: str, token: str) -> None:
        result.assignments.append(
            Assignment(key=key, value=value, source=f"{SOURCE_CLI_PREFIX}{token}")
        )
        logger.debug(
            "config_cli_matched",
            component=COMPONENT_CONFIG,
            option=token,
            key=key,
        )


def scan_cli_args(
    argv: list[str],
    registry: OverrideRegistry,
    settings: EngineSettings,
) -> CliParseResult:
    """Scan ``argv`` without touching any store."""
    return CliScanner(registry, settings).scan(argv)
