"""Environment variable scanning.

Rules, checked per variable in this order (first match wins):

1. Explicit env mapping for the exact variable name.
2. First registered prefix the name starts with.
3. First registered suffix the name ends with.
4. Legacy patterns ``APP_*``, ``CONFIG_*`` and ``*_CONFIG``.

Variables are visited in sorted name order so that two variables resolving
to the same key always overwrite each other in the same order.
"""

import os
from collections.abc import Mapping

import structlog

from layerconf.config.constants import (
    COMPONENT_CONFIG,
    LEGACY_ENV_PREFIXES,
    LEGACY_ENV_SUFFIX,
    SOURCE_ENV_PREFIX,
)
from layerconf.config.keys import env_remainder_to_key
from layerconf.config.models import Assignment, MappingKind
from layerconf.config.overrides import OverrideRegistry


logger = structlog.get_logger()


def _strip_legacy(name: str) -> str:
    remainder = name
    for prefix in LEGACY_ENV_PREFIXES:
        remainder = remainder.removeprefix(prefix)
    return remainder.removesuffix(LEGACY_ENV_SUFFIX)


def _match_variable(
    name: str,
    registry: OverrideRegistry,
    *,
    auto_transform: bool,
) -> tuple[str, str] | None:
    """Return ``(config_key, rule)`` for a variable, or None if unmatched."""
    mapped = registry.lookup(MappingKind.ENV, name)
    if mapped is not None:
        return mapped, "explicit"

    for prefix in registry.env_prefixes:
        if name.startswith(prefix):
            remainder = name[len(prefix) :]
            if not remainder:
                return None
            key = env_remainder_to_key(remainder, auto_transform=auto_transform)
            return key, f"prefix:{prefix}"

    for suffix in registry.env_suffixes:
        if name.endswith(suffix):
            remainder = name[: -len(suffix)]
            if not remainder:
                return None
            key = env_remainder_to_key(remainder, auto_transform=auto_transform)
            return key, f"suffix:{suffix}"

    if name.startswith(LEGACY_ENV_PREFIXES) or name.endswith(LEGACY_ENV_SUFFIX):
        remainder = _strip_legacy(name)
        if not remainder:
            return None
        return env_remainder_to_key(remainder, auto_transform=auto_transform), "legacy"

    return None


def scan_environment(
    registry: OverrideRegistry,
    environ: Mapping[str, str] | None = None,
    *,
    auto_transform: bool = True,
) -> list[Assignment]:
    """Collect the writes implied by the environment without applying them.

    Args:
        registry: Explicit mappings and prefix/suffix lists.
        environ: Variables to scan; defaults to ``os.environ``.
        auto_transform: Convert both ``-`` and ``_`` to dots when True.

    Returns:
        Assignments in sorted variable-name order.
    """
    source_env = os.environ if environ is None else environ
    assignments: list[Assignment] = []

    for name in sorted(source_env):
        match = _match_variable(name, registry, auto_transform=auto_transform)
        if match is None:
            continue
        config_key, rule = match
        assignments.append(
            Assignment(
                key=config_key,
                value=source_env[name],
                source=f"{SOURCE_ENV_PREFIX}{name}",
            )
        )
        logger.debug(
            "config_env_matched",
            component=COMPONENT_CONFIG,
            variable=name,
            rule=rule,
            key=config_key,
        )

    return assignments

