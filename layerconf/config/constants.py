"""Constants for the configuration module."""

from typing import Final


# Source tags recorded next to every stored value
SOURCE_MANUAL: Final = "manual"
SOURCE_UNDEFINED: Final = "undefined"
SOURCE_CLI_PREFIX: Final = "cli:"
SOURCE_ENV_PREFIX: Final = "env:"
SOURCE_FILE_PREFIX: Final = "file:"

# Legacy environment patterns checked after registered prefixes and suffixes
LEGACY_ENV_PREFIXES: Final = ("APP_", "CONFIG_")
LEGACY_ENV_SUFFIX: Final = "_CONFIG"

# CLI scanning
CONFIG_FILE_OPTION: Final = "--config-file"
STRICT_CONFIG_FLAG: Final = "--strict-config"
PERMISSIVE_CONFIG_FLAG: Final = "--permissive-config"
AUTO_TRANSFORM_FLAG: Final = "--auto-transform-keys"
NO_AUTO_TRANSFORM_FLAG: Final = "--no-auto-transform-keys"

# Boolean spellings accepted by the bool conversion
TRUTHY_VALUES: Final = frozenset({"true", "yes", "1", "on", "enabled"})
FALSY_VALUES: Final = frozenset({"false", "no", "0", "off", "disabled", ""})

# File extensions per format; anything else is parsed as INI
JSON_EXTENSIONS: Final = (".json",)
YAML_EXTENSIONS: Final = (".yaml", ".yml")

# External flattener executables
JQ_EXECUTABLE: Final = "jq"
YQ_EXECUTABLE: Final = "yq"
EXTERNAL_TOOL_TIMEOUT_SECONDS: Final = 30.0

# Log component names
COMPONENT_CONFIG: Final = "config"
COMPONENT_CLI: Final = "cli"
COMPONENT_LIFECYCLE: Final = "lifecycle"
