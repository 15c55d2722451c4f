"""Read-time type conversion of stored string values."""

import re

import structlog

from layerconf.config.constants import COMPONENT_CONFIG, FALSY_VALUES, TRUTHY_VALUES
from layerconf.config.errors import TypeConversionError
from layerconf.config.models import ValueType


logger = structlog.get_logger()

_INT_PATTERN = re.compile(r"^-?[0-9]+$")


def convert_value(key: str, value: str, value_type: ValueType | str) -> str:
    """Check and normalise a raw value against a type tag.

    Values stay strings. ``int`` must match ``^-?[0-9]+$`` exactly; ``bool``
    maps the accepted spellings to ``"true"`` or ``"false"``; ``array`` is
    returned verbatim for the caller to split. An unknown type tag logs a
    warning and returns the raw value.

    Args:
        key: Key being read, for error messages.
        value: Raw stored or default value.
        value_type: Requested type tag.

    Returns:
        The converted textual value.

    Raises:
        TypeConversionError: If the value does not match the type.
    """
    try:
        tag = ValueType(value_type)
    except ValueError:
        logger.warning(
            "config_unknown_type",
            component=COMPONENT_CONFIG,
            key=key,
            requested_type=str(value_type),
        )
        return value

    if tag is ValueType.INT:
        if _INT_PATTERN.fullmatch(value) is None:
            raise TypeConversionError(key, tag.value, value)
        return value

    if tag is ValueType.BOOL:
        folded = value.lower()
        if folded in TRUTHY_VALUES:
            return "true"
        if folded in FALSY_VALUES:
            return "false"
        raise TypeConversionError(key, tag.value, value)

    # string and array are pass-through
    return value


def split_array(value: str) -> list[str]:
    """Split a comma-separated array value into trimmed items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",")]
