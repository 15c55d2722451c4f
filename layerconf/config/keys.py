"""Key normalization and notation conversion.

Keys are stored in dot notation (``database.host``). External names arrive
in other shapes: environment variables (``DATABASE_HOST``), kebab-case CLI
options (``--database-host``) or snake_case identifiers. ``transform_key``
maps between them.

The conversions are lossy. ``a-b.c`` converted to dot notation
becomes ``a.b.c`` and the original separators cannot be recovered.
"""

from layerconf.config.errors import InvalidKeyError
from layerconf.config.models import KeyFormat


_TRANSLATIONS: dict[KeyFormat, dict[int, str]] = {
    KeyFormat.DOT: str.maketrans({"-": ".", "_": "."}),
    KeyFormat.KEBAB: str.maketrans({".": "-", "_": "-"}),
    KeyFormat.SNAKE: str.maketrans({".": "_", "-": "_"}),
    KeyFormat.ENV: str.maketrans({".": "_", "-": "_"}),
}


def normalize_key(key: str, *, case_sensitive: bool = False) -> str:
    """Normalize a key for storage and lookup.

    Args:
        key: Raw key.
        case_sensitive: Keep the original case when True.

    Returns:
        The key stripped of surrounding whitespace, lower-cased unless
        case-sensitive.

    Raises:
        InvalidKeyError: If the key is empty after stripping.
    """
    normalized = key.strip() if key else ""
    if not normalized:
        raise InvalidKeyError("normalize_key")
    return normalized if case_sensitive else normalized.lower()


def transform_key(key: str, target: KeyFormat | str = KeyFormat.DOT) -> str:
    """Convert a key to another notation.

    Args:
        key: Key to convert.
        target: One of ``dot``, ``kebab``, ``snake`` or ``env``. Unknown
            targets return the key unchanged.

    Returns:
        The converted key.

    Raises:
        InvalidKeyError: If the key is empty.

    Examples:
        >>> transform_key("database-host", "dot")
        'database.host'
        >>> transform_key("database.host", "env")
        'DATABASE_HOST'
    """
    if not key:
        raise InvalidKeyError("transform_key")

    try:
        key_format = KeyFormat(target)
    except ValueError:
        return key

    result = key.translate(_TRANSLATIONS[key_format])
    if key_format is KeyFormat.ENV:
        result = result.upper()
    return result


def env_remainder_to_key(remainder: str, *, auto_transform: bool) -> str:
    """Turn the stripped part of an environment variable name into a key.

    With auto-transform on, both ``-`` and ``_`` become dots. Without it the
    remainder is lower-cased and only underscores become dots.
    """
    if auto_transform:
        return transform_key(remainder, KeyFormat.DOT)
    return remainder.lower().replace("_", ".")
