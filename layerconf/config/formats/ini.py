"""Native INI parser.

Grammar::

    # comment
    ; comment
    key=value
    [section]
    nested_key = "quoted value"

Keys inside a section are prefixed ``section.``. Values wrapped in matching
single or double quotes lose the quotes. Lines that match neither a section
header nor ``key=value`` are ignored.
"""

import re
from pathlib import Path

import structlog

from layerconf.config.constants import COMPONENT_CONFIG


logger = structlog.get_logger()

_SECTION_PATTERN = re.compile(r"^\[(.+)\]$")
_PAIR_PATTERN = re.compile(r"^([^=]+)=(.*)$")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


def parse_ini_text(text: str) -> list[tuple[str, str]]:
    """Parse INI text into ordered key/value pairs.

    Args:
        text: File contents.

    Returns:
        Pairs in file order; duplicates are kept so later lines win when
        applied in sequence.
    """
    pairs: list[tuple[str, str]] = []
    section = ""

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line[0] in {"#", ";"}:
            continue

        section_match = _SECTION_PATTERN.match(line)
        if section_match:
            section = section_match.group(1).strip()
            continue

        pair_match = _PAIR_PATTERN.match(line)
        if pair_match is None:
            continue

        key = pair_match.group(1).strip()
        if not key:
            continue
        value = _unquote(pair_match.group(2).strip())
        pairs.append((f"{section}.{key}" if section else key, value))

    return pairs


def parse_ini_file(path: Path) -> list[tuple[str, str]]:
    """Read and parse an INI file.

    Bytes that are not valid UTF-8 are replaced with U+FFFD so the
    remaining lines still load; a warning names the first bad offset.

    Raises:
        OSError: If the file cannot be read.
    """
    raw = path.read_bytes()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(
            "config_file_invalid_bytes",
            component=COMPONENT_CONFIG,
            file_path=str(path),
            position=e.start,
        )
        text = raw.decode("utf-8", errors="replace")
    return parse_ini_text(text)
