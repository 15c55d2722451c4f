"""Configuration file formats and extension dispatch."""

from pathlib import Path

from layerconf.config.constants import JSON_EXTENSIONS, YAML_EXTENSIONS
from layerconf.config.formats.flatteners import (
    ExternalToolFlattener,
    Flattener,
    JsonFlattener,
    UnavailableFlattener,
    YamlFlattener,
    flatten_document,
    probe_flatteners,
)
from layerconf.config.formats.ini import parse_ini_file, parse_ini_text
from layerconf.config.models import FileFormat


def detect_format(path: Path | str) -> FileFormat:
    """Pick a format from the file extension; unknown extensions are INI."""
    name = str(path).lower()
    if name.endswith(JSON_EXTENSIONS):
        return FileFormat.JSON
    if name.endswith(YAML_EXTENSIONS):
        return FileFormat.YAML
    return FileFormat.INI


__all__ = [
    "ExternalToolFlattener",
    "Flattener",
    "JsonFlattener",
    "UnavailableFlattener",
    "YamlFlattener",
    "detect_format",
    "flatten_document",
    "parse_ini_file",
    "parse_ini_text",
    "probe_flatteners",
]
