"""Flatteners for structured configuration documents.

A flattener turns a nested JSON or YAML document into dot-notation leaf
pairs::

    {"db": {"host": "x", "ports": [1, 2]}}
    -> [("db.host", "x"), ("db.ports.0", "1"), ("db.ports.1", "2")]

Two backends exist. The ``python`` backend parses in-process with the
standard ``json`` module and PyYAML. The ``external`` backend shells out to
``jq`` / ``yq`` when they are on ``PATH``. When the selected backend cannot
serve a format, :class:`UnavailableFlattener` stands in and the loader falls
back to INI parsing.
"""

import json
import shutil
import subprocess
from pathlib import Path
from typing import Any, Protocol

import yaml

from layerconf.config.constants import (
    EXTERNAL_TOOL_TIMEOUT_SECONDS,
    JQ_EXECUTABLE,
    YQ_EXECUTABLE,
)
from layerconf.config.errors import DocumentParseError, UnsupportedFormatError
from layerconf.config.models import FileFormat


_JQ_FILTER = 'paths(scalars) as $p | "\\($p | join("."))=\\(getpath($p))"'
_YQ_FILTER = (
    '. as $item ireduce ({}; . * $item) | paths(scalars) as $p '
    '| "\\($p | join("."))=\\(getpath($p))"'
)


class Flattener(Protocol):
    """Capability interface for document flattening."""

    name: str
    available: bool

    def flatten(self, path: Path) -> list[tuple[str, str]]:
        """Return ordered dot-notation leaf pairs for a document."""
        ...


def render_scalar(value: object) -> str:
    """Render a leaf value the way ``jq -r`` string interpolation does."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return json.dumps(value)
    return str(value)


def flatten_document(data: object, prefix: str = "") -> list[tuple[str, str]]:
    """Flatten nested mappings and lists into dot-notation leaf pairs.

    List items are addressed by index. Empty containers produce nothing.
    A scalar document with no prefix produces nothing since it has no key.
    """
    pairs: list[tuple[str, str]] = []

    if isinstance(data, dict):
        for key, value in data.items():
            child = f"{prefix}.{key}" if prefix else str(key)
            pairs.extend(flatten_document(value, child))
    elif isinstance(data, list):
        for index, value in enumerate(data):
            child = f"{prefix}.{index}" if prefix else str(index)
            pairs.extend(flatten_document(value, child))
    elif prefix:
        pairs.append((prefix, render_scalar(data)))

    return pairs


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two mappings; nested mappings merge, everything else is replaced.

    Examples:
        >>> deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 20}, "b": 3})
        {'a': {'x': 1, 'y': 20}, 'b': 3}
    """
    result = base.copy()

    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


class JsonFlattener:
    """In-process JSON flattener."""

    name = "json"
    available = True

    def flatten(self, path: Path) -> list[tuple[str, str]]:
        """Parse a JSON document and flatten it.

        Raises:
            OSError: If the file cannot be read.
            DocumentParseError: If the document is not valid JSON.
        """
        text = path.read_text(encoding="utf-8")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DocumentParseError(str(path), str(e)) from e
        return flatten_document(data)


class YamlFlattener:
    """In-process YAML flattener; multiple documents are deep-merged in order."""

    name = "pyyaml"
    available = True

    def flatten(self, path: Path) -> list[tuple[str, str]]:
        """Parse a YAML stream and flatten it.

        Raises:
            OSError: If the file cannot be read.
            DocumentParseError: If the stream is not valid YAML.
        """
        text = path.read_text(encoding="utf-8")
        try:
            documents = [doc for doc in yaml.safe_load_all(text) if doc is not None]
        except yaml.YAMLError as e:
            raise DocumentParseError(str(path), str(e)) from e

        merged: object = {}
        for document in documents:
            if isinstance(merged, dict) and isinstance(document, dict):
                merged = deep_merge(merged, document)
            else:
                merged = document
        return flatten_document(merged)


class ExternalToolFlattener:
    """Flattener delegating to ``jq`` or ``yq`` through a subprocess."""

    available = True

    def __init__(
        self,
        executable: str,
        filter_expr: str,
        *,
        subcommand: tuple[str, ...] = (),
        timeout: float = EXTERNAL_TOOL_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the flattener.

        Args:
            executable: Resolved path of the tool.
            filter_expr: Expression printing ``key=value`` lines.
            subcommand: Arguments placed before the filter (``eval`` for yq).
            timeout: Subprocess timeout in seconds.
        """
        self.name = Path(executable).name
        self._executable = executable
        self._filter = filter_expr
        self._subcommand = subcommand
        self._timeout = timeout

    def flatten(self, path: Path) -> list[tuple[str, str]]:
        """Run the tool and parse its ``key=value`` output.

        Raises:
            OSError: If the file cannot be read or the tool cannot start.
            DocumentParseError: If the tool fails or times out.
        """
        if not path.is_file():
            raise FileNotFoundError(str(path))

        command = [self._executable, *self._subcommand]
        if self.name == JQ_EXECUTABLE:
            command.append("-r")
        command.extend([self._filter, str(path)])

        try:
            result = subprocess.run(  # noqa: S603
                command,
                capture_output=True,
                text=True,
                check=True,
                timeout=self._timeout,
            )
        except subprocess.CalledProcessError as e:
            raise DocumentParseError(str(path), e.stderr.strip() or str(e)) from e
        except subprocess.TimeoutExpired as e:
            raise DocumentParseError(str(path), f"{self.name} timed out") from e

        pairs: list[tuple[str, str]] = []
        for line in result.stdout.splitlines():
            key, sep, value = line.partition("=")
            if sep and key:
                pairs.append((key, value))
        return pairs


class UnavailableFlattener:
    """Placeholder for a format whose flattener is missing."""

    available = False

    def __init__(self, tool: str, file_format: FileFormat) -> None:
        """Initialize the placeholder.

        Args:
            tool: Name of the missing tool.
            file_format: Format the tool would have handled.
        """
        self.name = tool
        self.file_format = file_format

    def flatten(self, path: Path) -> list[tuple[str, str]]:
        """Always signals that the format is unsupported.

        Raises:
            UnsupportedFormatError: Always.
        """
        raise UnsupportedFormatError(str(path), self.file_format.value, self.name)


def _external(
    tool: str,
    file_format: FileFormat,
    filter_expr: str,
    subcommand: tuple[str, ...],
) -> Flattener:
    executable = shutil.which(tool)
    if executable is None:
        return UnavailableFlattener(tool, file_format)
    return ExternalToolFlattener(executable, filter_expr, subcommand=subcommand)


def probe_flatteners(backend: str = "python") -> dict[FileFormat, Flattener]:
    """Select one flattener per structured format.

    Called once when a loader is created; results are not re-probed.

    Args:
        backend: ``python`` for in-process parsing or ``external`` for
            ``jq`` / ``yq``.

    Returns:
        Mapping of JSON and YAML formats to their flattener.
    """
    if backend == "external":
        return {
            FileFormat.JSON: _external(JQ_EXECUTABLE, FileFormat.JSON, _JQ_FILTER, ()),
            FileFormat.YAML: _external(YQ_EXECUTABLE, FileFormat.YAML, _YQ_FILTER, ("eval",)),
        }
    return {
        FileFormat.JSON: JsonFlattener(),
        FileFormat.YAML: YamlFlattener(),
    }
