"""Structured logging configuration."""

import logging
import sys
from pathlib import Path
from typing import TextIO

import structlog


_LEVEL_ALIASES = {"WARN": "WARNING"}

# Handle opened for the current log file; closed on reconfigure
_log_file_handle: TextIO | None = None


class _FanOutStream:
    """Write-only stream copying every write to several targets."""

    def __init__(self, targets: list[TextIO]) -> None:
        self._targets = targets

    def write(self, text: str) -> int:
        for target in self._targets:
            # Loggers cached before a reconfigure may still point here
            if not target.closed:
                target.write(text)
        return len(text)

    def flush(self) -> None:
        for target in self._targets:
            if not target.closed:
                target.flush()


def parse_level(level: int | str) -> int:
    """Convert a level name (DEBUG, INFO, WARN, WARNING, ERROR) to its number.

    Raises:
        ValueError: If the name is not a known level.
    """
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    name = _LEVEL_ALIASES.get(name, name)
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def configure_logging(
    level: int | str = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
    log_file: Path | str | None = None,
    quiet: bool = False,
) -> None:
    """Configure structured logging for the application.

    Sets up structlog with JSON output format and standard processors
    for timestamps, log levels, and context binding.

    Args:
        level: Logging level or level name (default: INFO).
        output: Console stream (default: stderr).
        json_format: Whether to use JSON format (default: True).
        log_file: Optional file that receives a copy of every record.
        quiet: Suppress console output; the log file still receives records.
    """
    global _log_file_handle

    numeric_level = parse_level(level)

    if _log_file_handle is not None:
        _log_file_handle.close()
        _log_file_handle = None

    targets: list[TextIO] = [] if quiet else [output]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        _log_file_handle = path.open("a", encoding="utf-8")  # noqa: SIM115
        targets.append(_log_file_handle)

    # Colors only make sense when nothing but the console is written to
    colors = json_format is False and log_file is None and not quiet

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=_FanOutStream(targets)),
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging to use the same level
    logging.basicConfig(
        format="%(message)s",
        stream=output,
        level=numeric_level,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a bound logger instance.

    Args:
        name: Optional logger name.

    Returns:
        Bound logger instance.
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


def bind_run_context(run_id: str) -> None:
    """Bind run context to all subsequent log messages.

    Args:
        run_id: Unique run identifier.
    """
    structlog.contextvars.bind_contextvars(run_id=run_id)


def clear_run_context() -> None:
    """Clear run context from log messages."""
    structlog.contextvars.unbind_contextvars("run_id")
