"""Observability module for logging."""

from layerconf.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
    get_logger,
    parse_level,
)


__all__ = [
    "bind_run_context",
    "clear_run_context",
    "configure_logging",
    "get_logger",
    "parse_level",
]
