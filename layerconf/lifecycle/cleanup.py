"""Resource cleanup on exit and termination signals."""

import atexit
import shutil
import signal
import sys
from pathlib import Path
from types import FrameType

import structlog

from layerconf.config.constants import COMPONENT_LIFECYCLE
from layerconf.lifecycle.lock import InstanceLock


logger = structlog.get_logger()

_HANDLED_SIGNALS = tuple(
    sig
    for sig in (
        getattr(signal, "SIGINT", None),
        getattr(signal, "SIGTERM", None),
        getattr(signal, "SIGQUIT", None),
    )
    if sig is not None
)


class CleanupRegistry:
    """Paths removed when the process exits.

    Directories are removed recursively, missing paths are ignored and
    removal failures are logged without interrupting the remaining items.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._items: list[Path] = []
        self._handlers_installed = False
        self._log = logger.bind(component=COMPONENT_LIFECYCLE)

    @property
    def items(self) -> list[Path]:
        """Registered paths in registration order."""
        return list(self._items)

    def add(self, path: Path | str) -> None:
        """Register a path for removal.

        Raises:
            ValueError: If the path is empty.
        """
        if not str(path):
            raise ValueError("add() requires a path")
        self._items.append(Path(path))
        self._log.debug("cleanup_item_added", path=str(path))

    def remove(self, path: Path | str) -> bool:
        """Unregister every occurrence of a path.

        Returns:
            True if the path was registered.
        """
        target = Path(path)
        remaining = [item for item in self._items if item != target]
        found = len(remaining) != len(self._items)
        self._items = remaining
        self._log.debug("cleanup_item_removed", path=str(path), found=found)
        return found

    def cleanup(self) -> int:
        """Remove every registered path; safe to call more than once.

        Returns:
            Number of paths processed.
        """
        items, self._items = self._items, []
        for item in items:
            try:
                if item.is_dir() and not item.is_symlink():
                    shutil.rmtree(item)
                else:
                    item.unlink(missing_ok=True)
            except OSError as e:
                self._log.warning("cleanup_item_failed", path=str(item), error=str(e))
        if items:
            self._log.debug("cleanup_completed", item_count=len(items))
        return len(items)

    def _on_signal(self, signum: int, frame: FrameType | None) -> None:
        self._log.warning("cleanup_signal_received", signal=signal.Signals(signum).name)
        self.cleanup()
        sys.exit(128 + signum)

    def install_handlers(self) -> None:
        """Run :meth:`cleanup` at interpreter exit and on INT/TERM/QUIT."""
        if self._handlers_installed:
            return
        atexit.register(self.cleanup)
        for sig in _HANDLED_SIGNALS:
            signal.signal(sig, self._on_signal)
        self._handlers_installed = True
        self._log.debug("cleanup_handlers_installed")


def ensure_single_instance(
    path: Path | str | None = None,
    registry: CleanupRegistry | None = None,
) -> InstanceLock:
    """Acquire the instance lock and remove it again on exit.

    Args:
        path: Lock file path; derived from the script name when omitted.
        registry: Cleanup registry receiving the lock file.

    Returns:
        The acquired lock.

    Raises:
        InstanceLockError: If another live instance holds the lock.
    """
    lock = InstanceLock(path)
    lock.acquire()

    cleanup_registry = registry if registry is not None else CleanupRegistry()
    cleanup_registry.add(lock.path)
    cleanup_registry.install_handlers()
    return lock


def die(exit_code: int | str, message: str) -> None:
    """Log a fatal error and exit with the given code.

    A non-numeric exit code is logged and replaced with 1.

    Raises:
        SystemExit: Always.
    """
    log = logger.bind(component=COMPONENT_LIFECYCLE)
    code_text = str(exit_code)
    if not code_text.isdigit():
        log.warning("die_invalid_exit_code", exit_code=code_text)
        code = 1
    else:
        code = int(code_text)
    log.error("fatal_error", message=message, exit_code=code)
    raise SystemExit(code)
