"""Single-instance enforcement with a PID lock file."""

import getpass
import os
import sys
import tempfile
from pathlib import Path

import structlog

from layerconf.config.constants import COMPONENT_LIFECYCLE


logger = structlog.get_logger()


class LockFileError(Exception):
    """Raised when a lock file cannot be read, written or removed."""

    def __init__(self, path: Path, action: str, detail: str) -> None:
        """Initialize the error.

        Args:
            path: Lock file path.
            action: What was attempted (read, create, remove).
            detail: Underlying OS error message.
        """
        self.path = path
        self.action = action
        super().__init__(f"Can't {action} lock file {path}: {detail}")


class InstanceLockError(Exception):
    """Raised when another live process holds the lock."""

    def __init__(self, path: Path, pid: int) -> None:
        """Initialize the error.

        Args:
            path: Lock file path.
            pid: PID recorded in the lock file.
        """
        self.path = path
        self.pid = pid
        super().__init__(f"Lock file {path} is present, PID is {pid}")


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


def default_lock_path(script_name: str | None = None) -> Path:
    """Compute ``<tmpdir>/<user>-<script>.lock`` for the running script."""
    name = script_name or Path(sys.argv[0] or "layerconf").stem or "layerconf"
    return Path(tempfile.gettempdir()) / f"{_current_user()}-{name}.lock"


def pid_alive(pid: int) -> bool:
    """Check whether a process with this PID exists."""
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists but belongs to someone else
        return True
    return True


class InstanceLock:
    """PID lock file guarding against concurrent runs of the same script.

    Usage:
        with InstanceLock("/tmp/me-backup.lock"):
            run_backup()
    """

    def __init__(self, path: Path | str | None = None, *, pid: int | None = None) -> None:
        """Initialize the lock.

        Args:
            path: Lock file path; derived from the script name when omitted.
            pid: PID written to the lock; defaults to the current process.
        """
        self.path = Path(path) if path is not None else default_lock_path()
        self.pid = pid if pid is not None else os.getpid()
        self._log = logger.bind(component=COMPONENT_LIFECYCLE, lock_file=str(self.path))

    def _remove_stale(self, reason: str) -> None:
        self._log.warning("lock_stale_removed", reason=reason)
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise LockFileError(self.path, "remove", str(e)) from e

    def read_pid(self) -> str | None:
        """Return the raw lock contents, or None when there is no lock file."""
        try:
            return self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise LockFileError(self.path, "read", str(e)) from e

    def check_running(self) -> None:
        """Ensure no other live instance holds the lock.

        Stale locks (unparseable contents or a dead PID) are removed.

        Raises:
            InstanceLockError: If a live process other than ours holds it.
            LockFileError: If the lock cannot be read or removed.
        """
        contents = self.read_pid()
        if contents is None:
            return

        if not contents.isdigit():
            self._remove_stale("invalid_pid")
            return

        holder = int(contents)
        if holder == self.pid:
            return
        if not pid_alive(holder):
            self._remove_stale("process_not_found")
            return

        self._log.error("lock_held", pid=holder)
        raise InstanceLockError(self.path, holder)

    def acquire(self) -> None:
        """Check for other instances and write our PID.

        Raises:
            InstanceLockError: If another live instance holds the lock.
            LockFileError: If the lock file cannot be created.
        """
        self.check_running()
        if self.read_pid() == str(self.pid):
            return

        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        except FileExistsError as e:
            contents = self.read_pid() or "0"
            raise InstanceLockError(
                self.path, int(contents) if contents.isdigit() else 0
            ) from e
        except OSError as e:
            raise LockFileError(self.path, "create", str(e)) from e

        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(f"{self.pid}\n")
        self._log.debug("lock_created", pid=self.pid)

    def release(self) -> bool:
        """Remove the lock if it holds our PID.

        Returns:
            True if a lock file was removed.
        """
        if self.read_pid() != str(self.pid):
            return False
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise LockFileError(self.path, "remove", str(e)) from e
        self._log.debug("lock_released", pid=self.pid)
        return True

    def __enter__(self) -> "InstanceLock":
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()
