"""Process lifecycle helpers: single-instance lock and exit cleanup."""

from layerconf.lifecycle.cleanup import CleanupRegistry, die, ensure_single_instance
from layerconf.lifecycle.lock import (
    InstanceLock,
    InstanceLockError,
    LockFileError,
    default_lock_path,
    pid_alive,
)


__all__ = [
    "CleanupRegistry",
    "InstanceLock",
    "InstanceLockError",
    "LockFileError",
    "default_lock_path",
    "die",
    "ensure_single_instance",
    "pid_alive",
]
