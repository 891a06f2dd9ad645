"""Exceptions raised by the SSH config core.

Every error carries the path or version tokens involved and, when it wraps
an OS-level failure, the original exception.
"""

from typing import Any


class SSHConfigError(Exception):
    """Base exception for all sshconfman errors.

    Attributes:
        message: Error message
        context: Additional context (e.g., path, file_version)
        original_error: Original exception if this wraps another error
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        base = self.message
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base = f"{base} ({ctx_str})"
        if self.original_error:
            base = f"{base} [caused by: {type(self.original_error).__name__}: {self.original_error}]"
        return base


class SourceUnavailableError(SSHConfigError):
    """Raised when the config file cannot be opened or read.

    Common context fields:
        - path: Config file path
    """

    pass


class MalformedSectionError(SSHConfigError):
    """Raised when a Host block cannot be scanned into lines.

    Common context fields:
        - section: Index of the block in the file
        - line_number: Line within the block, when known
    """

    pass


class ConcurrentModificationError(SSHConfigError):
    """Raised when the file changed on disk since the caller read it.

    Common context fields:
        - path: Config file path
        - expected: File version the caller observed
        - actual: File version currently on disk
    """

    pass


class BackupCollisionError(SSHConfigError):
    """Raised when the generated backup file name already exists."""

    pass


class BackupWriteError(SSHConfigError):
    """Raised on I/O failure while creating the backup directory or file."""

    pass


class TargetWriteError(SSHConfigError):
    """Raised on I/O failure while writing the config file.

    Common context fields:
        - path: Config file path
        - backup_path: Backup holding the pre-write content
    """

    pass


class StaleRecordError(SSHConfigError):
    """Raised when no record carries the identity presented by the caller."""

    pass
