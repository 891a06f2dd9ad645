"""Safe write protocol: check version, back up, then replace the config."""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from sshconfman.config import ManagerConfig
from sshconfman.document import ConfigDocument, read_config
from sshconfman.errors import (
    BackupCollisionError,
    BackupWriteError,
    ConcurrentModificationError,
    SourceUnavailableError,
    TargetWriteError,
)
from sshconfman.hashing import HashingReader, read_and_hash

logger = logging.getLogger(__name__)

BACKUP_DIR_MODE = 0o700
BACKUP_FILE_MODE = 0o600
BACKUP_SUFFIX = ".backup"
NEW_CONFIG_MODE = 0o600


@dataclass
class Backup:
    """A completed backup of the config file."""

    path: Path
    file_version: str
    size_bytes: int


def backup_file_name(config_path: Path, timestamp: datetime) -> str:
    """Backup name for config_path taken at timestamp, e.g. config.20240101-120000-000001.backup."""
    return f"{config_path.name}.{timestamp:%Y%m%d-%H%M%S-%f}{BACKUP_SUFFIX}"


def create_backup(settings: ManagerConfig, timestamp: datetime | None = None) -> Backup:
    """
    Copy the current config file byte-for-byte into the backup directory.

    The backup is flushed to disk and closed before this returns. An existing
    backup with the same name is never overwritten.

    Args:
        settings: Config location and backup directory name
        timestamp: Time used to name the backup (default: now)

    Returns:
        The backup, with the version hash of the bytes copied

    Raises:
        SourceUnavailableError: If the config file cannot be read
        BackupCollisionError: If the backup file already exists
        BackupWriteError: If the directory or file cannot be written
    """
    backup_dir = settings.backup_dir
    try:
        backup_dir.mkdir(mode=BACKUP_DIR_MODE, exist_ok=True)
    except OSError as e:
        raise BackupWriteError(
            "Cannot create backup directory",
            context={"path": backup_dir},
            original_error=e,
        ) from e

    backup_path = backup_dir / backup_file_name(settings.config_path, timestamp or datetime.now())

    try:
        source = open(settings.config_path, "rb")
    except OSError as e:
        raise SourceUnavailableError(
            "Cannot read SSH config",
            context={"path": settings.config_path},
            original_error=e,
        ) from e

    with source:
        try:
            fd = os.open(backup_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, BACKUP_FILE_MODE)
        except FileExistsError as e:
            raise BackupCollisionError(
                "Backup file already exists",
                context={"path": backup_path},
                original_error=e,
            ) from e
        except OSError as e:
            raise BackupWriteError(
                "Cannot create backup file",
                context={"path": backup_path},
                original_error=e,
            ) from e

        reader = HashingReader(source, settings.chunk_size)
        try:
            with os.fdopen(fd, "wb") as backup:
                for chunk in reader:
                    backup.write(chunk)
                backup.flush()
                os.fsync(backup.fileno())
        except OSError as e:
            # Only this process created the file, so a partial copy is ours to drop
            backup_path.unlink(missing_ok=True)
            raise BackupWriteError(
                "Cannot write backup file",
                context={"path": backup_path},
                original_error=e,
            ) from e

    logger.info(f"Backed up {settings.config_path} to {backup_path} ({reader.bytes_read} bytes)")
    return Backup(path=backup_path, file_version=reader.hexdigest(), size_bytes=reader.bytes_read)


def update_config(
    document: ConfigDocument,
    expected_file_version: str,
    settings: ManagerConfig,
) -> Path:
    """
    Write document to the config file if the file is still at expected_file_version.

    The file on disk is re-read and hashed first. A backup of it is then
    written and closed, and only after that is the config replaced.

    Args:
        document: Records to write
        expected_file_version: Version of the file the caller last read
        settings: Config location, backup directory and formatting

    Returns:
        Path of the backup holding the previous content

    Raises:
        SourceUnavailableError: If the config file cannot be read
        ConcurrentModificationError: If the file changed since it was read
        BackupCollisionError: If the backup name is already taken
        BackupWriteError: If the backup cannot be written
        TargetWriteError: If the config cannot be replaced
    """
    path = settings.config_path
    current = read_config(settings)
    _check_version(path, expected_file_version, current.file_version)

    try:
        content = document.serialize(settings.indent).encode(settings.encoding)
    except UnicodeEncodeError as e:
        raise TargetWriteError(
            "Cannot encode SSH config",
            context={"path": path, "encoding": settings.encoding},
            original_error=e,
        ) from e

    backup = create_backup(settings)
    # The file may have changed between the check above and the copy
    _check_version(path, expected_file_version, backup.file_version, backup_path=backup.path)

    _replace_file(path, content, backup_path=backup.path)
    logger.info(f"Wrote {len(document)} host(s) to {path}")
    return backup.path


def list_backups(settings: ManagerConfig) -> list[Path]:
    """Backups of the config file, oldest first."""
    backup_dir = settings.backup_dir
    if not backup_dir.is_dir():
        return []
    return sorted(backup_dir.glob(f"{settings.config_path.name}.*{BACKUP_SUFFIX}"))


def restore_backup(backup_path: Path, settings: ManagerConfig) -> Path | None:
    """
    Replace the config file with the content of a backup.

    The current config, if any, is backed up first.

    Returns:
        Path of the backup of the replaced content, or None if there was no config

    Raises:
        SourceUnavailableError: If the backup cannot be read
        TargetWriteError: If the config cannot be replaced
    """
    try:
        content, backup_version = read_and_hash(backup_path, settings.chunk_size)
    except OSError as e:
        raise SourceUnavailableError(
            "Cannot read backup",
            context={"path": backup_path},
            original_error=e,
        ) from e

    previous = None
    if settings.config_path.exists():
        previous = create_backup(settings).path

    _replace_file(settings.config_path, content, backup_path=previous)
    logger.info(f"Restored {settings.config_path} from {backup_path} (version {backup_version[:12]})")
    return previous


def _check_version(path: Path, expected: str, actual: str, backup_path: Path | None = None) -> None:
    if actual == expected:
        return
    context = {"path": path, "expected": expected, "actual": actual}
    if backup_path is not None:
        context["backup_path"] = backup_path
    raise ConcurrentModificationError("SSH config changed since it was read", context=context)


def _replace_file(path: Path, content: bytes, backup_path: Path | None) -> None:
    """
    Atomically replace path with content, keeping its permission bits.

    A symlinked path stays a symlink: the file it points to is replaced.
    """
    context = {"path": path, "backup_path": backup_path}
    tmp_path = None
    try:
        target = path.resolve()
        if target != path:
            context["target"] = target
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if target.exists():
            shutil.copymode(target, tmp_path)
        else:
            tmp_path.chmod(NEW_CONFIG_MODE)
        os.replace(tmp_path, target)
    except OSError as e:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise TargetWriteError("Cannot write SSH config", context=context, original_error=e) from e
