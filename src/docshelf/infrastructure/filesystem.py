"""File mutator — locked writes, backup-on-delete, collision-checked moves.

INVARIANT: Files are truth. Nothing is cached between calls; every
operation works on the tree as it is on disk right now.

All paths handed to :class:`FileMutator` are relative to the content root
and must stay inside it once resolved. Deleted documents are first copied
into the backup directory, which lives outside the content root and is
never read back.

Writers to the same file are serialised with an exclusive advisory
``flock``. Readers do not take the lock, so a reader may observe a file
mid-write.
"""

from __future__ import annotations

import errno
import fcntl
import logging
import os
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import IO, Any

from docshelf.domain.paths import is_within
from docshelf.domain.slugs import strip_prefix
from docshelf.domain.types import ErrorCode

logger = logging.getLogger(__name__)

DIR_MODE = 0o755
FILE_MODE = 0o644
BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

_LOCK_POLL_SECONDS = 0.05


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class MutationError(Exception):
    """Base error for filesystem mutations; ``code`` feeds ServiceError."""

    code: ErrorCode = ErrorCode.IO_FAILURE

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class TargetNotFoundError(MutationError):
    code = ErrorCode.NOT_FOUND


class InvalidTargetError(MutationError):
    code = ErrorCode.INVALID_PATH


class TargetExistsError(MutationError):
    code = ErrorCode.ALREADY_EXISTS


class DirectoryNotEmptyError(MutationError):
    code = ErrorCode.NOT_EMPTY


class StorageError(MutationError):
    """Underlying filesystem call failed (permissions, disk, lock)."""

    code = ErrorCode.IO_FAILURE


class LockTimeoutError(StorageError):
    pass


class BackupFailedError(StorageError):
    pass


@dataclass(frozen=True)
class Removal:
    """Outcome of a delete.

    ``backup`` is None for directories and for documents whose backup could
    not be written (best-effort policy).
    """

    path: str
    was_directory: bool
    backup: Path | None = None
    backup_error: str | None = None


# ---------------------------------------------------------------------------
# FileMutator
# ---------------------------------------------------------------------------


class FileMutator:
    """Mutating filesystem operations confined to one content root.

    Args:
        content_root: Directory holding the markdown tree.
        backup_dir: Where deleted documents are copied. Must be outside
            *content_root*; defaults to ``<content_root parent>/.backups``.
        lock_timeout: Seconds to wait for an exclusive write lock.
        require_backup: When True a failed backup aborts the delete;
            otherwise the delete proceeds and the failure is reported.
    """

    def __init__(
        self,
        content_root: Path,
        *,
        backup_dir: Path | None = None,
        lock_timeout: float = 5.0,
        require_backup: bool = False,
    ) -> None:
        self._root = content_root
        self._backup_dir = backup_dir or content_root.parent / ".backups"
        self._lock_timeout = lock_timeout
        self._require_backup = require_backup

        if is_within(self._backup_dir, self._root):
            msg = f"Backup directory must be outside the content root: {self._backup_dir}"
            raise ValueError(msg)

    @property
    def content_root(self) -> Path:
        return self._root

    @property
    def backup_dir(self) -> Path:
        return self._backup_dir

    def _full_path(self, relative: str) -> Path:
        """Absolute path for *relative*, refusing anything outside the root."""
        full = self._root / relative
        if not is_within(full, self._root):
            raise InvalidTargetError(f"Path escapes content root: {relative}", path=relative)
        return full

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_file(self, relative: str) -> str | None:
        """File content, or None if *relative* is not a readable file."""
        full = self._full_path(relative)
        if not full.is_file():
            return None
        try:
            return full.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            logger.warning("Failed to read %s", relative, exc_info=True)
            return None

    def exists(self, relative: str) -> bool:
        return self._full_path(relative).exists()

    def is_directory(self, relative: str) -> bool:
        return self._full_path(relative).is_dir()

    def is_directory_empty(self, relative: str) -> bool:
        full = self._full_path(relative)
        if not full.is_dir():
            return False
        try:
            return not any(full.iterdir())
        except OSError:
            return False

    def file_info(self, relative: str) -> dict[str, Any] | None:
        """Size and modification time of an entry, or None if absent."""
        full = self._full_path(relative)
        try:
            stat = full.stat()
        except OSError:
            return None
        is_dir = full.is_dir()
        return {
            "path": relative,
            "is_directory": is_dir,
            "size": None if is_dir else stat.st_size,
            "last_modified": datetime.fromtimestamp(stat.st_mtime).astimezone().isoformat(),
        }

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _acquire(self, handle: IO[str]) -> None:
        """Take an exclusive lock on *handle*, polling until the timeout."""
        deadline = time.monotonic() + self._lock_timeout
        while True:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                return
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    raise LockTimeoutError(
                        f"Timed out waiting for write lock on {handle.name}"
                    ) from None
                time.sleep(_LOCK_POLL_SECONDS)

    def write_file(self, relative: str, content: str) -> Path:
        """Replace the content of *relative*, creating it and its parents.

        The file is opened without truncation, locked, then truncated and
        written, so a competing writer never sees a half-truncated file.
        """
        full = self._full_path(relative)
        try:
            full.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
            fd = os.open(full, os.O_WRONLY | os.O_CREAT, FILE_MODE)
        except OSError as exc:
            raise StorageError(f"Cannot open {relative}: {exc.strerror}", path=relative) from exc

        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            self._acquire(handle)
            try:
                handle.truncate(0)
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            except OSError as exc:
                raise StorageError(
                    f"Cannot write {relative}: {exc.strerror}", path=relative
                ) from exc
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)

        logger.debug("Wrote %s (%d chars)", relative, len(content))
        return full

    def create_directory(self, relative: str) -> Path:
        """Create a new directory (and missing parents)."""
        full = self._full_path(relative)
        if full.exists():
            raise TargetExistsError(f"Already exists: {relative}", path=relative)
        try:
            full.mkdir(mode=DIR_MODE, parents=True)
        except OSError as exc:
            raise StorageError(
                f"Cannot create directory {relative}: {exc.strerror}", path=relative
            ) from exc
        logger.info("Created directory %s", relative)
        return full

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    def create_backup(self, relative: str) -> Path:
        """Copy a document into the backup store; returns the backup path.

        Named ``<timestamp>_<path>`` where the path has its ordering prefixes
        stripped and ``/`` replaced by ``_`` (``01-guide/01-intro.md`` becomes
        ``guide_intro.md``). An existing backup is never overwritten; a
        numeric suffix is added instead.
        """
        full = self._full_path(relative)
        if not full.is_file():
            raise TargetNotFoundError(f"Not a file: {relative}", path=relative)

        stamp = datetime.now().strftime(BACKUP_TIMESTAMP_FORMAT)
        flattened = "_".join(strip_prefix(part) for part in relative.split("/") if part)
        backup = self._backup_dir / f"{stamp}_{flattened}"
        counter = 1
        while backup.exists():
            backup = self._backup_dir / f"{stamp}-{counter}_{flattened}"
            counter += 1

        self._backup_dir.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
        shutil.copy2(full, backup)
        logger.info("Backed up %s to %s", relative, backup.name)
        return backup

    def delete_file(self, relative: str) -> Removal:
        """Delete a document (after backing it up) or an empty directory."""
        full = self._full_path(relative)
        if not full.exists():
            raise TargetNotFoundError(f"Not found: {relative}", path=relative)
        if full.is_dir():
            return self.delete_directory(relative)

        backup: Path | None = None
        backup_error: str | None = None
        try:
            backup = self.create_backup(relative)
        except OSError as exc:
            if self._require_backup:
                raise BackupFailedError(
                    f"Backup of {relative} failed, delete aborted: {exc}", path=relative
                ) from exc
            backup_error = str(exc)
            logger.warning("Backup of %s failed, deleting anyway: %s", relative, exc)

        try:
            full.unlink()
        except OSError as exc:
            raise StorageError(f"Cannot delete {relative}: {exc.strerror}", path=relative) from exc
        logger.info("Deleted %s", relative)
        return Removal(path=relative, was_directory=False, backup=backup, backup_error=backup_error)

    def delete_directory(self, relative: str) -> Removal:
        """Remove a directory that has no entries at all."""
        full = self._full_path(relative)
        if not full.is_dir():
            raise TargetNotFoundError(f"Not a directory: {relative}", path=relative)
        if full.resolve() == self._root.resolve():
            raise InvalidTargetError("Refusing to delete the content root", path=relative)
        try:
            has_entries = any(full.iterdir())
        except OSError as exc:
            raise StorageError(f"Cannot list {relative}: {exc.strerror}", path=relative) from exc
        if has_entries:
            raise DirectoryNotEmptyError(f"Directory is not empty: {relative}", path=relative)
        try:
            full.rmdir()
        except OSError as exc:
            raise StorageError(
                f"Cannot remove directory {relative}: {exc.strerror}", path=relative
            ) from exc
        logger.info("Removed directory %s", relative)
        return Removal(path=relative, was_directory=True)

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------

    def move(self, old_relative: str, new_relative: str) -> Path:
        """Rename or move an entry; never overwrites the destination.

        Falls back to copy + delete when the rename crosses devices.
        """
        source = self._full_path(old_relative)
        destination = self._full_path(new_relative)
        if not source.exists():
            raise TargetNotFoundError(f"Source not found: {old_relative}", path=old_relative)
        if destination.exists():
            raise TargetExistsError(
                f"Destination already exists: {new_relative}", path=new_relative
            )

        try:
            destination.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
            try:
                os.rename(source, destination)
            except OSError as exc:
                if exc.errno != errno.EXDEV:
                    raise
                logger.debug("Cross-device move %s -> %s", old_relative, new_relative)
                shutil.move(str(source), str(destination))
        except OSError as exc:
            raise StorageError(
                f"Cannot move {old_relative} to {new_relative}: {exc}", path=old_relative
            ) from exc

        logger.info("Moved %s -> %s", old_relative, new_relative)
        return destination
