"""Tests for FileMutator: locked writes, backups, deletes and moves."""

from __future__ import annotations

import errno
import fcntl
import os
import re
import shutil
import stat
from pathlib import Path

import pytest

from docshelf.domain.types import ErrorCode
from docshelf.infrastructure.filesystem import (
    BackupFailedError,
    DirectoryNotEmptyError,
    FileMutator,
    InvalidTargetError,
    LockTimeoutError,
    StorageError,
    TargetExistsError,
    TargetNotFoundError,
)
from tests.conftest import snapshot

BACKUP_NAME = re.compile(r"^\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}(-\d+)?_guide_intro\.md$")


@pytest.fixture
def mutator(content_root: Path) -> FileMutator:
    return FileMutator(content_root, lock_timeout=0.2)


class TestConstruction:
    def test_default_backup_dir_is_sibling(self, content_root: Path) -> None:
        assert FileMutator(content_root).backup_dir == content_root.parent / ".backups"

    def test_backup_dir_inside_root_rejected(self, content_root: Path) -> None:
        with pytest.raises(ValueError, match="outside the content root"):
            FileMutator(content_root, backup_dir=content_root / ".backups")


class TestReads:
    def test_read_file(self, mutator: FileMutator) -> None:
        assert mutator.read_file("01-guide/01-intro.md") == "# Intro\n\nHello.\n"
        assert mutator.read_file("01-guide/missing.md") is None
        assert mutator.read_file("01-guide") is None

    def test_predicates(self, mutator: FileMutator) -> None:
        assert mutator.exists("01-guide/01-intro.md")
        assert not mutator.exists("nope.md")
        assert mutator.is_directory("01-guide")
        assert not mutator.is_directory("index.md")
        assert mutator.is_directory_empty("03-empty")
        assert not mutator.is_directory_empty("01-guide")

    def test_file_info(self, mutator: FileMutator) -> None:
        info = mutator.file_info("01-guide/01-intro.md")
        assert info is not None
        assert info["path"] == "01-guide/01-intro.md"
        assert info["is_directory"] is False
        assert info["size"] == len("# Intro\n\nHello.\n")
        assert "T" in info["last_modified"]
        assert mutator.file_info("01-guide")["size"] is None  # type: ignore[index]
        assert mutator.file_info("nope.md") is None

    def test_escape_rejected(self, mutator: FileMutator) -> None:
        with pytest.raises(InvalidTargetError):
            mutator.read_file("../outside.md")


class TestWrite:
    def test_creates_parents_and_file(self, mutator: FileMutator, content_root: Path) -> None:
        written = mutator.write_file("04-new/deep/page.md", "# Page\n")
        assert written == content_root / "04-new" / "deep" / "page.md"
        assert written.read_text() == "# Page\n"
        assert stat.S_IMODE(written.stat().st_mode) & 0o600 == 0o600

    def test_truncates_longer_content(self, mutator: FileMutator, content_root: Path) -> None:
        mutator.write_file("01-guide/01-intro.md", "x")
        assert (content_root / "01-guide" / "01-intro.md").read_text() == "x"

    def test_lock_timeout(self, mutator: FileMutator, content_root: Path) -> None:
        target = content_root / "01-guide" / "02-setup.md"
        with target.open("r") as holder:
            fcntl.flock(holder.fileno(), fcntl.LOCK_EX)
            try:
                with pytest.raises(LockTimeoutError) as excinfo:
                    mutator.write_file("01-guide/02-setup.md", "late")
            finally:
                fcntl.flock(holder.fileno(), fcntl.LOCK_UN)
        assert excinfo.value.code == ErrorCode.IO_FAILURE
        assert target.read_text() == "# Setup\n\nInstall it.\n"

    def test_escape_rejected(self, mutator: FileMutator, content_root: Path) -> None:
        with pytest.raises(InvalidTargetError):
            mutator.write_file("../evil.md", "x")
        assert not (content_root.parent / "evil.md").exists()

    def test_create_directory(self, mutator: FileMutator, content_root: Path) -> None:
        created = mutator.create_directory("01-guide/04-new")
        assert created.is_dir()
        with pytest.raises(TargetExistsError):
            mutator.create_directory("01-guide/04-new")


class TestBackup:
    def test_backup_name_and_content(self, mutator: FileMutator) -> None:
        backup = mutator.create_backup("01-guide/01-intro.md")
        assert backup.parent == mutator.backup_dir
        assert BACKUP_NAME.match(backup.name)
        assert backup.read_text() == "# Intro\n\nHello.\n"

    def test_backups_are_never_overwritten(self, mutator: FileMutator) -> None:
        first = mutator.create_backup("01-guide/01-intro.md")
        second = mutator.create_backup("01-guide/01-intro.md")
        assert first != second
        assert first.exists() and second.exists()

    def test_backup_of_missing_file(self, mutator: FileMutator) -> None:
        with pytest.raises(TargetNotFoundError):
            mutator.create_backup("01-guide/nope.md")


class TestDelete:
    def test_backup_then_unlink(self, mutator: FileMutator, content_root: Path) -> None:
        removal = mutator.delete_file("01-guide/01-intro.md")
        assert not (content_root / "01-guide" / "01-intro.md").exists()
        assert removal.was_directory is False
        assert removal.backup is not None
        assert BACKUP_NAME.match(removal.backup.name)
        assert removal.backup_error is None

    def test_missing(self, mutator: FileMutator) -> None:
        with pytest.raises(TargetNotFoundError):
            mutator.delete_file("01-guide/nope.md")

    def test_delegates_directories(self, mutator: FileMutator, content_root: Path) -> None:
        removal = mutator.delete_file("03-empty")
        assert removal.was_directory is True
        assert not (content_root / "03-empty").exists()

    def test_non_empty_directory_untouched(self, mutator: FileMutator, content_root: Path) -> None:
        before = snapshot(content_root)
        with pytest.raises(DirectoryNotEmptyError) as excinfo:
            mutator.delete_directory("01-guide/03-advanced")
        assert excinfo.value.code == ErrorCode.NOT_EMPTY
        assert snapshot(content_root) == before

    def test_hidden_entry_counts(self, mutator: FileMutator, content_root: Path) -> None:
        (content_root / "03-empty" / ".keep").write_text("")
        with pytest.raises(DirectoryNotEmptyError):
            mutator.delete_directory("03-empty")

    def test_refuses_root(self, mutator: FileMutator) -> None:
        with pytest.raises(InvalidTargetError):
            mutator.delete_directory("")

    def test_delete_directory_on_file(self, mutator: FileMutator) -> None:
        with pytest.raises(TargetNotFoundError):
            mutator.delete_directory("index.md")


class TestBackupFailure:
    @pytest.fixture
    def broken_backups(self, content_root: Path) -> Path:
        """A backup location that cannot be created (its parent is a file)."""
        blocker = content_root.parent / "blocker"
        blocker.write_text("")
        return blocker / "backups"

    def test_best_effort_deletes_anyway(
        self, content_root: Path, broken_backups: Path
    ) -> None:
        mutator = FileMutator(content_root, backup_dir=broken_backups)
        removal = mutator.delete_file("01-guide/01-intro.md")
        assert removal.backup is None
        assert removal.backup_error
        assert not (content_root / "01-guide" / "01-intro.md").exists()

    def test_required_backup_aborts(self, content_root: Path, broken_backups: Path) -> None:
        mutator = FileMutator(content_root, backup_dir=broken_backups, require_backup=True)
        with pytest.raises(BackupFailedError) as excinfo:
            mutator.delete_file("01-guide/01-intro.md")
        assert excinfo.value.code == ErrorCode.IO_FAILURE
        assert (content_root / "01-guide" / "01-intro.md").exists()


class TestMove:
    def test_rename(self, mutator: FileMutator, content_root: Path) -> None:
        moved = mutator.move("01-guide/02-setup.md", "01-guide/02-install.md")
        assert moved == content_root / "01-guide" / "02-install.md"
        assert moved.read_text() == "# Setup\n\nInstall it.\n"
        assert not (content_root / "01-guide" / "02-setup.md").exists()

    def test_creates_destination_parents(self, mutator: FileMutator, content_root: Path) -> None:
        mutator.move("01-guide/02-setup.md", "04-new/01-setup.md")
        assert (content_root / "04-new" / "01-setup.md").is_file()

    def test_existing_destination_is_a_no_op(
        self, mutator: FileMutator, content_root: Path
    ) -> None:
        before = snapshot(content_root)
        with pytest.raises(TargetExistsError) as excinfo:
            mutator.move("01-guide/02-setup.md", "01-guide/01-intro.md")
        assert excinfo.value.code == ErrorCode.ALREADY_EXISTS
        assert snapshot(content_root) == before

    def test_missing_source(self, mutator: FileMutator) -> None:
        with pytest.raises(TargetNotFoundError):
            mutator.move("01-guide/nope.md", "01-guide/other.md")

    def test_cross_device_falls_back_to_copy(
        self,
        mutator: FileMutator,
        content_root: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def _exdev(src: object, dst: object) -> None:
            raise OSError(errno.EXDEV, os.strerror(errno.EXDEV))

        copied: list[tuple[str, str]] = []
        real_move = shutil.move

        def _record(src: str, dst: str) -> object:
            copied.append((src, dst))
            return real_move(src, dst)

        monkeypatch.setattr(os, "rename", _exdev)
        monkeypatch.setattr(shutil, "move", _record)
        mutator.move("01-guide/02-setup.md", "02-reference/02-setup.md")
        assert len(copied) == 1
        assert (content_root / "02-reference" / "02-setup.md").is_file()

    def test_other_os_errors_become_storage_errors(
        self,
        mutator: FileMutator,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def _denied(src: object, dst: object) -> None:
            raise PermissionError(errno.EACCES, "denied")

        monkeypatch.setattr(os, "rename", _denied)
        with pytest.raises(StorageError):
            mutator.move("01-guide/02-setup.md", "01-guide/09-setup.md")
