"""EditorService — create, update, delete and move pages and folders.

Pipeline per mutation: AUTHORIZE → VALIDATE → RESOLVE → PROTECT → MUTATE → RESPOND

INVARIANT: every rejection (capability, path gate, system file, missing
target, collision) happens before the file mutator is called, so a
rejected request has no side effects. The one exception is a delete whose
backup fails under the best-effort policy: the document is removed and
the result carries a warning.

Callers pass an :class:`EditorIdentity` into every mutation; nothing here
reads session state.
"""

from __future__ import annotations

from pathlib import Path

from docshelf.config.logging import get_logger
from docshelf.domain.models import EditorIdentity
from docshelf.domain.paths import is_safe_write_path, is_system_file
from docshelf.domain.slugs import (
    ensure_markdown_extension,
    is_markdown,
    ordering_prefix,
    sanitize_filename,
    slug_for,
    slug_path,
    strip_prefix,
    title_to_slug,
    to_title_case,
)
from docshelf.domain.types import ErrorCode
from docshelf.infrastructure.filesystem import MutationError
from docshelf.infrastructure.resolver import DirectoryIndex
from docshelf.services._helpers import mtime_iso, split_parent
from docshelf.services.base import BaseService
from docshelf.services.result import ServiceResult
from docshelf.services.telemetry import trace_span, traced

log = get_logger(__name__)


class EditorService(BaseService):
    """Mutations on the content tree, gated by an editor capability."""

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------

    def _authorize(self, op: str, identity: EditorIdentity) -> ServiceResult | None:
        if not self._site.settings.editor.enabled:
            return ServiceResult.failure(op, ErrorCode.UNAUTHORIZED, "Editing is disabled")
        if not identity.authenticated:
            return ServiceResult.failure(op, ErrorCode.UNAUTHORIZED, "Authentication required")
        return None

    def _check_path(self, op: str, path: str) -> ServiceResult | None:
        if is_safe_write_path(path, self._site.content_root) is None:
            return ServiceResult.failure(op, ErrorCode.INVALID_PATH, f"Invalid path: {path!r}")
        return None

    @staticmethod
    def _protect(op: str, name: str) -> ServiceResult | None:
        if is_system_file(name):
            return ServiceResult.failure(
                op, ErrorCode.SYSTEM_FILE_PROTECTED, f"Cannot modify system file: {name}"
            )
        return None

    @staticmethod
    def _slug_taken(directory: Path, slug: str, *, ignore: str | None = None) -> str | None:
        """Name of an existing entry in *directory* that already owns *slug*."""
        index = DirectoryIndex.scan(directory)
        if index is None:
            return None
        for entry in index.candidates(slug):
            if entry.name != ignore:
                return entry.name
        return None

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @traced
    def create(
        self,
        identity: EditorIdentity,
        parent_path: str,
        name: str,
        *,
        directory: bool = False,
        content: str | None = None,
        filename: str | None = None,
    ) -> ServiceResult:
        """Create a page (or folder) named *name* under *parent_path*.

        The on-disk name gets the next free ordering prefix of the parent:
        ``My Page`` next to ``01-intro.md`` and ``02-setup.md`` becomes
        ``03-my-page.md``. An explicit *filename* is used as given
        (sanitised, ``.md`` appended). Empty *content* defaults to a
        level-1 heading with the title-cased name.
        """
        op = "create"
        if denied := self._authorize(op, identity):
            return denied
        if not name.strip():
            return ServiceResult.failure(op, ErrorCode.INVALID_INPUT, "A name is required")

        with trace_span("validate"):
            if bad := self._check_path(op, parent_path):
                return bad
            parent_dir = self._site.resolver.resolve_directory_path(parent_path)
            if parent_dir is None:
                return ServiceResult.failure(
                    op, ErrorCode.NOT_FOUND, f"Parent directory not found: {parent_path}"
                )
            prefix = self._site.resolver.next_prefix(parent_path)
            slug = sanitize_filename(title_to_slug(name))

            if directory:
                actual = f"{prefix}-{slug}"
            elif filename:
                actual = ensure_markdown_extension(sanitize_filename(filename))
            else:
                actual = f"{prefix}-{slug}.md"

            if blocked := self._protect(op, actual):
                return blocked
            public_slug = slug_for(actual)
            if (parent_dir / actual).exists():
                return ServiceResult.failure(
                    op, ErrorCode.ALREADY_EXISTS, f"Already exists: {actual}"
                )
            if owner := self._slug_taken(parent_dir, public_slug):
                return ServiceResult.failure(
                    op,
                    ErrorCode.ALREADY_EXISTS,
                    f"Slug {public_slug!r} is already used by {owner}",
                    existing=owner,
                )

        relative = self._site.relative(parent_dir / actual)
        with trace_span("persist"):
            try:
                if directory:
                    self._site.files.create_directory(relative)
                else:
                    body = content or f"# {to_title_case(name.strip())}\n\n"
                    self._site.files.write_file(relative, body)
            except MutationError as exc:
                return self._from_error(op, exc)

        kind = "directory" if directory else "file"
        new_path = slug_path(relative)
        log.info("content.created", path=new_path, real_path=relative, type=kind, by=identity.name)
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": new_path, "real_path": relative, "filename": actual, "type": kind},
        )

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    @traced
    def update(self, identity: EditorIdentity, path: str, content: str | None) -> ServiceResult:
        """Replace the markdown of an existing document."""
        op = "update"
        if denied := self._authorize(op, identity):
            return denied
        if content is None:
            return ServiceResult.failure(op, ErrorCode.INVALID_INPUT, "Content is required")
        if bad := self._check_path(op, path):
            return bad

        target = self._site.resolver.resolve_write_path(path)
        if target is None or not target.exists:
            return ServiceResult.failure(op, ErrorCode.NOT_FOUND, f"File not found: {path}")
        if blocked := self._protect(op, target.path.name):
            return blocked

        with trace_span("write"):
            try:
                written = self._site.files.write_file(target.real_path, content)
                last_modified = mtime_iso(written)
            except MutationError as exc:
                return self._from_error(op, exc)
            except OSError as exc:
                return self._from_os_error(op, exc)

        log.info("content.updated", path=path, real_path=target.real_path, by=identity.name)
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": path, "real_path": target.real_path, "last_modified": last_modified},
        )

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    @traced
    def delete(self, identity: EditorIdentity, path: str) -> ServiceResult:
        """Delete the document behind *path*, or the empty directory.

        A directory slug with an ``index.md`` targets that landing page
        first; once the directory is empty, deleting its slug removes it.
        """
        op = "delete"
        if denied := self._authorize(op, identity):
            return denied
        if bad := self._check_path(op, path):
            return bad

        target = self._site.resolver.resolve_write_path(path)
        if target is not None and target.exists:
            if blocked := self._protect(op, target.path.name):
                return blocked
            with trace_span("backup_and_unlink"):
                try:
                    removal = self._site.files.delete_file(target.real_path)
                except MutationError as exc:
                    return self._from_error(op, exc)

            warnings: list[str] = []
            if removal.backup_error:
                warnings.append(f"Backup failed, document deleted anyway: {removal.backup_error}")
            backup_name = removal.backup.name if removal.backup else None
            log.info(
                "content.deleted",
                path=path,
                real_path=target.real_path,
                backup=backup_name,
                by=identity.name,
            )
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "path": path,
                    "real_path": target.real_path,
                    "type": "directory" if removal.was_directory else "file",
                    "backup_file": backup_name,
                },
                warnings=warnings,
            )

        return self._delete_directory(op, identity, path)

    @traced
    def delete_directory(self, identity: EditorIdentity, path: str) -> ServiceResult:
        """Remove the directory behind *path*; only succeeds when it is empty."""
        op = "delete_directory"
        if denied := self._authorize(op, identity):
            return denied
        if bad := self._check_path(op, path):
            return bad
        return self._delete_directory(op, identity, path)

    def _delete_directory(self, op: str, identity: EditorIdentity, path: str) -> ServiceResult:
        dir_path = self._site.resolver.resolve_directory_path(path)
        if dir_path is None:
            return ServiceResult.failure(
                op, ErrorCode.NOT_FOUND, f"File or directory not found: {path}"
            )
        if dir_path == self._site.content_root:
            return ServiceResult.failure(op, ErrorCode.INVALID_PATH, "Cannot delete the root")
        if blocked := self._protect(op, dir_path.name):
            return blocked

        relative = self._site.relative(dir_path)
        try:
            self._site.files.delete_directory(relative)
        except MutationError as exc:
            return self._from_error(op, exc)

        log.info("content.deleted", path=path, real_path=relative, type="directory", by=identity.name)
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": path, "real_path": relative, "type": "directory"},
        )

    # ------------------------------------------------------------------
    # Move / rename
    # ------------------------------------------------------------------

    @traced
    def move(
        self,
        identity: EditorIdentity,
        path: str,
        *,
        destination: str | None = None,
        new_filename: str | None = None,
    ) -> ServiceResult:
        """Rename in place (*new_filename*) or move to a slug *destination*.

        *new_filename* is an on-disk name and is kept as given (sanitised,
        ``.md`` appended for documents). *destination* is a slug path
        ``parent/name``; the entry keeps an ordering prefix by taking the
        next free one in the destination directory. Nothing is ever
        overwritten.
        """
        op = "move"
        if denied := self._authorize(op, identity):
            return denied
        if destination is None and new_filename is None:
            return ServiceResult.failure(
                op, ErrorCode.INVALID_INPUT, "Destination or new filename is required"
            )
        if bad := self._check_path(op, path):
            return bad

        # ── RESOLVE SOURCE ──────────────────────────────────────────
        with trace_span("resolve_source"):
            target = self._site.resolver.resolve_write_path(path)
            if target is not None and target.exists and not target.is_directory:
                source, is_file = target.path, True
            else:
                dir_path = self._site.resolver.resolve_directory_path(path)
                if dir_path is None or dir_path == self._site.content_root:
                    return ServiceResult.failure(
                        op, ErrorCode.NOT_FOUND, f"Source not found: {path}"
                    )
                source, is_file = dir_path, False
            if blocked := self._protect(op, source.name):
                return blocked

        # ── RESOLVE DESTINATION ─────────────────────────────────────
        with trace_span("resolve_destination"):
            if new_filename is not None:
                dest_dir = source.parent
                dest_name = sanitize_filename(new_filename)
            else:
                destination = destination or ""
                if bad := self._check_path(op, destination):
                    return bad
                dest_parent, dest_leaf = split_parent(destination)
                found_dir = self._site.resolver.resolve_directory_path(dest_parent)
                if found_dir is None:
                    return ServiceResult.failure(
                        op,
                        ErrorCode.NOT_FOUND,
                        f"Destination directory not found: {dest_parent}",
                    )
                dest_dir = found_dir
                dest_name = sanitize_filename(dest_leaf)
                if ordering_prefix(dest_name) is None and ordering_prefix(source.name) is not None:
                    if dest_dir == source.parent:
                        stem = strip_prefix(source.name)
                        prefix = source.name[: len(source.name) - len(stem)]
                    else:
                        prefix = f"{self._site.resolver.next_prefix(dest_parent)}-"
                    dest_name = f"{prefix}{dest_name}"

            if is_file and not is_markdown(dest_name):
                dest_name = ensure_markdown_extension(dest_name)
            if blocked := self._protect(op, dest_name):
                return blocked

            dest = dest_dir / dest_name
            if not is_file and dest.resolve().is_relative_to(source.resolve()):
                return ServiceResult.failure(
                    op, ErrorCode.INVALID_PATH, "Cannot move a directory into itself"
                )
            if dest.exists():
                return ServiceResult.failure(
                    op, ErrorCode.ALREADY_EXISTS, f"Destination already exists: {dest_name}"
                )
            ignore = source.name if dest_dir == source.parent else None
            if owner := self._slug_taken(dest_dir, slug_for(dest_name), ignore=ignore):
                return ServiceResult.failure(
                    op,
                    ErrorCode.ALREADY_EXISTS,
                    f"Slug {slug_for(dest_name)!r} is already used by {owner}",
                    existing=owner,
                )

        old_relative = self._site.relative(source)
        new_relative = self._site.relative(dest)
        with trace_span("rename"):
            try:
                self._site.files.move(old_relative, new_relative)
            except MutationError as exc:
                return self._from_error(op, exc)

        new_path = slug_path(new_relative)
        log.info(
            "content.moved",
            old_path=path,
            new_path=new_path,
            real_path=new_relative,
            by=identity.name,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "old_path": path,
                "new_path": new_path,
                "real_path": new_relative,
                "type": "file" if is_file else "directory",
            },
        )
