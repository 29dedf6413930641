"""Site — repository over one content tree.

The Site is the single dependency injected into every service. It owns the
path resolver, tree builder and file mutator for the configured content
root, so services never assemble filesystem paths themselves.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from docshelf.infrastructure.filesystem import FileMutator
from docshelf.infrastructure.resolver import PathResolver
from docshelf.infrastructure.tree import TreeBuilder

if TYPE_CHECKING:
    from docshelf.config.settings import DocshelfSettings

logger = logging.getLogger(__name__)


class Site:
    """Repository encapsulating resolution, navigation and mutation.

    Constructed once at CLI startup from :class:`DocshelfSettings` and
    stored on the click context. Services receive the Site via their
    :class:`BaseService` constructor.
    """

    def __init__(self, settings: DocshelfSettings) -> None:
        self._settings = settings
        editor = settings.editor
        self._resolver = PathResolver(self.content_root, strict_slugs=editor.strict_slugs)
        self._tree = TreeBuilder(self.content_root)
        self._mutator = FileMutator(
            self.content_root,
            backup_dir=self.backup_dir,
            lock_timeout=editor.lock_timeout,
            require_backup=editor.require_backup,
        )
        logger.debug("Site ready: content=%s backups=%s", self.content_root, self.backup_dir)

    @property
    def settings(self) -> DocshelfSettings:
        """The resolved settings for this site."""
        return self._settings

    @property
    def content_root(self) -> Path:
        """The markdown tree root."""
        return self._settings.content_path

    @property
    def backup_dir(self) -> Path:
        """Where deleted documents are copied."""
        return self._settings.backup_path

    @property
    def base_url(self) -> str:
        """Routing root prepended to rewritten links."""
        return self._settings.site.base_url

    @property
    def resolver(self) -> PathResolver:
        return self._resolver

    @property
    def tree(self) -> TreeBuilder:
        return self._tree

    @property
    def files(self) -> FileMutator:
        return self._mutator

    def relative(self, path: Path) -> str:
        """Content-root-relative POSIX path."""
        return self._resolver.relative(path)
