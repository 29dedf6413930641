"""BaseService — foundation for docshelf services.

Every service receives a :class:`Site` at construction time. The Site
provides the resolver, tree builder and file mutator for one content root.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from docshelf.domain.types import ErrorCode
from docshelf.infrastructure.filesystem import MutationError
from docshelf.services.result import ServiceResult

if TYPE_CHECKING:
    from docshelf.infrastructure.site import Site

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class ContentService(BaseService):
            def get_doc(self, path: str) -> ServiceResult:
                resolved = self._site.resolver.resolve(path)
                ...
    """

    def __init__(self, site: Site) -> None:
        self._site = site

    @staticmethod
    def _from_error(op: str, exc: MutationError) -> ServiceResult:
        """Convert a mutator error into a failed result."""
        detail = {"path": exc.path} if exc.path else {}
        return ServiceResult.failure(op, exc.code, exc.message, **detail)

    @staticmethod
    def _from_os_error(op: str, exc: OSError) -> ServiceResult:
        """Convert an unexpected OS error into an ``IO_FAILURE`` result."""
        logger.warning("%s failed: %s", op, exc, exc_info=True)
        return ServiceResult.failure(op, ErrorCode.IO_FAILURE, str(exc))
