"""Node kinds and error codes shared across layers."""

from __future__ import annotations

from enum import StrEnum


class NodeType(StrEnum):
    """Kinds of entries in the navigation tree."""

    DIR = "dir"
    FILE = "file"
    SECTION = "section"


class ErrorCode(StrEnum):
    """Failure kinds surfaced in ``ServiceError.code``."""

    NOT_FOUND = "NOT_FOUND"
    INVALID_PATH = "INVALID_PATH"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    NOT_EMPTY = "NOT_EMPTY"
    SYSTEM_FILE_PROTECTED = "SYSTEM_FILE_PROTECTED"
    IO_FAILURE = "IO_FAILURE"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_INPUT = "INVALID_INPUT"
