"""Exceptions raised while converting mindmaps."""

from __future__ import annotations

from enum import Enum


class MindmapError(Exception):
    """Base class for all conversion errors."""


class ParseErrorKind(Enum):
    NO_ROOT_NODE = "no root node found"
    INVALID_ARCHIVE = "not a readable archive"
    NO_CONTENT_ENTRY = "content.xml not found"
    NO_SHEET = "no sheet found"
    NO_ROOT_TOPIC = "no root topic found"


class ParseError(MindmapError):
    """Structural failure that aborts a whole conversion."""

    def __init__(self, kind: ParseErrorKind, message: str = ""):
        self.kind = kind
        super().__init__(message or kind.value)


class StoreErrorKind(Enum):
    WRITE_FAILED = "write failed"
    DELETE_FAILED = "delete failed"


class StoreError(MindmapError):
    """A single asset could not be written or deleted."""

    def __init__(self, kind: StoreErrorKind, path: str):
        self.kind = kind
        self.path = path
        super().__init__(f"{kind.value}: {path}")


class ResourceExtractFailed(MindmapError):
    """An archive entry could not be read."""

    def __init__(self, entry_name: str):
        self.entry_name = entry_name
        super().__init__(f"Failed to process resource: {entry_name}")
