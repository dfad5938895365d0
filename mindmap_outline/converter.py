"""Conversion entry points: source document in, markdown outline out."""

from __future__ import annotations

import logging
import posixpath
from typing import Callable, Optional

from .assets import AssetLedger, AssetStore
from .config import Settings
from .markdown import to_markdown
from .models import Node, SourceFormat
from .reader import parse_archive_tree, parse_plain_tree
from .storage import Storage

logger = logging.getLogger(__name__)


def detect_format(path: str) -> SourceFormat:
    """Pick the source format from a file extension.

    Raises:
        ValueError: If the extension is not `.mm` or `.xmind`.
    """
    ext = posixpath.splitext(path)[1].lower()
    for fmt in SourceFormat:
        if fmt.extension == ext:
            return fmt
    raise ValueError(f"Unsupported mindmap file: {path}")


def render_plain_tree(raw_text: str) -> str:
    """Convert plain-tree XML text to a markdown outline."""
    return to_markdown(parse_plain_tree(raw_text))


def render_archive_tree(
    raw_bytes: bytes,
    doc_id: str,
    settings: Settings,
    storage: Storage,
    ledger: Optional[AssetLedger] = None,
    notify: Optional[Callable[[str], None]] = None,
) -> str:
    """Convert an archive-tree document to a markdown outline.

    Assets written by the previous render of `doc_id` (as recorded in
    `ledger`) are removed first when cleanup is enabled, then the archive's
    resources are stored again and linked from the outline.
    """
    store = AssetStore(storage, settings, ledger, notify)
    return to_markdown(_load_archive_tree(raw_bytes, doc_id, store))


def _load_archive_tree(raw_bytes: bytes, doc_id: str, store: AssetStore) -> Node:
    store.cleanup(doc_id)
    root, resources = parse_archive_tree(raw_bytes, doc_id, store)
    logger.debug("%s: %d resource(s) linked", doc_id, len(resources))
    return root


class Converter:
    """Converts documents read from one `Storage`.

    A converter keeps the asset ledger for its lifetime, so converting the
    same document again replaces the assets from the previous conversion.
    """

    def __init__(
        self,
        storage: Storage,
        settings: Optional[Settings] = None,
        ledger: Optional[AssetLedger] = None,
        notify: Optional[Callable[[str], None]] = None,
    ):
        self.storage = storage
        self.settings = settings or Settings()
        self.ledger = ledger if ledger is not None else AssetLedger()
        self.notify = notify

    @property
    def store(self) -> AssetStore:
        return AssetStore(self.storage, self.settings, self.ledger, self.notify)

    def load(self, doc_id: str) -> Node:
        """Read and parse a document into its Node tree.

        Archive documents have their resources extracted as a side effect.
        """
        fmt = detect_format(doc_id)
        if fmt == SourceFormat.PLAIN_TREE:
            return parse_plain_tree(self.storage.read_text(doc_id))
        return _load_archive_tree(self.storage.read_binary(doc_id), doc_id, self.store)

    def convert(self, doc_id: str) -> str:
        """Convert a document to its markdown outline.

        Raises:
            ParseError: If the document is structurally invalid.
            ValueError: If the file type is not supported.
        """
        outline = to_markdown(self.load(doc_id))
        logger.info("Converted %s (%d chars)", doc_id, len(outline))
        return outline
