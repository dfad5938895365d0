"""Persist embedded images and produce link text pointing at them.

Each saved asset gets a unique name `{stem}_{8 hex chars}.{ext}` under a base
folder chosen by `Settings.image_storage_strategy`. Paths written while
rendering a document are tracked in an `AssetLedger` so the next render of
the same document can remove them first.
"""

from __future__ import annotations

import logging
import posixpath
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from urllib.parse import quote

from .config import Settings, StorageStrategy
from .errors import StoreError, StoreErrorKind
from .storage import Storage, normalize_path

logger = logging.getLogger(__name__)

CENTRAL_ASSET_ROOT = "_mindmap-assets"
DEFAULT_EXTENSION = "png"

# Characters left alone by JavaScript's encodeURI
_URI_SAFE = "/;,?:@&=+$-_.!~*'()#"


@dataclass
class AssetLedger:
    """Paths written per source document, kept for the next cleanup."""
    written: Dict[str, List[str]] = field(default_factory=dict)

    def record(self, doc_id: str, path: str) -> None:
        self.written.setdefault(doc_id, []).append(path)

    def paths_for(self, doc_id: str) -> List[str]:
        return list(self.written.get(doc_id, []))

    def take(self, doc_id: str) -> List[str]:
        """Return the recorded paths for a document and forget them."""
        return self.written.pop(doc_id, [])


def split_filename(filename: str) -> tuple[str, str]:
    """Split `name.ext` into stem and extension.

    The stem stops at the first dot and the extension starts after the last
    one, so `chart.v2.png` gives `("chart", "png")`.
    """
    if "." not in filename:
        return filename, DEFAULT_EXTENSION
    stem = filename.split(".")[0]
    ext = filename.rsplit(".", 1)[1] or DEFAULT_EXTENSION
    return stem, ext


def unique_name(filename: str) -> str:
    stem, ext = split_filename(filename)
    return f"{stem}_{uuid.uuid4().hex[:8]}.{ext}"


class AssetStore:
    """Writes binary assets through a `Storage` on behalf of one session."""

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

    def asset_folder(self, doc_id: str) -> str:
        """Base folder for assets extracted from `doc_id`."""
        parent = posixpath.dirname(normalize_path(doc_id))
        base_name = posixpath.splitext(posixpath.basename(doc_id))[0]

        strategy = self.settings.image_storage_strategy
        if strategy == StorageStrategy.CENTRAL:
            return normalize_path(f"{CENTRAL_ASSET_ROOT}/{base_name}")
        if strategy == StorageStrategy.CUSTOM:
            return normalize_path(f"{self.settings.custom_asset_folder}/{base_name}")
        return normalize_path(f"{parent}/{base_name}.assets")

    def save(self, doc_id: str, filename: str, data: bytes) -> str:
        """Write `data` under the document's asset folder.

        Returns:
            Link text for the stored file, wiki or standard markdown form.

        Raises:
            StoreError: WRITE_FAILED if the folder or file could not be written.
        """
        folder = self.asset_folder(doc_id)
        file_path = normalize_path(f"{folder}/{unique_name(filename)}")

        try:
            if not self.storage.path_exists(folder):
                self.storage.create_dir(folder)
            # Never overwrite an earlier asset on a suffix collision
            while self.storage.path_exists(file_path):
                file_path = normalize_path(f"{folder}/{unique_name(filename)}")
            self.storage.write_binary(file_path, data)
        except OSError as e:
            logger.error("Failed to save image %s: %s", file_path, e)
            if self.notify is not None:
                self.notify(f"Failed to save image: {filename}")
            raise StoreError(StoreErrorKind.WRITE_FAILED, file_path) from e

        self.ledger.record(doc_id, file_path)
        logger.debug("Saved %s (%d bytes)", file_path, len(data))
        return self.link_text(file_path, filename)

    def link_text(self, file_path: str, filename: str) -> str:
        if self.settings.use_wiki_links:
            return f"![[{file_path}]]"
        return f"![{filename}]({quote(file_path, safe=_URI_SAFE)})"

    def cleanup(self, doc_id: str) -> int:
        """Delete assets written by the previous render of `doc_id`.

        Does nothing unless `cleanup_old_images` is set. A failed delete is
        logged and the remaining paths are still removed; the ledger entry is
        cleared either way.

        Returns:
            Number of files deleted.
        """
        if not self.settings.cleanup_old_images:
            return 0

        deleted = 0
        for path in self.ledger.take(doc_id):
            try:
                if self.storage.path_exists(path):
                    self.storage.delete_file(path)
                    deleted += 1
            except OSError as e:
                err = StoreError(StoreErrorKind.DELETE_FAILED, path)
                logger.warning("Failed to delete old image: %s (%s)", err.path, e)
        if deleted:
            logger.info("Removed %d old asset(s) for %s", deleted, doc_id)
        return deleted
