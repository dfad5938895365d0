"""Extract embedded resources from an archive-tree mindmap."""

from __future__ import annotations

import logging
import posixpath
import zipfile
import zlib

from .assets import AssetStore
from .errors import MindmapError, ResourceExtractFailed
from .models import ResourceMap

logger = logging.getLogger(__name__)

RESOURCE_PREFIX = "resources/"

# What zipfile raises for a damaged, encrypted or unsupported entry
ENTRY_ERRORS = (OSError, EOFError, zipfile.BadZipFile, zlib.error, RuntimeError, NotImplementedError)


def resource_entries(archive: zipfile.ZipFile) -> list[zipfile.ZipInfo]:
    """Entries under the resource folder, excluding folder entries."""
    return [
        info for info in archive.infolist()
        if info.filename.startswith(RESOURCE_PREFIX) and not info.is_dir()
    ]


def read_entry(archive: zipfile.ZipFile, info: zipfile.ZipInfo) -> bytes:
    try:
        return archive.read(info)
    except ENTRY_ERRORS as e:
        raise ResourceExtractFailed(info.filename) from e


def extract_resources(archive: zipfile.ZipFile, doc_id: str, store: AssetStore) -> ResourceMap:
    """Persist every resource entry and map its name to link text.

    Entries are processed one at a time in archive order. An entry that
    cannot be read or stored is logged and left out of the map.
    """
    resources: ResourceMap = {}
    for info in resource_entries(archive):
        name = info.filename[len(RESOURCE_PREFIX):]
        try:
            data = read_entry(archive, info)
            resources[name] = store.save(doc_id, posixpath.basename(name), data)
        except MindmapError as e:
            logger.warning("Skipping resource %s: %s", info.filename, e)
    logger.debug("Extracted %d resource(s) from %s", len(resources), doc_id)
    return resources
