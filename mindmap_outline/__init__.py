"""mindmap-outline: Convert FreeMind and XMind mindmaps to markdown outlines.

Images embedded in .xmind archives are written to an asset folder and linked
from the outline.

Usage:
    import mindmap_outline

    # Plain-tree (.mm) text
    md = mindmap_outline.render_plain_tree(open("plan.mm").read())

    # Documents inside a folder, with assets written next to them
    converter = mindmap_outline.Converter(mindmap_outline.LocalStorage("notes"))
    md = converter.convert("maps/plan.xmind")

    # Converting again replaces the images from the previous run
    md = converter.convert("maps/plan.xmind")
"""

__version__ = "0.1.0"

from .assets import AssetLedger, AssetStore
from .config import Settings, StorageStrategy, load_settings, save_settings
from .converter import Converter, detect_format, render_archive_tree, render_plain_tree
from .errors import (
    MindmapError,
    ParseError,
    ParseErrorKind,
    ResourceExtractFailed,
    StoreError,
    StoreErrorKind,
)
from .markdown import render_node, to_markdown
from .models import Node, ResourceMap, SourceFormat
from .reader import parse_archive_tree, parse_plain_tree
from .storage import LocalStorage, Storage, normalize_path

__all__ = [
    "render_plain_tree",
    "render_archive_tree",
    "Converter",
    "detect_format",
    "parse_plain_tree",
    "parse_archive_tree",
    "to_markdown",
    "render_node",
    "AssetStore",
    "AssetLedger",
    "Settings",
    "StorageStrategy",
    "load_settings",
    "save_settings",
    "LocalStorage",
    "Storage",
    "normalize_path",
    "Node",
    "ResourceMap",
    "SourceFormat",
    "MindmapError",
    "ParseError",
    "ParseErrorKind",
    "StoreError",
    "StoreErrorKind",
    "ResourceExtractFailed",
]
