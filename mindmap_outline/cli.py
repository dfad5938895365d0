"""Command-line interface for mindmap-outline."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import load_settings
from .converter import Converter
from .errors import ParseError
from .storage import LocalStorage

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="mindmap-outline",
        description="Convert .mm and .xmind mindmaps to markdown outlines",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # --- export ---
    p_export = sub.add_parser("export", help="Export to markdown")
    p_export.add_argument("file", help="Path to .mm or .xmind file")
    p_export.add_argument("-o", "--output", help="Output markdown file (default: stdout)")
    p_export.add_argument("--vault", default=".", help="Root folder for extracted images (default: .)")
    p_export.add_argument("--settings", help="JSON settings file")

    # --- tree ---
    p_tree = sub.add_parser("tree", help="Print the node tree")
    p_tree.add_argument("file", help="Path to .mm or .xmind file")
    p_tree.add_argument("--depth", type=int, default=99, help="Max depth")

    # --- info ---
    p_info = sub.add_parser("info", help="Show map summary")
    p_info.add_argument("file", help="Path to .mm or .xmind file")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "export":
            cmd_export(args)
        elif args.command == "tree":
            cmd_tree(args)
        elif args.command == "info":
            cmd_info(args)
    except ParseError as e:
        print(f"Error parsing mindmap: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def _notify(message: str) -> None:
    print(message, file=sys.stderr)


def _open(file: str, vault: str = ".", settings_path=None) -> tuple[Converter, str]:
    """Build a converter rooted at `vault` and the document id for `file`."""
    vault_path = Path(vault).resolve()
    file_path = Path(file).resolve()
    try:
        doc_id = file_path.relative_to(vault_path).as_posix()
    except ValueError:
        logger.info("%s is outside %s, using its folder as root", file_path, vault_path)
        vault_path = file_path.parent
        doc_id = file_path.name

    converter = Converter(LocalStorage(vault_path), load_settings(settings_path), notify=_notify)
    return converter, doc_id


def cmd_export(args):
    converter, doc_id = _open(args.file, args.vault, args.settings)
    md = converter.convert(doc_id)

    if args.output:
        Path(args.output).write_text(md, encoding="utf-8")
        print(f"Exported to {args.output}")
    else:
        print(md)


def _load_tree(file: str):
    """Parse a document for inspection; extracted assets are removed again."""
    converter, doc_id = _open(file)
    converter.settings.cleanup_old_images = True
    try:
        return converter.load(doc_id)
    finally:
        converter.store.cleanup(doc_id)


def cmd_tree(args):
    root = _load_tree(args.file)

    def show(node, depth=0):
        if depth > args.depth:
            return
        print("  " * depth + node.title)
        for child in node.children:
            show(child, depth + 1)

    show(root)


def cmd_info(args):
    root = _load_tree(args.file)

    print(f"File: {args.file}")
    print(f"Title: {root.title}")
    print(f"Nodes: {root.count()}")
    print(f"Images: {sum(1 for node in root.walk() if node.image_ref)}")


if __name__ == "__main__":
    sys.exit(main())
