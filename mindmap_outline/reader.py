"""Read plain-tree (.mm) and archive-tree (.xmind) mindmaps into Node trees.

Elements and attributes are matched on their local names, so namespaced
documents (`xhtml:img`, `xhtml:src`) parse the same as plain ones.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
import zipfile
from io import BytesIO
from typing import Iterator, Optional

from .assets import AssetStore
from .errors import ParseError, ParseErrorKind
from .models import Node, ResourceMap
from .resources import ENTRY_ERRORS, extract_resources

logger = logging.getLogger(__name__)

NO_TEXT = "[No Text]"
EMPTY_TEXT = "[Empty]"
UNTITLED = "[Untitled]"

CONTENT_ENTRY = "content.xml"
RESOURCE_SCHEME = "xap:resources/"


def _local(name: str) -> str:
    """Strip `{namespace}` or `prefix:` from a tag or attribute name."""
    if name.startswith("{"):
        name = name.split("}", 1)[1]
    return name.rsplit(":", 1)[-1]


def _children(elem: ET.Element, name: str) -> list[ET.Element]:
    """Direct children with the given local name."""
    return [child for child in elem if _local(child.tag) == name]


def _child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    found = _children(elem, name)
    return found[0] if found else None


def _first(elem: ET.Element, name: str) -> Optional[ET.Element]:
    """First element with the given local name, including `elem` itself."""
    for el in elem.iter():
        if _local(el.tag) == name:
            return el
    return None


def _own_descendants(elem: ET.Element, skip: str) -> Iterator[ET.Element]:
    """Descendants in document order, not entering subtrees named `skip`."""
    for child in elem:
        if _local(child.tag) == skip:
            continue
        yield child
        yield from _own_descendants(child, skip)


def _attr(elem: ET.Element, name: str) -> Optional[str]:
    """Attribute by local name, preferring a namespaced one."""
    plain = None
    for key, val in elem.attrib.items():
        if _local(key) != name:
            continue
        if key != name:
            return val
        plain = val
    return plain


def _text_content(elem: ET.Element) -> str:
    return "".join(elem.itertext())


# --- plain tree -----------------------------------------------------------


def parse_plain_tree(raw_text: str) -> Node:
    """Parse a plain-tree document into a Node tree.

    Raises:
        ParseError: NO_ROOT_NODE if there is no `node` element, or the text
            is not well-formed XML.
    """
    try:
        doc = ET.fromstring(raw_text)
    except ET.ParseError as e:
        raise ParseError(ParseErrorKind.NO_ROOT_NODE, f"Invalid .mm file: {e}") from e

    root_elem = _first(doc, "node")
    if root_elem is None:
        raise ParseError(ParseErrorKind.NO_ROOT_NODE, "Invalid .mm file: no root node found")

    return _parse_node(root_elem)


def _parse_node(elem: ET.Element) -> Node:
    node = Node(title=_node_text(elem))
    for child_elem in _children(elem, "node"):
        node.children.append(_parse_node(child_elem))

    # Only leaves carry their rich-content images
    if node.is_leaf:
        rich = _rich_content(elem)
        if rich is not None:
            node.image_ref = _rich_content_images(rich)
    return node


def _rich_content(elem: ET.Element) -> Optional[ET.Element]:
    for el in _own_descendants(elem, skip="node"):
        if _local(el.tag) != "richcontent":
            continue
        kind = next((v for k, v in el.attrib.items() if _local(k).lower() == "type"), "")
        if kind.upper() == "NODE":
            return el
    return None


def _node_text(elem: ET.Element) -> str:
    text = elem.get("TEXT")
    if text:
        return text

    rich = _rich_content(elem)
    if rich is not None:
        content = _text_content(rich)
        if content:
            return content.strip() or EMPTY_TEXT

    return NO_TEXT


def _rich_content_images(rich: ET.Element) -> Optional[str]:
    """Inline image links for every `img` in rich content, or None."""
    links = []
    for el in rich.iter():
        if _local(el.tag) != "img":
            continue
        src = _attr(el, "src")
        if src:
            links.append(f"![image]({src})")
    return " ".join(links) or None


# --- archive tree ---------------------------------------------------------


def open_archive(raw_bytes: bytes) -> zipfile.ZipFile:
    """Open archive bytes.

    Raises:
        ParseError: INVALID_ARCHIVE if the bytes are not a zip archive.
    """
    try:
        return zipfile.ZipFile(BytesIO(raw_bytes), "r")
    except zipfile.BadZipFile as e:
        raise ParseError(ParseErrorKind.INVALID_ARCHIVE, f"Invalid .xmind file: {e}") from e


def parse_archive_tree(raw_bytes: bytes, doc_id: str, store: AssetStore) -> tuple[Node, ResourceMap]:
    """Extract resources, then parse the archive's content into a Node tree.

    Resources are persisted before the content entry is validated, so a
    structurally broken archive can still leave assets behind (they are
    recorded in the store's ledger).

    Returns:
        The root node, with image references resolved, and the resource map.

    Raises:
        ParseError: INVALID_ARCHIVE, NO_CONTENT_ENTRY, NO_SHEET or NO_ROOT_TOPIC.
    """
    with open_archive(raw_bytes) as zf:
        resources = extract_resources(zf, doc_id, store)

        if CONTENT_ENTRY not in zf.namelist():
            raise ParseError(
                ParseErrorKind.NO_CONTENT_ENTRY, "Invalid .xmind file: content.xml not found"
            )
        try:
            xml_bytes = zf.read(CONTENT_ENTRY)
        except ENTRY_ERRORS as e:
            raise ParseError(ParseErrorKind.INVALID_ARCHIVE, f"Invalid .xmind file: {e}") from e

    try:
        doc = ET.fromstring(xml_bytes)
    except ET.ParseError as e:
        raise ParseError(ParseErrorKind.NO_SHEET, f"Invalid .xmind file: {e}") from e

    sheet = _first(doc, "sheet")
    if sheet is None:
        raise ParseError(ParseErrorKind.NO_SHEET, "Invalid .xmind file: no sheet found")

    topic_elem = next((el for el in sheet.iter() if el is not sheet and _local(el.tag) == "topic"), None)
    if topic_elem is None:
        raise ParseError(ParseErrorKind.NO_ROOT_TOPIC, "Invalid .xmind file: no root topic found")

    return _parse_topic(topic_elem, resources), resources


def _parse_topic(elem: ET.Element, resources: ResourceMap) -> Node:
    node = Node(title=_topic_title(elem), image_ref=_topic_image(elem, resources))

    children_elem = _child(elem, "children")
    if children_elem is not None:
        for topics_elem in _children(children_elem, "topics"):
            for child_elem in _children(topics_elem, "topic"):
                node.children.append(_parse_topic(child_elem, resources))
    return node


def _topic_title(elem: ET.Element) -> str:
    title_elem = _child(elem, "title")
    if title_elem is not None:
        text = _text_content(title_elem)
        if text:
            return text
    return UNTITLED


def _topic_image(elem: ET.Element, resources: ResourceMap) -> Optional[str]:
    img = next((el for el in _own_descendants(elem, skip="children") if _local(el.tag) == "img"), None)
    if img is None:
        return None

    src = _attr(img, "src")
    if not src or not src.startswith(RESOURCE_SCHEME):
        return None

    resource_name = src[len(RESOURCE_SCHEME):]
    link = resources.get(resource_name)
    if link is None:
        logger.debug("No extracted resource for %s", src)
    return link
