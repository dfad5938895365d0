"""Render Node trees as markdown outlines.

Outline format:
- The root title on its own bold line
- Headings for nodes that have children, `#` repeated by depth (capped at 6)
- List items for leaf nodes
- Image links under the heading, or indented under the list item
"""

from __future__ import annotations

from .models import Node

MAX_HEADING_LEVEL = 6


def to_markdown(root: Node) -> str:
    """Render a whole tree, starting the root's children at level 1.

    The root's own image reference is not rendered.
    """
    parts = []
    if root.title:
        parts.append(f"**{root.title}**\n\n")
    for child in root.children:
        parts.append(render_node(child, 1))
    return "".join(parts)


def render_node(node: Node, level: int) -> str:
    """Render one node and its subtree at the given nesting level."""
    if node.is_leaf:
        result = f"- {node.title}\n"
        if node.image_ref:
            # Indented so it continues the list item
            result += f"  {node.image_ref}\n"
        return result

    result = f"{'#' * min(level, MAX_HEADING_LEVEL)} {node.title}\n\n"
    if node.image_ref:
        result += f"{node.image_ref}\n\n"
    for child in node.children:
        result += render_node(child, level + 1)
    result += "\n"
    return result
