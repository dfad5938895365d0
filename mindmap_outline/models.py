"""Data models for mindmap outlines."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

# Resource identifier inside the archive -> embeddable link text.
ResourceMap = Dict[str, str]


class SourceFormat(Enum):
    """Supported mindmap source formats."""
    PLAIN_TREE = "mm"
    ARCHIVE_TREE = "xmind"

    @property
    def extension(self) -> str:
        return f".{self.value}"


@dataclass
class Node:
    """A single mindmap entry.

    Whether a node renders as a heading or a list item is decided by
    `children`, never by a stored flag.
    """
    title: str = ""
    children: list[Node] = field(default_factory=list)
    # Link text already pointing at relocated asset storage
    image_ref: Optional[str] = None

    @property
    def is_leaf(self) -> bool:
        return len(self.children) == 0

    def walk(self):
        """Yield this node and all descendants depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def add_child(self, title: str, **kwargs) -> Node:
        """Create and append a new child node."""
        child = Node(title=title, **kwargs)
        self.children.append(child)
        return child

    def count(self) -> int:
        """Total number of nodes in this subtree (including self)."""
        return sum(1 for _ in self.walk())

    def __str__(self) -> str:
        return self.title

    def __repr__(self) -> str:
        child_count = len(self.children)
        suffix = f" ({child_count} children)" if child_count else ""
        return f"Node({self.title!r}{suffix})"
