"""core/visuals.py — Tiny retained scene graph.

A ``Visual`` is one drawable node (a glyph, a dot, a container).  Nodes
form a tree rooted at ``Document.body``; the renderer walks the tree each
frame and draws whatever is attached.  Anything detached is simply not
drawn any more, which is how particles and effects clean up after
themselves.

    doc = Document()
    layer = Visual(node_id="particle-container")
    doc.body.append(layer)
    glyph = Visual(class_name="particle", text="<>")
    layer.append(glyph)
    ...
    glyph.detach()
"""

from __future__ import annotations
from typing import Iterator


class Visual:
    __slots__ = (
        "node_id", "class_name", "text", "font_size", "color", "opacity",
        "x", "y", "rotation", "scale", "transform", "z_index", "radius",
        "parent", "children",
    )

    def __init__(
        self,
        node_id: str = "",
        class_name: str = "",
        text: str = "",
        font_size: float = 12.0,
        color: str = "#ffffff",
        opacity: float = 1.0,
        x: float = 0.0,
        y: float = 0.0,
        z_index: int = 0,
        radius: float = 0.0,
    ):
        self.node_id = node_id
        self.class_name = class_name
        self.text = text
        self.font_size = font_size
        self.color = color
        self.opacity = opacity
        self.x = x
        self.y = y
        self.rotation = 0.0
        self.scale = 1.0
        self.transform = ""
        self.z_index = z_index
        self.radius = radius       # > 0 draws a filled dot instead of text
        self.parent: Visual | None = None
        self.children: list[Visual] = []

    @property
    def attached(self) -> bool:
        return self.parent is not None

    def append(self, child: Visual) -> Visual:
        """Attach *child* as the last child, moving it if already attached."""
        if child.parent is not None:
            child.detach()
        child.parent = self
        self.children.append(child)
        return child

    def detach(self) -> bool:
        """Remove this node from its parent.  Returns False if already detached."""
        parent = self.parent
        if parent is None:
            return False
        try:
            parent.children.remove(self)
        except ValueError:
            pass
        self.parent = None
        return True

    def walk(self) -> Iterator[Visual]:
        """Depth-first iteration over descendants (not including self)."""
        for child in self.children:
            yield child
            yield from child.walk()

    def __repr__(self) -> str:
        label = self.node_id or self.class_name or "visual"
        return f"Visual({label!r}, children={len(self.children)})"


class Document:
    """Root of the scene graph — the page body."""

    def __init__(self):
        self.body = Visual(node_id="body")

    def find(self, node_id: str) -> Visual | None:
        for node in self.body.walk():
            if node.node_id == node_id:
                return node
        return None

    def count(self, class_name: str | None = None) -> int:
        """Number of attached nodes, optionally filtered by class name."""
        return sum(1 for n in self.body.walk()
                   if class_name is None or n.class_name == class_name)

    def draw_order(self) -> list[Visual]:
        """Attached leaf-and-branch nodes sorted by z-index (stable)."""
        return sorted(self.body.walk(), key=lambda n: n.z_index)
