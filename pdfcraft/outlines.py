"""Document outline (bookmarks): the outline root, its items and their tree."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Optional


def _utf16_hex(text: str) -> str:
    return text.encode("utf-16-be").hex().upper()


@dataclass
class OutlineObj:
    """One outline item; object numbers of -1 (or 0 for first/last) mean none."""

    title: str = ""
    index: int = 0
    dest: int = 0
    parent: int = 0
    prev: int = -1
    next: int = -1
    first: int = 0
    last: int = 0
    height: float = 0.0

    def write(self, out: BinaryIO) -> None:
        lines = ["<<\n", f"  /Parent {self.parent} 0 R\n"]
        if self.prev >= 0:
            lines.append(f"  /Prev {self.prev} 0 R\n")
        if self.next >= 0:
            lines.append(f"  /Next {self.next} 0 R\n")
        if self.first > 0:
            lines.append(f"  /First {self.first} 0 R\n")
        if self.last > 0:
            lines.append(f"  /Last {self.last} 0 R\n")
        lines.append(f"  /Dest [ {self.dest} 0 R /XYZ 90 {self.height:f} 0 ]\n")
        lines.append(f"  /Title <FEFF{_utf16_hex(self.title)}>\n")
        lines.append(">>\n")
        out.write("".join(lines).encode("latin-1"))


class OutlinesObj:
    """The outline dictionary; items are registered through ``add_obj``.

    ``add_obj`` adds an object to the document and returns its zero-based
    position; object numbers are that position plus one.
    """

    def __init__(self, add_obj: Callable[[OutlineObj], int], index: int = 0) -> None:
        self._add_obj = add_obj
        self.index = index
        self.first = -1
        self.last = -1
        self.count = 0
        self._last_obj: Optional[OutlineObj] = None

    def _append(self, item: OutlineObj) -> None:
        self.last = self._add_obj(item) + 1
        if self.first <= 0:
            self.first = self.last
        if self._last_obj is not None:
            self._last_obj.next = self.last
        self._last_obj = item
        self.count += 1

    def add_outline(self, dest: int, title: str) -> None:
        """Add a top-level item pointing to object ``dest``."""
        self._append(OutlineObj(title=title, dest=dest, parent=self.index, prev=self.last))

    def add_outline_with_position(self, dest: int, title: str, y: float) -> OutlineObj:
        """Add a top-level item pointing to height ``y`` of object ``dest``."""
        item = OutlineObj(title=title, dest=dest, parent=self.index, prev=self.last, height=y)
        self._append(item)
        item.index = self.last
        return item

    def write(self, out: BinaryIO) -> None:
        lines = ["<<\n", "\t/Type /Outlines\n", f"\t/Count {self.count}\n"]
        if self.first >= 0:
            lines.append(f"\t/First {self.first} 0 R\n")
        if self.last >= 0:
            lines.append(f"\t/Last {self.last} 0 R\n")
        lines.append(">>\n")
        out.write("".join(lines).encode("latin-1"))


@dataclass
class OutlineNode:
    """An outline item with its child items."""

    obj: OutlineObj
    children: list[OutlineNode] = field(default_factory=list)

    def parse(self) -> None:
        """Link the children to each other and to this node, recursively."""
        children = self.children
        for i, child in enumerate(children):
            if i == 0:
                self.obj.first = child.obj.index
                child.obj.prev = -1
            else:
                child.obj.prev = children[i - 1].obj.index
            if i == len(children) - 1:
                self.obj.last = child.obj.index
                child.obj.next = -1
            else:
                child.obj.next = children[i + 1].obj.index
            child.obj.parent = self.obj.index
            child.parse()


def parse_outline_nodes(nodes: Sequence[OutlineNode]) -> None:
    """Link top-level nodes by their next pointers and parse each subtree."""
    for i, node in enumerate(nodes):
        if i == 0:
            node.obj.prev = -1
        node.obj.next = nodes[i + 1].obj.index if i < len(nodes) - 1 else -1
        node.parse()