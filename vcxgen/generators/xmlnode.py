# SPDX-License-Identifier: MIT
"""Minimal XML tree for MSBuild documents.

MSBuild files are written in a fixed, diff-friendly layout: two-space
indentation, attributes in insertion order, empty elements as "<Foo />".
Node and XmlFormatter produce exactly that without depending on how a
general-purpose XML library chooses to serialize.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from xml.sax.saxutils import escape, quoteattr

if TYPE_CHECKING:
    from collections.abc import Iterator

MSBUILD_NAMESPACE = "http://schemas.microsoft.com/developer/msbuild/2003"

XML_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Line breaks inside text (build step commands) must survive a parse
_TEXT_ENTITIES = {"\r": "&#13;", "\n": "&#10;"}


class Node:
    """An XML element with ordered attributes and children.

    Attributes are given as keyword arguments or set like dict items.
    Children are added with add().

    Example:
        group = Node("PropertyGroup", Label="Globals")
        group.add("ProjectGuid", "{31DC1570-67C5-40FD-9130-C5F57BAEBA88}")
        group["Condition"] = "'$(Configuration)|$(Platform)'=='Debug|x64'"
    """

    __slots__ = ("name", "text", "attrs", "children")

    def __init__(self, name: str, text: str | None = None, **attrs: str) -> None:
        self.name = name
        self.text = text
        self.attrs: dict[str, str] = dict(attrs)
        self.children: list[Node] = []

    def __setitem__(self, key: str, value: str) -> None:
        self.attrs[key] = value

    def __getitem__(self, key: str) -> str:
        return self.attrs[key]

    def __repr__(self) -> str:
        return f"Node({self.name!r})"

    def add(self, child: Node | str, text: str | None = None, **attrs: str) -> Node:
        """Add a child element and return it.

        The child may be a ready Node, or an element name with optional
        text and attributes:

            n.add(Node("Import", Project="x.props"))
            n.add("Optimization", "Disabled")
            n.add("ImportGroup", Label="ExtensionSettings")

        An empty string as text gives an empty element ("<HeaderFileName />").
        """
        if isinstance(child, Node):
            if text is not None or attrs:
                raise TypeError("cannot pass text or attributes with a Node")
            node = child
        else:
            node = Node(child, text, **attrs)
        self.children.append(node)
        return node

    def find(self, name: str) -> Node | None:
        """Return the first direct child with this element name."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def find_all(self, name: str) -> Iterator[Node]:
        """Iterate over direct children with this element name."""
        return (child for child in self.children if child.name == name)

    def iter(self) -> Iterator[Node]:
        """Iterate over this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.iter()


class XmlFormatter:
    """Serialize a Node tree in Visual Studio's native layout."""

    indent_step = "  "

    def format(self, node: Node) -> str:
        """Format a node as a complete XML document."""
        return XML_HEADER + self._format_node(node, "")

    def _format_node(self, node: Node, indent: str) -> str:
        if node.children and node.text:
            raise ValueError(f"element <{node.name}> has both text and children")

        out = [indent, "<", node.name]
        for key, value in node.attrs.items():
            out.append(f" {key}={quoteattr(value)}")

        if node.children:
            out.append(">\n")
            subindent = indent + self.indent_step
            out.extend(self._format_node(child, subindent) for child in node.children)
            out.append(f"{indent}</{node.name}>\n")
        elif node.text:
            out.append(f">{escape(node.text, _TEXT_ENTITIES)}</{node.name}>\n")
        else:
            out.append(" />\n")
        return "".join(out)
