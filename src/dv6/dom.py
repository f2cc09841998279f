"""
DOM - Document Object Model for DV6

Every parsed entry is a tree of DocumentNodes whose children are either
further nodes or plain text. The tree maps one-to-one onto XML: node name is
the element name, attributes are element attributes, and string children
are text.

Key invariant: `to_data()` is the only serialization. Everything else
(XML text, JSON) is rendered from its output.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass
class DocumentNode:
    """A named element in an entry tree."""
    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[DocumentNode | str] = field(default_factory=list)

    def add_child(self, child: DocumentNode | str) -> DocumentNode | str:
        """Add a child node and return it for chaining."""
        self.children.append(child)
        return child

    def depth_first(self) -> Iterator[DocumentNode]:
        """Traverse element nodes depth-first, yielding self then children."""
        yield self
        for child in self.children:
            if isinstance(child, DocumentNode):
                yield from child.depth_first()

    def find(self, name: str) -> DocumentNode | None:
        """First direct child element with this name."""
        for child in self.children:
            if isinstance(child, DocumentNode) and child.name == name:
                return child
        return None

    def find_all(self, name: str) -> list[DocumentNode]:
        """All direct child elements with this name, in order."""
        return [c for c in self.children if isinstance(c, DocumentNode) and c.name == name]

    @property
    def text(self) -> str:
        """Concatenated text of the direct string children."""
        return "".join(c for c in self.children if isinstance(c, str))

    def to_data(self) -> dict[str, Any]:
        """Serialize to nested plain data (JSON-safe)."""
        return {
            "name": self.name,
            "attributes": dict(self.attributes),
            "children": [c.to_data() if isinstance(c, DocumentNode) else c for c in self.children],
        }


def element(name: str, *children: DocumentNode | str, **attributes: str) -> DocumentNode:
    """Shorthand constructor: element("spell", "test", lang="en")."""
    return DocumentNode(name=name, attributes=dict(attributes), children=list(children))


def _data_to_element(data: dict[str, Any]) -> ET.Element:
    elem = ET.Element(data["name"], data["attributes"])
    last: ET.Element | None = None
    for child in data["children"]:
        if isinstance(child, str):
            if last is None:
                elem.text = (elem.text or "") + child
            else:
                last.tail = (last.tail or "") + child
        else:
            last = _data_to_element(child)
            elem.append(last)
    return elem


def render_xml(data: dict[str, Any], indent: bool = False) -> str:
    """Render the output of DocumentNode.to_data() as XML text."""
    elem = _data_to_element(data)
    if indent:
        ET.indent(elem)
    return ET.tostring(elem, encoding="unicode")
