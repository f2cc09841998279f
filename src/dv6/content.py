"""
Content body and extended section strategies.

Content lines are `(marker)(space)(body)`. The body may carry inline markup
(cross-references, formatting spans) and entries may end with `//` extended
sections. Neither grammar is fixed yet, so both are pluggable strategies
with pass-through defaults: the rest of the pipeline works the same
whichever strategy is installed.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence

from .diagnostics import DiagnosticSink
from .dom import DocumentNode
from .tree import LineNode

# (marker)(single whitespace)(body)
CONTENT_PATTERN = re.compile(r"^(\S+)\s(.*)$")

CONTENT_MALFORMED = "内容は(記号)(空白)(内容)であるべきです"


class ContentBodyParser(ABC):
    """Base class for inline markup parsers."""

    @abstractmethod
    def parse_content_body(self, raw: str) -> list[DocumentNode | str]:
        """
        Parse the body of one content line.
        Returns the children of the resulting `content` node.
        """
        ...


class PassThroughBodyParser(ContentBodyParser):
    """Keeps the body as one uninterpreted text child."""

    def parse_content_body(self, raw: str) -> list[DocumentNode | str]:
        return [raw]


class ExtendedSectionParser(ABC):
    """Base class for parsers of the trailing `//` section of an entry."""

    @abstractmethod
    def parse_extended(self, nodes: Sequence[LineNode], sink: DiagnosticSink) -> list[DocumentNode]:
        """
        Parse the extended region.
        Returned nodes are appended to the word after its `contents`.
        """
        ...


class IgnoreExtendedParser(ExtendedSectionParser):
    """Accepts any extended section and produces nothing."""

    def parse_extended(self, nodes: Sequence[LineNode], sink: DiagnosticSink) -> list[DocumentNode]:
        return []
