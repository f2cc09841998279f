"""
DV6 parser.

Pipeline: raw text -> logical lines -> line tree -> word entries. Each
entry's children are classified into properties, contents and an optional
`//` extended section, then handed to the matching sub-parser. All problems
land in one DiagnosticSink per run; parsing always runs to the end.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from .config import Config, get_config
from .content import (
    CONTENT_MALFORMED,
    CONTENT_PATTERN,
    ContentBodyParser,
    ExtendedSectionParser,
    IgnoreExtendedParser,
    PassThroughBodyParser,
)
from .diagnostics import Diagnostic, DiagnosticSink
from .dom import DocumentNode, element
from .errors import DV6SyntaxError
from .lines import split_lines
from .properties import FlagPredicate, PropertyParser
from .tree import Branch, LineNode, lift

logger = logging.getLogger(__name__)

WORD_PATTERN = re.compile(r"^#(.*)$")

WORD_WITHOUT_CONTENT = "単語の内容がありません"
WORD_WITHOUT_NAME = "見出し語がありません"


@dataclass
class ParseResult:
    """Entries plus the diagnostics recorded while parsing them."""
    entries: list[DocumentNode] = field(default_factory=list)
    errors: list[Diagnostic] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True when no errors were recorded (warnings are allowed)."""
        return not self.errors

    def raise_for_errors(self) -> None:
        if self.errors:
            raise DV6SyntaxError(self.errors)

    def to_data(self) -> dict[str, Any]:
        return {
            "entries": [entry.to_data() for entry in self.entries],
            "errors": [str(d) for d in self.errors],
            "warnings": [str(d) for d in self.warnings],
        }


@dataclass
class Regions:
    """An entry's children split by kind. Boundaries never overlap."""
    properties: Sequence[LineNode]
    contents: Sequence[LineNode]
    extended: Sequence[LineNode] = ()


class Parser:
    """
    Parser for DV6 documents.

    Each call to parse() starts a fresh diagnostic sink, so a Parser can be
    reused without carrying diagnostics from one document into the next.
    """

    def __init__(
        self,
        config: Config | None = None,
        body_parser: ContentBodyParser | None = None,
        extended_parser: ExtendedSectionParser | None = None,
        warn_on_flag: FlagPredicate | None = None,
    ):
        self.config = config or get_config()
        self.body_parser = body_parser or PassThroughBodyParser()
        self.extended_parser = extended_parser or IgnoreExtendedParser()
        self.warn_on_flag = warn_on_flag
        self._reset()

    def _reset(self) -> None:
        self.sink = DiagnosticSink()
        self.properties = PropertyParser(self.sink, self.config, self.warn_on_flag)

    def parse(self, text: str) -> ParseResult:
        self._reset()
        lines = split_lines(text, self.sink)
        root = lift(lines)
        entries = self.parse_toplevel(root)
        logger.debug(
            "parsed %d entries (%d errors, %d warnings)",
            len(entries), len(self.sink.errors), len(self.sink.warnings),
        )
        return ParseResult(
            entries=entries,
            errors=list(self.sink.errors),
            warnings=list(self.sink.warnings),
        )

    def parse_toplevel(self, root: Branch) -> list[DocumentNode]:
        """Parse `#` headers at the top level into words; other lines are ignored."""
        words: list[DocumentNode] = []
        for node in root.children:
            if not node.is_word:
                logger.debug("ignoring top-level line %s: %r", node.describe(), node.text)
                continue
            if not isinstance(node, Branch):
                self.sink.error(node, WORD_WITHOUT_CONTENT)
                continue
            word = self.parse_word(node)
            if word is not None:
                words.append(word)
        return words

    def parse_word(self, node: Branch) -> DocumentNode | None:
        match = WORD_PATTERN.match(node.text)
        title = match.group(1) if match else ""
        if not title:
            self.sink.error(node, WORD_WITHOUT_NAME)
            return None

        regions = self.parse_top_children(node)
        word = element(
            "word",
            element("name", title),
            self.properties.parse(regions.properties),
            element("contents", *self.parse_contents(regions.contents)),
        )
        for extended in self.extended_parser.parse_extended(regions.extended, self.sink):
            word.add_child(extended)
        return word

    def parse_top_children(self, node: Branch) -> Regions:
        """Split an entry's children into property, content and extended regions."""
        children = node.children
        contents_begin = _find_index(children, lambda child: not child.is_property)
        extended_begin = _find_index(children, lambda child: child.is_extended, start=contents_begin)
        return Regions(
            properties=children[:contents_begin],
            contents=children[contents_begin:extended_begin],
            extended=children[extended_begin:],
        )

    def parse_children(self, node: Branch) -> Regions:
        """Nested variant of parse_top_children: properties and contents only."""
        children = node.children
        contents_begin = _find_index(children, lambda child: not child.is_property)
        return Regions(properties=children[:contents_begin], contents=children[contents_begin:])

    def parse_contents(self, nodes: Sequence[LineNode]) -> list[DocumentNode]:
        """
        Parse content lines into `content` nodes.

        The marker becomes the `marker` attribute and the body goes through
        the body parser. Indented children of a content line are parsed
        recursively and appended to its node.
        """
        contents: list[DocumentNode] = []
        for node in nodes:
            match = CONTENT_PATTERN.match(node.text)
            if match is None:
                self.sink.error(node, CONTENT_MALFORMED)
                continue
            marker, body = match.groups()
            content = element("content", *self.body_parser.parse_content_body(body), marker=marker)
            if isinstance(node, Branch):
                nested = self.parse_children(node)
                if nested.properties:
                    content.add_child(self.properties.parse(nested.properties))
                for child in self.parse_contents(nested.contents):
                    content.add_child(child)
            contents.append(content)
        return contents


def _find_index(nodes: Sequence[LineNode], predicate, start: int = 0) -> int:
    """Index of the first node at or after `start` matching predicate, else len(nodes)."""
    for index in range(start, len(nodes)):
        if predicate(nodes[index]):
            return index
    return len(nodes)


def parse(
    text: str,
    *,
    config: Config | None = None,
    body_parser: ContentBodyParser | None = None,
    extended_parser: ExtendedSectionParser | None = None,
    warn_on_flag: FlagPredicate | None = None,
) -> ParseResult:
    """Parse a DV6 document. Never raises on malformed input; check result.errors."""
    parser = Parser(
        config=config,
        body_parser=body_parser,
        extended_parser=extended_parser,
        warn_on_flag=warn_on_flag,
    )
    return parser.parse(text)


class DV6:
    """A DV6 document: parses on demand and keeps the resulting structure."""

    def __init__(self, dv6: str, config: Config | None = None):
        self.dv6 = dv6
        self.config = config
        self.result: ParseResult | None = None

    @property
    def structure(self) -> list[DocumentNode] | None:
        return self.result.entries if self.result is not None else None

    def parse(self) -> ParseResult:
        """Parse the document and log its diagnostics."""
        self.result = parse(self.dv6, config=self.config)
        for diagnostic in self.result.errors:
            logger.error("%s", diagnostic)
        for diagnostic in self.result.warnings:
            logger.warning("%s", diagnostic)
        return self.result
