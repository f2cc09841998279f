"""
Property parser.

Translates the `identifier:value` lines at the top of an entry into typed
property nodes. The schema is closed: each identifier has one handler that
validates its value and either appends nodes or reports a diagnostic.
Diagnostics never stop the remaining lines from being parsed.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence

from .config import Config, FlagsConfig, get_config
from .diagnostics import DiagnosticSink
from .dom import DocumentNode, element
from .tree import Branch, LineNode

logger = logging.getLogger(__name__)

PROPERTY_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9_]*):(.*)$")
LANG_TEXT_PATTERN = re.compile(r"^(\w+):(.+)$")
DATE_PATTERN = re.compile(r"^\d{4}/\d{2}/\d{2}$")
DATETIME_PATTERN = re.compile(r"^\d{4}/\d{2}/\d{2}(?: \d{2}:\d{2}(?::\d{2})?)?$")
VALID_PATTERN = re.compile(r"^(?:\d{4}/\d{2}/\d{2}|\d+ (?:day|week|month|year))$")

PROPERTY_HAS_CHILDREN = "プロパティがインデントを持っています"
PROPERTY_MALFORMED = "プロパティの書式が正しくありません"
PROPERTY_UNKNOWN = "未知のプロパティ指定があります"

FlagPredicate = Callable[[str], bool]


def flag_predicate(flags: FlagsConfig) -> FlagPredicate:
    """
    Build the "should this flag warn" check from config.

    warn_when="unknown" warns on flags outside the known list. "known" warns
    on flags inside it, which is how the first DV6 tools behaved.
    """
    known = frozenset(flags.known)
    if flags.warn_when == "known":
        return lambda flag: flag in known
    return lambda flag: flag not in known


class PropertyParser:
    """Schema-driven parser for one run's property lines."""

    def __init__(
        self,
        sink: DiagnosticSink,
        config: Config | None = None,
        warn_on_flag: FlagPredicate | None = None,
    ):
        self.sink = sink
        self.config = config or get_config()
        self.warn_on_flag = warn_on_flag or flag_predicate(self.config.flags)
        self._handlers: dict[str, Callable[[LineNode, str, str, list[DocumentNode]], None]] = {
            "yomi": self._parse_plain,
            "qyomi": self._parse_plain,
            "spell": self._parse_lang_text,
            "pron": self._parse_lang_text,
            "pos": self._parse_pos,
            "dir": self._parse_dir,
            "flag": self._parse_flag,
            "author": self._parse_author,
            "valid": self._parse_valid,
            "expire": self._parse_expire,
        }

    def parse(self, nodes: Sequence[LineNode]) -> DocumentNode:
        """Parse a property region into a `properties` node, in source order."""
        properties: list[DocumentNode] = []
        for node in nodes:
            if isinstance(node, Branch):
                self.sink.error(node, PROPERTY_HAS_CHILDREN)
                continue
            match = PROPERTY_PATTERN.match(node.text)
            if match is None:
                self.sink.error(node, PROPERTY_MALFORMED)
                continue
            name, value = match.groups()
            handler = self._handlers.get(name)
            if handler is None:
                self.sink.warning(node, PROPERTY_UNKNOWN)
                logger.debug("dropping unknown property %r at line %s", name, node.describe())
                continue
            handler(node, name, value, properties)
        return DocumentNode("properties", children=list(properties))

    def _parse_plain(self, node: LineNode, name: str, value: str, out: list[DocumentNode]) -> None:
        out.append(element(name, value))

    def _parse_lang_text(self, node: LineNode, name: str, value: str, out: list[DocumentNode]) -> None:
        match = LANG_TEXT_PATTERN.match(value)
        if match is None:
            self.sink.error(node, f"{name}プロパティの書式が正しくありません")
            return
        lang, text = match.groups()
        out.append(element(name, text, lang=lang))

    def _parse_pos(self, node: LineNode, name: str, value: str, out: list[DocumentNode]) -> None:
        for pos in value.split(","):
            out.append(element("pos", pos))

    def _parse_dir(self, node: LineNode, name: str, value: str, out: list[DocumentNode]) -> None:
        if value.startswith("/") and not value.endswith("/"):
            out.append(element("dir", value))
        else:
            self.sink.error(node, "dirプロパティは/で始まり/でない文字で終わるべきです")

    def _parse_flag(self, node: LineNode, name: str, value: str, out: list[DocumentNode]) -> None:
        for flag in value.split(","):
            out.append(element("flag", flag))
            if self.warn_on_flag(flag):
                self.sink.warning(node, f"未知のフラグ[{flag}]があります")

    def _parse_author(self, node: LineNode, name: str, value: str, out: list[DocumentNode]) -> None:
        fields = value.split(",")
        if len(fields) > self.config.author.max_fields or len(fields) < 3:
            self.sink.error(node, "authorプロパティの書式が正しくありません")
            return
        operation, dates_str, names_str = fields[:3]
        sources_str = fields[3] if len(fields) > 3 else ""

        if operation not in self.config.author.operations:
            ops = ",".join(self.config.author.operations)
            self.sink.error(node, f"authorの処理内容は{ops}のみです")
            return

        author = element("author", operation=operation)
        valid = True
        for date in dates_str.split(";"):
            if DATETIME_PATTERN.match(date):
                author.add_child(element("date", date))
            else:
                self.sink.error(node, f"日付書式が間違っています[{date}]")
                valid = False
        if not valid:
            return

        for author_name in names_str.split(";"):
            author.add_child(element("name", author_name))
        if sources_str:
            for source in sources_str.split(";"):
                author.add_child(element("source", source))
        out.append(author)

    def _parse_valid(self, node: LineNode, name: str, value: str, out: list[DocumentNode]) -> None:
        if VALID_PATTERN.match(value):
            out.append(element("valid", value))
        else:
            self.sink.error(node, f"日付書式が間違っています[{value}]")

    def _parse_expire(self, node: LineNode, name: str, value: str, out: list[DocumentNode]) -> None:
        if DATE_PATTERN.match(value):
            out.append(element("expire", value))
        else:
            self.sink.error(node, f"日付書式が間違っています[{value}]")
