"""
Line splitter.

Turns raw DV6 text into logical lines: physical lines ending in a lone
backslash are merged with the next one, and leading tabs become the indent.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .diagnostics import DiagnosticSink

logger = logging.getLogger(__name__)

LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")

PROPERTY_PREFIX_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*:")

CONTINUATION_INDENT_MISMATCH = "インデントが直前の継続行と不一致です"
INDENT_JUMP = "インデントが直前の行から2レベル以上上がっています"


@dataclass
class LogicalLine:
    """One continuation-merged source line."""
    start_line: int  # 1-based
    indent: int
    text: str
    end_line: int | None = None  # only set when continuation occurred

    def describe(self) -> str:
        """Line number, or "start-end" for a continued line."""
        if self.end_line is not None:
            return f"{self.start_line}-{self.end_line}"
        return str(self.start_line)

    @property
    def is_word(self) -> bool:
        return self.text.startswith("#")

    @property
    def is_property(self) -> bool:
        return PROPERTY_PREFIX_PATTERN.match(self.text) is not None

    @property
    def is_extended(self) -> bool:
        return self.text.startswith("//")


@dataclass(frozen=True)
class _PhysicalLocation:
    number: int

    def describe(self) -> str:
        return str(self.number)


def split_physical_line(raw_line: str) -> tuple[int, str, bool]:
    """
    Split one physical line into (indent, content, continued).

    A run of trailing backslashes of odd length ends in an unescaped
    backslash, which marks continuation and is removed from the content.
    Escaped "\\\\" pairs are left untouched.
    """
    body = raw_line.lstrip("\t")
    indent = len(raw_line) - len(body)
    trailing = len(body) - len(body.rstrip("\\"))
    if trailing % 2 == 1:
        return indent, body[:-1], True
    return indent, body, False


def split_lines(text: str, sink: DiagnosticSink) -> list[LogicalLine]:
    """
    Split raw text into logical lines.

    Indentation problems are reported to `sink` and never stop the split:
    a continuation with the wrong indent still has its text appended, and an
    indent that rises by two or more levels is kept as is for the tree lifter.
    """
    lines: list[LogicalLine] = []
    continued = False

    physical_lines = LINE_BREAK_PATTERN.split(text)
    for index, raw_line in enumerate(physical_lines):
        line_number = index + 1
        indent, content, continuation_marker = split_physical_line(raw_line)

        if continued:
            open_line = lines[-1]
            if indent != open_line.indent:
                sink.error(_PhysicalLocation(line_number), CONTINUATION_INDENT_MISMATCH)
            open_line.text += content
        else:
            previous = lines[-1] if lines else None
            lines.append(LogicalLine(start_line=line_number, indent=indent, text=content))
            if previous is not None and previous.indent < indent - 1:
                sink.error(_PhysicalLocation(line_number), INDENT_JUMP)

        if continuation_marker:
            continued = True
        else:
            if continued:
                lines[-1].end_line = line_number
            continued = False

    # A continuation still open at end of input ends at the last physical line
    if continued and lines and lines[-1].start_line < len(physical_lines):
        lines[-1].end_line = len(physical_lines)

    logger.debug("split %d physical lines into %d logical lines", len(physical_lines), len(lines))
    return lines
