"""
Tree lifter.

Turns the flat sequence of logical lines into a tree using indentation:
each line's children are the following lines indented one level deeper.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .lines import LogicalLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineNode:
    """A logical line placed in the indentation tree."""
    line: LogicalLine

    @property
    def text(self) -> str:
        return self.line.text

    def describe(self) -> str:
        return self.line.describe()

    @property
    def is_word(self) -> bool:
        return self.line.is_word

    @property
    def is_property(self) -> bool:
        return self.line.is_property

    @property
    def is_extended(self) -> bool:
        return self.line.is_extended


@dataclass(frozen=True)
class Leaf(LineNode):
    """A line without indented children."""


@dataclass(frozen=True)
class Branch(LineNode):
    """A line owning the more deeply indented lines that follow it."""
    children: tuple[LineNode, ...] = ()


def root_line() -> LogicalLine:
    """Synthetic line wrapped by the root branch."""
    return LogicalLine(start_line=0, indent=-1, text="")


@dataclass
class _BranchBuilder:
    line: LogicalLine
    children: list[LineNode] = field(default_factory=list)

    def seal(self) -> Branch:
        return Branch(self.line, tuple(self.children))


def lift(lines: Sequence[LogicalLine]) -> Branch:
    """
    Build the line tree with one line of lookahead.

    A line followed by a deeper one opens a branch; a line followed by a
    shallower one closes as many branches as the indent drops. Branches are
    attached to their parent only when sealed, so no node changes after its
    subtree is complete. Malformed indentation still yields a tree.
    """
    stack: list[_BranchBuilder] = [_BranchBuilder(root_line())]

    def close(levels: int) -> None:
        # never pop the root, even when the indent drops below zero
        for _ in range(min(levels, len(stack) - 1)):
            sealed = stack.pop().seal()
            stack[-1].children.append(sealed)

    for index, line in enumerate(lines):
        next_line = lines[index + 1] if index + 1 < len(lines) else None
        indent_diff = next_line.indent - line.indent if next_line is not None else 0

        if indent_diff > 0:
            stack.append(_BranchBuilder(line))
        else:
            stack[-1].children.append(Leaf(line))
            if indent_diff < 0:
                close(-indent_diff)

    close(len(stack))
    root = stack[0].seal()
    logger.debug("lifted %d lines into %d top-level nodes", len(lines), len(root.children))
    return root
