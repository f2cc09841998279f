"""
Exception types for DV6.

Parsing itself never raises: problems in the input are collected as
diagnostics. These exceptions exist for callers that want a hard failure
and for invalid configuration.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .diagnostics import Diagnostic


class DV6Error(ValueError):
    """Base class for all DV6 errors."""


class ConfigError(DV6Error):
    """A configuration value is out of range."""


class DV6SyntaxError(DV6Error):
    """Raised by ParseResult.raise_for_errors() when a parse recorded errors."""

    def __init__(self, diagnostics: Sequence[Diagnostic]):
        self.diagnostics = list(diagnostics)
        super().__init__("\n".join(str(d) for d in self.diagnostics))
