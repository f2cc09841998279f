"""
Diagnostics collected during a parse run.

Every stage appends to one DiagnosticSink instead of raising, so a single
malformed line never hides problems further down the document.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)


class Severity(enum.Enum):
    ERROR = "error"
    WARNING = "warning"


class Locatable(Protocol):
    def describe(self) -> str: ...


@dataclass(frozen=True)
class Diagnostic:
    """An error or warning attributed to a line ("12") or line range ("12-14")."""
    line_description: str
    message: str
    severity: Severity = Severity.ERROR

    def __str__(self) -> str:
        return f"行{self.line_description}: {self.message}"


@dataclass
class DiagnosticSink:
    """Ordered errors and warnings for one parse run."""
    errors: list[Diagnostic] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)

    def error(self, where: Locatable, message: str) -> Diagnostic:
        diagnostic = Diagnostic(where.describe(), message, Severity.ERROR)
        self.errors.append(diagnostic)
        logger.debug("error: %s", diagnostic)
        return diagnostic

    def warning(self, where: Locatable, message: str) -> Diagnostic:
        diagnostic = Diagnostic(where.describe(), message, Severity.WARNING)
        self.warnings.append(diagnostic)
        logger.debug("warning: %s", diagnostic)
        return diagnostic
