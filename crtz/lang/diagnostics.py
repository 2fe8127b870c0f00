"""
Diagnostics - problems found in a script, reported without stopping.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Severity(Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """
    One reported problem.

    Attributes:
        message: Human-readable description
        severity: WARNING or ERROR
        line: Source line, when known
        phase: "parse" or "run"
    """
    message: str
    severity: Severity = Severity.ERROR
    line: Optional[int] = None
    phase: str = "parse"

    def __str__(self) -> str:
        if self.line is not None:
            return f"{self.severity.value.capitalize()} at line {self.line}: {self.message}"
        return self.message

    def log(self, logger: logging.Logger) -> None:
        level = logging.ERROR if self.severity == Severity.ERROR else logging.WARNING
        logger.log(level, str(self))


class CrtzError(Exception):
    """Base class for errors raised by the crtz toolchain itself."""


class ExportValidationError(CrtzError):
    """An exported document does not match the export schema."""
