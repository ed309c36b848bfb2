"""
Diagnostics returned alongside the emitted document.

Every stage of the pipeline reports problems here instead of raising.
A diagnostic is a flat ``{severity, message, path, code}`` record; the
collector keeps them in arrival order and is safe to share between the
concurrently running transformation services.

Tags:
    diagnostics, error-reporting, asyncapi-emitter

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any

from asyncapi_emitter.core.errors import EmitterError
from asyncapi_emitter.core.logging import get_logger

logger = get_logger(__name__)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A single error or warning about the emitted document."""

    severity: Severity
    message: str
    path: str = ""
    code: str | None = None

    @classmethod
    def error(cls, message: str, path: str = "", code: str | None = None) -> Diagnostic:
        return cls(Severity.ERROR, message, path, code)

    @classmethod
    def warning(cls, message: str, path: str = "", code: str | None = None) -> Diagnostic:
        return cls(Severity.WARNING, message, path, code)

    @classmethod
    def from_error(
        cls,
        error: Exception,
        severity: Severity = Severity.ERROR,
        path: str | None = None,
    ) -> Diagnostic:
        """Build a diagnostic from an exception, keeping the error code and path."""
        if isinstance(error, EmitterError):
            return cls(
                severity=severity,
                message=error.message,
                path=path if path is not None else (error.context.path or ""),
                code=error.code,
            )
        return cls(severity=severity, message=str(error), path=path or "", code="internal-error")

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "severity": self.severity.value,
            "message": self.message,
            "path": self.path,
        }
        if self.code:
            result["code"] = self.code
        return result


class DiagnosticCollector:
    """Thread-safe, append-only list of diagnostics."""

    def __init__(self) -> None:
        self._items: list[Diagnostic] = []
        self._lock = threading.Lock()

    def add(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self._items.append(diagnostic)
        log = logger.warning if diagnostic.severity is Severity.WARNING else logger.error
        log(
            "diagnostic_recorded",
            severity=diagnostic.severity.value,
            message=diagnostic.message,
            path=diagnostic.path,
            code=diagnostic.code,
        )

    def error(self, message: str, path: str = "", code: str | None = None) -> None:
        self.add(Diagnostic.error(message, path, code))

    def warning(self, message: str, path: str = "", code: str | None = None) -> None:
        self.add(Diagnostic.warning(message, path, code))

    def add_error(self, error: Exception, severity: Severity = Severity.ERROR, path: str | None = None) -> None:
        self.add(Diagnostic.from_error(error, severity, path))

    def extend(self, diagnostics: list[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    @property
    def items(self) -> tuple[Diagnostic, ...]:
        with self._lock:
            return tuple(self._items)

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.items)

    def __len__(self) -> int:
        return len(self.items)


__all__ = ["Severity", "Diagnostic", "DiagnosticCollector"]
