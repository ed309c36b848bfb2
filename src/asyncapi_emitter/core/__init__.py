"""Core primitives shared by every stage: errors, results, logging, diagnostics, settings."""

from asyncapi_emitter.core.diagnostics import Diagnostic, DiagnosticCollector, Severity
from asyncapi_emitter.core.errors import EmitterError, ErrorCategory, ErrorContext
from asyncapi_emitter.core.result import Err, Ok, Result
from asyncapi_emitter.core.settings import EmitterSettings, get_settings

__all__ = [
    "Diagnostic",
    "DiagnosticCollector",
    "Severity",
    "EmitterError",
    "ErrorCategory",
    "ErrorContext",
    "Ok",
    "Err",
    "Result",
    "EmitterSettings",
    "get_settings",
]
