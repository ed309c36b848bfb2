"""
Result envelope for binding generation and plugin registration.

Protocol plugins must never take down the pipeline, so their generators
return ``Ok(binding)`` or ``Err(error)`` instead of raising. Services decide
what an ``Err`` means for the surrounding fragment (usually: omit the
binding, record a diagnostic, keep the fragment).

Examples:
    >>> from asyncapi_emitter.core.result import Ok, Err
    >>> Ok({"bindingVersion": "0.5.0"}).unwrap()["bindingVersion"]
    '0.5.0'
    >>> Err(ValueError("qos must be 0, 1 or 2")).unwrap_or({})
    {}

Tags:
    result-pattern, error-handling, plugins, asyncapi-emitter
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from asyncapi_emitter.core.errors import EmitterError


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A generated binding or a registered plugin."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "value": self.value}


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    A failure the caller should report rather than raise.

    ``error`` is normally an :class:`EmitterError` so its code can be copied
    onto a diagnostic; plain exceptions from third-party plugins are
    accepted as-is.
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the stored error."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.error, EmitterError):
            return {"ok": False, "error": self.error.to_dict()}
        return {"ok": False, "error": {"error_type": type(self.error).__name__, "message": str(self.error)}}


Result = Ok[T] | Err[T]


__all__ = ["Ok", "Err", "Result"]
