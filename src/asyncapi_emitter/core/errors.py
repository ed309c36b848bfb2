"""
Structured error types for the AsyncAPI emitter.

Provides a typed hierarchy of errors with rich metadata for categorizing
emission failures, turning them into diagnostics, and chaining root causes.

Almost nothing in the emission pipeline is fatal. Annotation shape problems,
semantic configuration mistakes, missing protocol plugins and dangling
references are all reported and the pipeline keeps going. The error types
below exist so that every one of those reports carries the same metadata:
- **Category:** What kind of failure (annotation, semantic, plugin, ...)
- **Code:** Stable kebab-case identifier copied onto the diagnostic
- **Context:** Declaration, path and free-form metadata
- **Cause:** Chained underlying exception for root cause analysis

Manifesto:
    - **Typed Error Hierarchy:** Different error types for different stages
    - **Errors as values:** Most errors are returned inside ``Err`` rather than raised
    - **Rich Context:** Errors carry the declaration and document path they concern
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       EmitterError                               │
        │  (category, code, context, cause)                                │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ConfigError        AnnotationError     SemanticError            │
        │  (CONFIG)           (ANNOTATION)        (SEMANTIC)               │
        │       │                                      │                   │
        │  InvalidConfigError              SecuritySchemeError             │
        │                                  CorrelationIdError              │
        │                                  OperationTypeError              │
        │                                                                  │
        │  PluginError        ReferenceIntegrityError   DocumentError      │
        │  (PLUGIN)           (REFERENCE)               (DOCUMENT)         │
        │       │                                            │             │
        │  PluginNotFoundError                      DocumentFrozenError    │
        │  DuplicatePluginError                                            │
        │  BindingValidationError          DiscoveryError (DISCOVERY)      │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    Creating a semantic error with context:

    >>> error = SecuritySchemeError("authorizationCode flow must have tokenUrl")
    >>> error.category
    <ErrorCategory.SEMANTIC: 'SEMANTIC'>
    >>> error.with_context(declaration="orders", path="#/components/securitySchemes/oauth")
    SecuritySchemeError(...)

    Chaining a plugin crash:

    >>> try:
    ...     raise KeyError("topic")
    ... except KeyError as e:
    ...     error = PluginError("kafka channel binding failed", cause=e)
    >>> error.cause
    KeyError('topic')

Guardrails:
    ❌ DON'T: Raise generic Exception from services - it aborts the gather
    ✅ DO: Return Err(EmitterError subclass) and let the service record a diagnostic

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, diagnostics, error-context,
    asyncapi-emitter

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification.

    Categories follow the pipeline stages: configuration happens before the
    run, annotation errors are raised while records are stored, semantic and
    plugin errors appear during transformation, reference errors during
    assembly.

    Attributes:
        CONFIG: Settings or unsupported document version
        ANNOTATION: Record shape rejected by an annotation processor
        SEMANTIC: Cross-field rule violated (security scheme, correlation id)
        DISCOVERY: Front end did not honour the namespace contract
        PLUGIN: Protocol plugin missing, duplicated or failing
        REFERENCE: Dangling cross reference after assembly
        DOCUMENT: Document construction or mutation error
        STRUCTURE: Required field missing in the assembled document
        INTERNAL: Bugs, unexpected state
    """

    CONFIG = "CONFIG"
    ANNOTATION = "ANNOTATION"
    SEMANTIC = "SEMANTIC"
    DISCOVERY = "DISCOVERY"
    PLUGIN = "PLUGIN"
    REFERENCE = "REFERENCE"
    DOCUMENT = "DOCUMENT"
    STRUCTURE = "STRUCTURE"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Attributes:
        declaration: Name of the declaration the error concerns
        path: JSON pointer into the output document
        protocol: Protocol name for plugin errors
        field: Offending field of a configuration record
        metadata: Any additional key/value pairs
    """

    declaration: str | None = None
    path: str | None = None
    protocol: str | None = None
    field: str | None = None

    # ``field`` above names a record field, so the dataclass helper is aliased.
    metadata: dict[str, Any] = dataclass_field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["declaration", "path", "protocol", "field"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class EmitterError(Exception):
    """
    Base exception for all emitter errors.

    Subclasses set ``default_category`` and ``default_code``; both can be
    overridden per instance.

    Examples:
        >>> error = EmitterError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.code
        'internal-error'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_code: str = "internal-error"

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        code: str | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.code = code or self.default_code
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> EmitterError:
        """
        Add context to this error (fluent API).

        Usage:
            return Err(PluginError("boom").with_context(protocol="kafka"))
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "code": self.code,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(EmitterError):
    """Emitter configuration error. Raised, never collected."""

    default_category = ErrorCategory.CONFIG
    default_code = "invalid-config"


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# ANNOTATION / SEMANTIC ERRORS
# =============================================================================


class AnnotationError(EmitterError):
    """An annotation processor rejected a record before it reached the store."""

    default_category = ErrorCategory.ANNOTATION
    default_code = "invalid-annotation"


class SemanticError(EmitterError):
    """
    Cross-field rule violated by an otherwise well-formed record.

    The offending annotation is treated as absent for its declaration.
    """

    default_category = ErrorCategory.SEMANTIC
    default_code = "invalid-configuration"

    def __init__(self, message: str, *, field: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if field is not None:
            self.context.field = field


class SecuritySchemeError(SemanticError):
    """Security scheme fails its discriminant-specific rules."""

    default_code = "invalid-security-scheme"


class CorrelationIdError(SemanticError):
    """Correlation id location is not a usable runtime expression."""

    default_code = "invalid-correlation-id"


class OperationTypeError(SemanticError):
    """Operation has no usable publish/subscribe marker."""

    default_code = "missing-operation-type"


# =============================================================================
# DISCOVERY ERRORS
# =============================================================================


class DiscoveryError(EmitterError):
    """Front end did not provide a usable namespace tree."""

    default_category = ErrorCategory.DISCOVERY
    default_code = "missing-root-namespace"


# =============================================================================
# PLUGIN ERRORS
# =============================================================================


class PluginError(EmitterError):
    """A protocol plugin failed while generating a binding."""

    default_category = ErrorCategory.PLUGIN
    default_code = "plugin-failure"


class PluginNotFoundError(PluginError):
    """No plugin is registered for the requested protocol."""

    default_code = "missing-plugin"

    def __init__(self, protocol: str, message: str | None = None):
        self.protocol = protocol
        super().__init__(message or f"No protocol plugin registered for '{protocol}'")
        self.context.protocol = protocol


class DuplicatePluginError(PluginError):
    """A plugin with the same name is already registered."""

    default_code = "duplicate-plugin"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Protocol plugin '{name}' is already registered")
        self.context.protocol = name


class BindingValidationError(PluginError):
    """Binding data rejected by the plugin's ``validate_config``."""

    default_code = "invalid-binding"


# =============================================================================
# ASSEMBLY ERRORS
# =============================================================================


class ReferenceIntegrityError(EmitterError):
    """A fragment references a key that is absent from the Document."""

    default_category = ErrorCategory.REFERENCE
    default_code = "dangling-reference"


class DocumentError(EmitterError):
    """The Document could not be constructed."""

    default_category = ErrorCategory.DOCUMENT
    default_code = "document-error"


class DocumentFrozenError(DocumentError):
    """Attempted to mutate a Document after assembly finished."""

    default_code = "document-frozen"


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "EmitterError",
    "ConfigError",
    "InvalidConfigError",
    "AnnotationError",
    "SemanticError",
    "SecuritySchemeError",
    "CorrelationIdError",
    "OperationTypeError",
    "DiscoveryError",
    "PluginError",
    "PluginNotFoundError",
    "DuplicatePluginError",
    "BindingValidationError",
    "ReferenceIntegrityError",
    "DocumentError",
    "DocumentFrozenError",
]
