"""
asyncapi-emitter: AsyncAPI 3.0 documents from annotated declaration trees.

Annotation processors record configuration for declarations in an
``AnnotationStore``; ``emit`` walks the declaration tree, converts it into
document fragments through protocol-aware services, assembles and
validates the document, and returns it with diagnostics.

Examples:
    >>> from asyncapi_emitter import AnnotationStore, emit_sync
    >>> from asyncapi_emitter.state import annotations as a
    >>> store = AnnotationStore()
    >>> a.channel(store, op, "orders/created")
    >>> a.publish(store, op)
    >>> result = emit_sync(program, store)
"""

from asyncapi_emitter.core.diagnostics import Diagnostic, Severity
from asyncapi_emitter.core.settings import EmitterSettings, get_settings
from asyncapi_emitter.model.declarations import Model, ModelProperty, Namespace, Operation, Program
from asyncapi_emitter.pipeline import EmissionPipeline, EmissionResult, emit, emit_sync
from asyncapi_emitter.plugins.registry import PluginRegistry, default_registry
from asyncapi_emitter.state.store import AnnotationKind, AnnotationStore

__version__ = "0.1.0"

__all__ = [
    "Diagnostic",
    "Severity",
    "EmitterSettings",
    "get_settings",
    "Model",
    "ModelProperty",
    "Namespace",
    "Operation",
    "Program",
    "EmissionPipeline",
    "EmissionResult",
    "emit",
    "emit_sync",
    "PluginRegistry",
    "default_registry",
    "AnnotationKind",
    "AnnotationStore",
]
