"""Declarations, type shapes, annotation records and the output document."""

from asyncapi_emitter.model.declarations import (
    EMPTY_NAMESPACE,
    Model,
    ModelProperty,
    Namespace,
    Operation,
    Program,
)
from asyncapi_emitter.model.document import Document, Fragment, FragmentKind

__all__ = [
    "EMPTY_NAMESPACE",
    "Model",
    "ModelProperty",
    "Namespace",
    "Operation",
    "Program",
    "Document",
    "Fragment",
    "FragmentKind",
]
