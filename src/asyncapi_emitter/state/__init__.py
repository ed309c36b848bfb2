"""Annotation side-tables and the processors that fill them."""

from asyncapi_emitter.state.store import AnnotationKind, AnnotationStore

__all__ = ["AnnotationKind", "AnnotationStore"]
