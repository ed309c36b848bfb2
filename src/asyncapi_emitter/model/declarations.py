"""
Declaration tree consumed by the emitter.

Declarations are the nodes the front end hands over after parsing and type
checking: namespaces containing operations, models and child namespaces.
They are never mutated by the emitter; everything the emitter learns about
them lives in the :class:`~asyncapi_emitter.state.store.AnnotationStore`.

Identity is reference identity (``eq=False``), so two structurally equal
models are still two declarations.

Manifesto:
    The walker depends on shape, not implementation. Any front end whose
    namespace exposes ``operations``, ``models`` and ``namespaces``
    satisfies :class:`NamespaceLike`; a program without a usable root maps
    to :data:`EMPTY_NAMESPACE` instead of ad hoc ``None`` checks.

Tags:
    declarations, protocol, front-end, asyncapi-emitter

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Protocol, runtime_checkable

from asyncapi_emitter.model.types import TypeShape


@dataclass(eq=False)
class ModelProperty:
    name: str
    type: TypeShape
    optional: bool = False
    doc: str | None = None


@dataclass(eq=False)
class Model:
    """Named data model (``model Order { ... }``)."""

    name: str
    properties: list[ModelProperty] = field(default_factory=list)
    doc: str | None = None

    def property(self, name: str) -> ModelProperty | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


@dataclass(eq=False)
class Operation:
    """Operation declaration (``op orderCreated(): Order``)."""

    name: str
    parameters: list[ModelProperty] = field(default_factory=list)
    return_type: TypeShape | None = None
    doc: str | None = None


@dataclass(eq=False)
class Namespace:
    name: str
    operations: list[Operation] = field(default_factory=list)
    models: list[Model] = field(default_factory=list)
    namespaces: list[Namespace] = field(default_factory=list)
    doc: str | None = None


@dataclass(eq=False)
class Program:
    """Result of one compilation pass."""

    global_namespace: Namespace | None = None

    def get_global_namespace(self) -> Namespace | None:
        return self.global_namespace


# ---------------------------------------------------------------------------
# Front-end capability protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class NamespaceLike(Protocol):
    """Minimal namespace interface the discovery walker relies on."""

    @property
    def name(self) -> str: ...

    @property
    def operations(self) -> Iterable[Operation]: ...

    @property
    def models(self) -> Iterable[Model]: ...

    @property
    def namespaces(self) -> Iterable[NamespaceLike]: ...


@runtime_checkable
class ProgramLike(Protocol):
    def get_global_namespace(self) -> NamespaceLike | None: ...


EMPTY_NAMESPACE = Namespace(name="")

Declaration = Operation | Model | Namespace | ModelProperty


__all__ = [
    "ModelProperty",
    "Model",
    "Operation",
    "Namespace",
    "Program",
    "NamespaceLike",
    "ProgramLike",
    "EMPTY_NAMESPACE",
    "Declaration",
]
