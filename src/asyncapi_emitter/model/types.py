"""
Type shapes produced by the front end.

A type shape describes the structure of a value: a scalar, a literal, a
union, an array, a record (string-keyed map), an inline object or null.
A named :class:`~asyncapi_emitter.model.declarations.Model` is also a valid
shape wherever one of these appears.

Shapes are frozen so they can be compared structurally and used as dict
keys; models compare by identity.

Tags:
    types, type-shapes, asyncapi-emitter

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union as _Union

if TYPE_CHECKING:
    from asyncapi_emitter.model.declarations import Model, ModelProperty


@dataclass(frozen=True)
class Scalar:
    """Primitive type. ``base`` is set for branded scalars (``scalar OrderId extends string``)."""

    name: str
    base: Scalar | None = None
    doc: str | None = None

    @property
    def root(self) -> Scalar:
        """The built-in scalar at the bottom of the ``base`` chain."""
        current = self
        seen: set[int] = set()
        while current.base is not None and id(current) not in seen:
            seen.add(id(current))
            current = current.base
        return current


@dataclass(frozen=True)
class Literal:
    value: str | int | float | bool


@dataclass(frozen=True)
class NullType:
    pass


@dataclass(frozen=True)
class Union:
    variants: tuple[TypeShape, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.variants, tuple):
            object.__setattr__(self, "variants", tuple(self.variants))


@dataclass(frozen=True)
class ArrayType:
    element: TypeShape


@dataclass(frozen=True)
class RecordType:
    value: TypeShape


@dataclass(frozen=True)
class ObjectType:
    """Anonymous inline object (``{ id: string }`` without a model name)."""

    properties: tuple[ModelProperty, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.properties, tuple):
            object.__setattr__(self, "properties", tuple(self.properties))


TypeShape = _Union[Scalar, Literal, NullType, Union, ArrayType, RecordType, ObjectType, "Model"]


# Built-in scalars
STRING = Scalar("string")
BOOLEAN = Scalar("boolean")
INT32 = Scalar("int32")
INT64 = Scalar("int64")
FLOAT32 = Scalar("float32")
FLOAT64 = Scalar("float64")
BYTES = Scalar("bytes")
UTC_DATE_TIME = Scalar("utcDateTime")
NULL = NullType()


def literal_union(*values: Any) -> Union:
    """Shorthand for ``"a" | "b" | "c"``."""
    return Union(tuple(Literal(v) for v in values))


def nullable(shape: TypeShape) -> Union:
    """Shorthand for ``shape | null``."""
    return Union((shape, NULL))


__all__ = [
    "Scalar",
    "Literal",
    "NullType",
    "Union",
    "ArrayType",
    "RecordType",
    "ObjectType",
    "TypeShape",
    "STRING",
    "BOOLEAN",
    "INT32",
    "INT64",
    "FLOAT32",
    "FLOAT64",
    "BYTES",
    "UTC_DATE_TIME",
    "NULL",
    "literal_union",
    "nullable",
]
