"""
Type-to-Schema Converter.

Maps a type shape to a :class:`SchemaFragment`, the emitter's neutral
schema representation, and renders fragments as AsyncAPI / JSON Schema
objects.

Manifesto:
    Conversion is a pure function of the shape. Calling it twice on the
    same shape gives equal fragments, which is what makes the per-model
    cache safe: a race that converts one model twice only wastes work.

Architecture:
    ::

        Scalar ──────────────► primitive {type, format}      (unknown -> string)
        Scalar(base=...) ────► primitive of base chain, title = brand
        Literal ─────────────► enum [value]
        Union(all literals) ─► enum [values...]               (order kept)
        Union(T | null) ─────► T, nullable
        Union(other) ────────► union {variants}               (oneOf)
        ArrayType ───────────► array {items}
        RecordType ──────────► object {additionalProperties}
        ObjectType ──────────► object {properties, required}  (inline)
        Model (top level) ───► object {properties, required}
        Model (nested) ──────► ref #/components/schemas/<Name>

    ``required`` lists non-optional properties in declaration order.
    Nullability of a property's type never affects ``required``.

Examples:
    >>> converter = SchemaConverter()
    >>> fragment = converter.convert(order_model)
    >>> fragment.required
    ('id', 'total')
    >>> converter.convert(literal_union("a", "b", "c")).enum
    ('a', 'b', 'c')

Tags:
    schema, json-schema, conversion, cache, asyncapi-emitter

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from asyncapi_emitter.core.logging import get_logger
from asyncapi_emitter.model.declarations import Model, ModelProperty
from asyncapi_emitter.model.document import schema_ref
from asyncapi_emitter.model.types import (
    ArrayType,
    Literal,
    NullType,
    ObjectType,
    RecordType,
    Scalar,
    TypeShape,
    Union,
)

logger = get_logger(__name__)

# name -> (type, format)
SCALAR_TYPES: dict[str, tuple[str, str | None]] = {
    "string": ("string", None),
    "boolean": ("boolean", None),
    "integer": ("integer", None),
    "int8": ("integer", "int32"),
    "int16": ("integer", "int32"),
    "int32": ("integer", "int32"),
    "int64": ("integer", "int64"),
    "uint8": ("integer", "int32"),
    "uint16": ("integer", "int32"),
    "uint32": ("integer", "int64"),
    "uint64": ("integer", "int64"),
    "safeint": ("integer", "int64"),
    "numeric": ("number", None),
    "decimal": ("number", None),
    "decimal128": ("number", None),
    "float": ("number", None),
    "float32": ("number", "float"),
    "float64": ("number", "double"),
    "bytes": ("string", "binary"),
    "utcDateTime": ("string", "date-time"),
    "offsetDateTime": ("string", "date-time"),
    "plainDate": ("string", "date"),
    "plainTime": ("string", "time"),
    "duration": ("string", "duration"),
    "url": ("string", "uri"),
}

DEFAULT_SCALAR = ("string", None)


@dataclass(frozen=True)
class SchemaFragment:
    """Converted shape. ``kind`` is one of object, array, primitive, enum, union, ref, null."""

    kind: str
    type: str | None = None
    format: str | None = None
    properties: dict[str, SchemaFragment] | None = None
    required: tuple[str, ...] = ()
    items: SchemaFragment | None = None
    additional_properties: SchemaFragment | None = None
    enum: tuple[Any, ...] | None = None
    variants: tuple[SchemaFragment, ...] | None = None
    ref: str | None = None
    nullable: bool = False
    title: str | None = None
    description: str | None = None

    @property
    def optional_properties(self) -> tuple[str, ...]:
        names = self.properties or {}
        return tuple(n for n in names if n not in self.required)

    def without(self, names: set[str]) -> SchemaFragment:
        """Copy of an object fragment with ``names`` removed from properties and required."""
        if self.properties is None:
            return self
        return replace(
            self,
            properties={k: v for k, v in self.properties.items() if k not in names},
            required=tuple(r for r in self.required if r not in names),
        )

    def to_json_schema(self) -> dict[str, Any]:
        """Render with AsyncAPI schema keywords."""
        schema: dict[str, Any] = {}
        if self.title:
            schema["title"] = self.title
        if self.description:
            schema["description"] = self.description

        if self.kind == "ref":
            body: dict[str, Any] = {"$ref": self.ref}
        elif self.kind == "union":
            body = {"oneOf": [v.to_json_schema() for v in self.variants or ()]}
        elif self.kind == "null":
            body = {"type": "null"}
        else:
            body = {}
            if self.type:
                body["type"] = self.type
            if self.format:
                body["format"] = self.format
            if self.kind == "enum":
                body["enum"] = list(self.enum or ())
            if self.kind == "array" and self.items is not None:
                body["items"] = self.items.to_json_schema()
            if self.kind == "object":
                if self.properties is not None:
                    body["properties"] = {k: v.to_json_schema() for k, v in self.properties.items()}
                if self.required:
                    body["required"] = list(self.required)
                if self.additional_properties is not None:
                    body["additionalProperties"] = self.additional_properties.to_json_schema()

        if self.nullable:
            if "type" in body and "$ref" not in body:
                body["type"] = [body["type"], "null"]
                if "enum" in body:
                    body["enum"] = body["enum"] + [None]
            else:
                body = {"oneOf": [body, {"type": "null"}]}

        schema.update(body)
        return schema


def _enum_type(values: tuple[Any, ...]) -> str | None:
    if all(isinstance(v, bool) for v in values):
        return "boolean"
    if all(isinstance(v, str) for v in values):
        return "string"
    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return "integer"
    if all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values):
        return "number"
    return None


def _convert_scalar(scalar: Scalar) -> SchemaFragment:
    root = scalar.root
    type_, fmt = SCALAR_TYPES.get(root.name, DEFAULT_SCALAR)
    if root.name not in SCALAR_TYPES:
        logger.debug("unknown_scalar_defaulted", scalar=root.name, schema_type=type_)
    title = scalar.name if scalar.base is not None else None
    return SchemaFragment(kind="primitive", type=type_, format=fmt, title=title, description=scalar.doc)


def _convert_properties(properties: list[ModelProperty] | tuple[ModelProperty, ...]) -> SchemaFragment:
    converted: dict[str, SchemaFragment] = {}
    required: list[str] = []
    for prop in properties:
        fragment = convert(prop.type, top_level=False)
        if prop.doc and not fragment.description:
            fragment = replace(fragment, description=prop.doc)
        converted[prop.name] = fragment
        if not prop.optional:
            required.append(prop.name)
    return SchemaFragment(kind="object", type="object", properties=converted, required=tuple(required))


def _convert_union(union: Union) -> SchemaFragment:
    variants = union.variants
    non_null = tuple(v for v in variants if not isinstance(v, NullType))
    has_null = len(non_null) != len(variants)

    if non_null and all(isinstance(v, Literal) for v in non_null):
        values = tuple(v.value for v in non_null)
        return SchemaFragment(kind="enum", type=_enum_type(values), enum=values, nullable=has_null)

    if has_null and len(non_null) == 1:
        return replace(convert(non_null[0], top_level=False), nullable=True)

    if not non_null:
        return SchemaFragment(kind="null")

    return SchemaFragment(
        kind="union",
        variants=tuple(convert(v, top_level=False) for v in variants),
    )


def convert(shape: TypeShape, *, top_level: bool = True) -> SchemaFragment:
    """Convert a type shape. Pure; no caching.

    ``top_level`` expands a named model into its object schema; nested
    models become references to their component schema.
    """
    if isinstance(shape, Model):
        if not top_level:
            return SchemaFragment(kind="ref", ref=schema_ref(shape.name))
        fragment = _convert_properties(shape.properties)
        if shape.doc:
            fragment = replace(fragment, description=shape.doc)
        return fragment
    if isinstance(shape, Scalar):
        return _convert_scalar(shape)
    if isinstance(shape, Literal):
        return SchemaFragment(kind="enum", type=_enum_type((shape.value,)), enum=(shape.value,))
    if isinstance(shape, Union):
        return _convert_union(shape)
    if isinstance(shape, ArrayType):
        return SchemaFragment(kind="array", type="array", items=convert(shape.element, top_level=False))
    if isinstance(shape, RecordType):
        return SchemaFragment(
            kind="object",
            type="object",
            additional_properties=convert(shape.value, top_level=False),
        )
    if isinstance(shape, ObjectType):
        return _convert_properties(shape.properties)
    if isinstance(shape, NullType):
        return SchemaFragment(kind="null")
    logger.debug("unknown_shape_defaulted", shape=type(shape).__name__)
    return SchemaFragment(kind="primitive", type=DEFAULT_SCALAR[0])


def referenced_models(shape: TypeShape) -> list[Model]:
    """Named models reachable from ``shape`` (including itself), first-seen order."""
    found: list[Model] = []
    seen: set[int] = set()
    stack: list[Any] = [shape]
    while stack:
        current = stack.pop()
        if isinstance(current, Model):
            if id(current) in seen:
                continue
            seen.add(id(current))
            found.append(current)
            stack.extend(reversed([p.type for p in current.properties]))
        elif isinstance(current, Union):
            stack.extend(reversed(current.variants))
        elif isinstance(current, ArrayType):
            stack.append(current.element)
        elif isinstance(current, RecordType):
            stack.append(current.value)
        elif isinstance(current, ObjectType):
            stack.extend(reversed([p.type for p in current.properties]))
    return found


@dataclass
class SchemaConverter:
    """:func:`convert` with a per-model cache keyed by declaration identity."""

    _cache: dict[Model, SchemaFragment] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def convert(self, shape: TypeShape) -> SchemaFragment:
        if not isinstance(shape, Model):
            return convert(shape)
        with self._lock:
            cached = self._cache.get(shape)
        if cached is not None:
            return cached
        fragment = convert(shape)
        with self._lock:
            return self._cache.setdefault(shape, fragment)

    def component_schemas(
        self, shape: TypeShape, omit: Callable[[Model], set[str]] | None = None
    ) -> dict[str, SchemaFragment]:
        """Component schema for every named model reachable from ``shape``.

        ``omit`` names properties of a model to leave out of its schema.
        """
        schemas = {}
        for model in referenced_models(shape):
            schema = self.convert(model)
            names = omit(model) if omit is not None else set()
            schemas[model.name] = schema.without(names) if names else schema
        return schemas

    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()


__all__ = [
    "SCALAR_TYPES",
    "SchemaFragment",
    "SchemaConverter",
    "convert",
    "referenced_models",
]
