"""
Annotation processors.

The functions here are what the front end calls when it meets an
annotation (``@channel("orders/created")``, ``@header``, ``@security``,
...). Each one checks the target declaration kind and the record shape,
then stores the record. Nothing invalid ever reaches the store: shape
errors raise :class:`~asyncapi_emitter.core.errors.AnnotationError` and
leave the store untouched.

Manifesto:
    Shape validation happens once, here. Services downstream trust that
    every stored record is well formed and only check cross-field rules.

Examples:
    >>> store = AnnotationStore()
    >>> channel(store, op, "orders/created")
    >>> publish(store, op)
    >>> message(store, order_model, content_type="application/json")
    >>> header(store, order_model.property("traceId"), "X-Trace-Id")
    >>> tags(store, op, ["orders", "critical"]).priority
    1

Guardrails:
    ❌ DON'T: Call ``AnnotationStore.set`` directly with hand-built dicts
    ✅ DO: Go through a processor so the record is validated

Tags:
    annotations, processors, decorators, validation, asyncapi-emitter

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import re
from typing import Any, Iterable, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from asyncapi_emitter.core.errors import AnnotationError
from asyncapi_emitter.core.logging import get_logger
from asyncapi_emitter.model.declarations import Model, ModelProperty, Namespace, Operation
from asyncapi_emitter.model.records import (
    ChannelConfig,
    CorrelationIdConfig,
    HeaderConfig,
    MessageConfig,
    OperationTypeConfig,
    ProtocolBindingConfig,
    SecurityConfig,
    ServerConfig,
    TagsConfig,
)
from asyncapi_emitter.model.types import Scalar
from asyncapi_emitter.state.store import AnnotationKind, AnnotationStore

logger = get_logger(__name__)

R = TypeVar("R", bound=BaseModel)

HEADER_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?$")
TAG_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_-]*$")

# Checked in order; first category with a matching tag wins.
TAG_CATEGORIES: dict[str, tuple[str, ...]] = {
    "auth": ("auth", "authentication", "login", "oauth", "jwt"),
    "user": ("user", "users", "account", "profile"),
    "admin": ("admin", "management", "system"),
    "api": ("api", "rest", "graphql", "webhook"),
    "data": ("data", "analytics", "metrics", "reporting"),
    "notification": ("notification", "alert", "message", "email"),
    "payment": ("payment", "billing", "invoice", "subscription"),
    "internal": ("internal", "system", "health", "monitoring"),
}

TAG_PRIORITIES: dict[str, int] = {
    "critical": 1,
    "high": 2,
    "high-priority": 2,
    "important": 3,
    "normal": 4,
    "low": 5,
    "low-priority": 5,
    "optional": 6,
}

DEFAULT_TAG_PRIORITY = 4

_INTEGER_SCALARS = {
    "integer", "int8", "int16", "int32", "int64", "safeint",
    "uint8", "uint16", "uint32", "uint64",
}
_NUMBER_SCALARS = {"numeric", "float", "float32", "float64", "decimal", "decimal128"}


def _build(record_cls: type[R], target: Any, **data: Any) -> R:
    """Validate a record, converting pydantic failures into AnnotationError."""
    try:
        return record_cls.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise AnnotationError(
            f"Invalid {record_cls.__name__} on '{getattr(target, 'name', target)}': {first.get('msg')}",
            cause=e,
        ).with_context(declaration=getattr(target, "name", None), field=field or None)


def _require_target(target: Any, expected: tuple[type, ...], annotation: str) -> None:
    if not isinstance(target, expected):
        allowed = ", ".join(t.__name__ for t in expected)
        raise AnnotationError(
            f"@{annotation} can only be applied to {allowed}, not {type(target).__name__}"
        ).with_context(declaration=getattr(target, "name", None))


def _store(store: AnnotationStore, target: Any, kind: AnnotationKind, record: R) -> R:
    store.set(target, kind, record)
    return record


# ── Channels / operations ────────────────────────────────────────────────


def channel(
    store: AnnotationStore,
    operation: Operation,
    address: str,
    parameters: dict[str, dict[str, Any]] | None = None,
    description: str | None = None,
) -> ChannelConfig:
    """``@channel(address)`` on an operation."""
    _require_target(operation, (Operation,), "channel")
    record = _build(ChannelConfig, operation, address=address, parameters=parameters, description=description)
    return _store(store, operation, AnnotationKind.CHANNEL, record)


def publish(store: AnnotationStore, operation: Operation) -> OperationTypeConfig:
    """``@publish``: the application sends messages on the operation's channel."""
    _require_target(operation, (Operation,), "publish")
    return _store(store, operation, AnnotationKind.OPERATION_TYPE, OperationTypeConfig(type="publish"))


def subscribe(store: AnnotationStore, operation: Operation) -> OperationTypeConfig:
    """``@subscribe``: the application receives messages from the operation's channel."""
    _require_target(operation, (Operation,), "subscribe")
    return _store(store, operation, AnnotationKind.OPERATION_TYPE, OperationTypeConfig(type="subscribe"))


# ── Messages ─────────────────────────────────────────────────────────────


def message(
    store: AnnotationStore,
    model: Model,
    name: str | None = None,
    *,
    title: str | None = None,
    summary: str | None = None,
    description: str | None = None,
    content_type: str | None = None,
) -> MessageConfig:
    """``@message`` on a model. The message name defaults to the model name."""
    _require_target(model, (Model,), "message")
    record = _build(
        MessageConfig,
        model,
        name=name or model.name,
        title=title,
        summary=summary,
        description=description or model.doc,
        content_type=content_type,
    )
    return _store(store, model, AnnotationKind.MESSAGE, record)


def infer_header_type(prop: ModelProperty) -> str:
    """JSON-schema type name for a header property's scalar."""
    shape = prop.type
    if not isinstance(shape, Scalar):
        return "string"
    name = shape.root.name
    if name in _INTEGER_SCALARS:
        return "integer"
    if name in _NUMBER_SCALARS:
        return "number"
    if name == "boolean":
        return "boolean"
    return "string"


def header(
    store: AnnotationStore,
    prop: ModelProperty,
    name: str | None = None,
    *,
    type: str | None = None,
    required: bool | None = None,
    pattern: str | None = None,
    description: str | None = None,
) -> HeaderConfig:
    """``@header`` on a model property. The header name defaults to the property name."""
    _require_target(prop, (ModelProperty,), "header")
    header_name = name or prop.name
    if not HEADER_NAME_PATTERN.match(header_name):
        raise AnnotationError(
            f"Invalid header name '{header_name}': use letters, digits and inner hyphens"
        ).with_context(declaration=prop.name, field="name")
    if pattern is not None:
        try:
            re.compile(pattern)
        except re.error as e:
            raise AnnotationError(f"Invalid header pattern {pattern!r}: {e}", cause=e).with_context(
                declaration=prop.name, field="pattern"
            )
    record = _build(
        HeaderConfig,
        prop,
        name=header_name,
        type=type or infer_header_type(prop),
        required=(not prop.optional) if required is None else required,
        pattern=pattern,
        description=description or prop.doc,
    )
    return _store(store, prop, AnnotationKind.HEADER, record)


def correlation_id(
    store: AnnotationStore,
    model: Model,
    location: str,
    *,
    required: bool = True,
    schema: dict[str, Any] | None = None,
    description: str | None = None,
) -> CorrelationIdConfig:
    """``@correlationId(location)`` on a message model."""
    _require_target(model, (Model,), "correlationId")
    data: dict[str, Any] = {"location": location, "required": required, "description": description}
    if schema is not None:
        data["schema"] = schema
    record = _build(CorrelationIdConfig, model, **data)
    return _store(store, model, AnnotationKind.CORRELATION_ID, record)


# ── Servers / security / bindings ────────────────────────────────────────


def server(
    store: AnnotationStore,
    namespace: Namespace,
    name: str,
    url: str,
    protocol: str | None = None,
    description: str | None = None,
    protocol_version: str | None = None,
) -> ServerConfig:
    """``@server(name, {url, protocol})`` on a namespace. May be repeated.

    Without ``protocol`` the server uses ``EmitterSettings.default_server_protocol``.
    """
    _require_target(namespace, (Namespace,), "server")
    record = _build(
        ServerConfig,
        namespace,
        name=name,
        url=url,
        protocol=protocol,
        description=description,
        protocol_version=protocol_version,
    )
    return _store(store, namespace, AnnotationKind.SERVER, record)


def security(
    store: AnnotationStore,
    target: Operation | Model | Namespace,
    name: str,
    scheme: dict[str, Any] | BaseModel,
) -> SecurityConfig:
    """``@security(name, scheme)``. ``scheme`` is discriminated by its ``type`` field."""
    _require_target(target, (Operation, Model, Namespace), "security")
    if isinstance(scheme, BaseModel):
        scheme = scheme.model_dump(by_alias=True, exclude_none=True)
    record = _build(SecurityConfig, target, name=name, scheme=scheme)
    return _store(store, target, AnnotationKind.SECURITY, record)


def protocol(
    store: AnnotationStore,
    target: Operation | Model | Namespace,
    protocol: str,
    scope: str,
    data: dict[str, Any] | None = None,
) -> ProtocolBindingConfig:
    """``@protocol(name, scope, data)``: raw binding data for a protocol plugin."""
    _require_target(target, (Operation, Model, Namespace), "protocol")
    record = _build(
        ProtocolBindingConfig,
        target,
        protocol=protocol,
        scope=scope,
        data=data or {},
    )
    return _store(store, target, AnnotationKind.PROTOCOL_BINDING, record)


# ── Tags ─────────────────────────────────────────────────────────────────


def infer_tag_category(names: Iterable[str]) -> str:
    lowered = {n.lower() for n in names}
    for category, keywords in TAG_CATEGORIES.items():
        if lowered.intersection(keywords):
            return category
    return "general"


def infer_tag_priority(names: Iterable[str]) -> int:
    for n in names:
        priority = TAG_PRIORITIES.get(n.lower())
        if priority is not None:
            return priority
    return DEFAULT_TAG_PRIORITY


def tags(
    store: AnnotationStore,
    target: Operation | Model | Namespace,
    names: Iterable[str],
) -> TagsConfig:
    """``@tags([...])``. Invalid tag names are dropped; at least one must survive."""
    _require_target(target, (Operation, Model, Namespace), "tags")
    names = list(names)
    valid: list[str] = []
    for n in names:
        if isinstance(n, str) and TAG_NAME_PATTERN.match(n):
            if n not in valid:
                valid.append(n)
        else:
            logger.warning("tag_dropped", declaration=target.name, tag=n)
    if not valid:
        raise AnnotationError(f"No valid tags for '{target.name}'").with_context(
            declaration=target.name, field="tags"
        )
    record = _build(
        TagsConfig,
        target,
        tags=frozenset(valid),
        category=infer_tag_category(valid),
        priority=infer_tag_priority(valid),
        required="required" in valid or "critical" in valid,
    )
    return _store(store, target, AnnotationKind.TAGS, record)


__all__ = [
    "HEADER_NAME_PATTERN",
    "TAG_NAME_PATTERN",
    "channel",
    "publish",
    "subscribe",
    "message",
    "header",
    "infer_header_type",
    "correlation_id",
    "server",
    "security",
    "protocol",
    "infer_tag_category",
    "infer_tag_priority",
    "tags",
]
