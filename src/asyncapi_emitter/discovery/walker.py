"""
Discovery Walker.

Walks the namespace tree once and collects what the transformation
services consume: operations, message models, namespaces and every
security annotation attached to a reachable declaration.

Manifesto:
    The walker only checks *presence* of annotations by declaration
    identity. It never re-validates record content; processors already did.

Architecture:
    ::

        Program.get_global_namespace()
              │  (absent / raises -> EMPTY_NAMESPACE, root_missing=True)
              ▼
        worklist (stack of namespaces)
              │
              ├──► operations (tree order) ──► DiscoveryResult.operations
              ├──► models (tree order) ─────► DiscoveryResult.models
              │         └── has MESSAGE ───► DiscoveryResult.message_models
              └──► child namespaces pushed in reverse (tree order kept)

        AnnotationStore.all_with(SECURITY) ∩ reachable ─► security

    The traversal uses an explicit stack, so namespace depth is bounded by
    memory rather than the interpreter's recursion limit. A declaration
    reachable by two paths is visited once.

Examples:
    >>> result = DiscoveryWalker(store).discover(program)
    >>> [op.name for op in result.operations]
    ['orderCreated', 'orderShipped']

Tags:
    discovery, traversal, walker, asyncapi-emitter

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from asyncapi_emitter.core.logging import get_logger
from asyncapi_emitter.model.declarations import (
    EMPTY_NAMESPACE,
    Model,
    NamespaceLike,
    Operation,
)
from asyncapi_emitter.model.records import SecurityConfig
from asyncapi_emitter.state.store import AnnotationKind, AnnotationStore

logger = get_logger(__name__)


@dataclass
class DiscoveryResult:
    operations: list[Operation] = field(default_factory=list)
    models: list[Model] = field(default_factory=list)
    message_models: list[Model] = field(default_factory=list)
    namespaces: list[Any] = field(default_factory=list)
    security: list[tuple[Any, SecurityConfig]] = field(default_factory=list)
    root_missing: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.operations or self.models or self.namespaces)

    def summary(self) -> dict[str, int]:
        return {
            "operations": len(self.operations),
            "models": len(self.models),
            "message_models": len(self.message_models),
            "namespaces": len(self.namespaces),
            "security": len(self.security),
        }


def resolve_root(program: Any) -> NamespaceLike | None:
    """Root namespace of ``program``, or None if the front end can't provide one."""
    accessor = getattr(program, "get_global_namespace", None)
    if accessor is None:
        return None
    try:
        root = accessor()
    except Exception as e:
        logger.warning("root_namespace_unavailable", error=str(e))
        return None
    if root is None or not isinstance(root, NamespaceLike):
        return None
    return root


def _as_namespace(node: Any) -> NamespaceLike:
    return node if isinstance(node, NamespaceLike) else EMPTY_NAMESPACE


class DiscoveryWalker:
    """Single depth-first pass over the namespace tree."""

    def __init__(self, store: AnnotationStore):
        self.store = store

    def iter_namespaces(self, root: NamespaceLike) -> Iterator[NamespaceLike]:
        """Namespaces in depth-first pre-order, each yielded once."""
        seen: set[int] = set()
        stack: list[NamespaceLike] = [root]
        while stack:
            namespace = stack.pop()
            if id(namespace) in seen:
                continue
            seen.add(id(namespace))
            yield namespace
            children = [_as_namespace(child) for child in namespace.namespaces or ()]
            stack.extend(reversed(children))

    def discover(self, program: Any) -> DiscoveryResult:
        root = resolve_root(program)
        result = DiscoveryResult(root_missing=root is None)
        if root is None:
            logger.info("discovery_completed", root_missing=True)
            return result

        seen: set[int] = set()
        reachable: set[int] = set()
        for namespace in self.iter_namespaces(root):
            if namespace is EMPTY_NAMESPACE:
                continue
            result.namespaces.append(namespace)
            reachable.add(id(namespace))
            for operation in namespace.operations or ():
                if id(operation) in seen:
                    continue
                seen.add(id(operation))
                reachable.add(id(operation))
                result.operations.append(operation)
            for model in namespace.models or ():
                if id(model) in seen:
                    continue
                seen.add(id(model))
                reachable.add(id(model))
                result.models.append(model)
                if self.store.has(model, AnnotationKind.MESSAGE):
                    result.message_models.append(model)

        for declaration, record in self.store.all_with(AnnotationKind.SECURITY):
            if id(declaration) in reachable:
                result.security.append((declaration, record))

        logger.info("discovery_completed", **result.summary())
        return result


__all__ = ["DiscoveryResult", "DiscoveryWalker", "resolve_root"]
