"""Annotation side-tables keyed by declaration identity.

Manifesto:
    Configuration is attached to declarations without modifying them.
    One store lives for one compilation pass; it is passed into the
    pipeline explicitly rather than kept as a module-level singleton.

    Each kind owns its own ``declaration -> [records]`` table. Several
    records of one kind can accumulate on a declaration (a namespace with
    two servers); ``get`` returns the most recent one.

Tags:
    annotations, side-table, state, asyncapi-emitter

Doc-Types:
    api-reference
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterator

from asyncapi_emitter.core.logging import get_logger

logger = get_logger(__name__)


class AnnotationKind(str, Enum):
    CHANNEL = "channel"
    OPERATION_TYPE = "operationType"
    SERVER = "server"
    SECURITY = "security"
    PROTOCOL_BINDING = "protocolBinding"
    MESSAGE = "message"
    HEADER = "header"
    CORRELATION_ID = "correlationId"
    TAGS = "tags"


class AnnotationStore:
    """Per-kind ``declaration -> records`` tables.

    Declarations are used as dict keys, so they must hash by identity
    (the declaration dataclasses use ``eq=False``).

    Examples:
        >>> store = AnnotationStore()
        >>> store.set(op, AnnotationKind.CHANNEL, ChannelConfig(address="orders"))
        >>> store.get(op, AnnotationKind.CHANNEL).address
        'orders'
    """

    def __init__(self) -> None:
        self._tables: dict[AnnotationKind, dict[Any, list[Any]]] = {kind: {} for kind in AnnotationKind}

    def set(self, declaration: Any, kind: AnnotationKind, record: Any) -> None:
        """Append ``record`` to the ``kind`` table of ``declaration``."""
        self._tables[kind].setdefault(declaration, []).append(record)
        logger.debug(
            "annotation_recorded",
            kind=kind.value,
            declaration=getattr(declaration, "name", None),
            record=type(record).__name__,
        )

    def get(self, declaration: Any, kind: AnnotationKind) -> Any | None:
        """Most recent record of ``kind`` for ``declaration``, or None."""
        records = self._tables[kind].get(declaration)
        return records[-1] if records else None

    def get_all(self, declaration: Any, kind: AnnotationKind) -> list[Any]:
        return list(self._tables[kind].get(declaration, ()))

    def has(self, declaration: Any, kind: AnnotationKind) -> bool:
        return bool(self._tables[kind].get(declaration))

    def all_with(self, kind: AnnotationKind) -> Iterator[tuple[Any, Any]]:
        """Every ``(declaration, record)`` pair of ``kind``, in insertion order."""
        for declaration, records in list(self._tables[kind].items()):
            for record in records:
                yield declaration, record

    def declarations_with(self, kind: AnnotationKind) -> list[Any]:
        return [decl for decl, records in self._tables[kind].items() if records]

    def clear(self) -> None:
        """Clear all tables (for testing)."""
        for table in self._tables.values():
            table.clear()

    def __len__(self) -> int:
        return sum(len(records) for table in self._tables.values() for records in table.values())


__all__ = ["AnnotationKind", "AnnotationStore"]
