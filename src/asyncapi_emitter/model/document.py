"""
Output document and the fragments that build it.

Transformation services never touch the :class:`Document`; they return
:class:`Fragment` values. The assembler is the only writer, and it freezes
the document before the structural validator reads it.

Architecture:
    ::

        services ──► Fragment(kind, key, value, origin)
                          │
                          ▼
                     Assembler.merge()
                          │
                          ▼
        Document {asyncapi, info, servers, channels, operations,
                  components{schemas, messages, securitySchemes}}
                          │ freeze()
                          ▼
                  StructuralValidator / serializer

    References are JSON pointers into the document: ``#/channels/orders~1created``,
    ``#/components/messages/Order``. ``~`` and ``/`` inside a key are escaped
    as ``~0`` and ``~1``.

Tags:
    document, fragments, json-pointer, asyncapi-emitter

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from asyncapi_emitter.core.errors import DocumentFrozenError, InvalidConfigError


class FragmentKind(str, Enum):
    """Fragment kinds in canonical merge order."""

    SERVER = "server"
    CHANNEL = "channel"
    OPERATION = "operation"
    MESSAGE = "message"
    SCHEMA = "schema"
    SECURITY_SCHEME = "securityScheme"
    INFO_TAGS = "infoTags"

    @property
    def order(self) -> int:
        return list(FragmentKind).index(self)


@dataclass(frozen=True)
class Fragment:
    """One keyed piece of the output document produced by a service."""

    kind: FragmentKind
    key: str
    value: dict[str, Any] | list[Any]
    origin: str = ""

    @property
    def sort_key(self) -> tuple[int, str, str]:
        return (self.kind.order, self.key, self.origin)


@dataclass
class ServiceOutput:
    """Fragments produced by one service run."""

    fragments: list[Fragment] = field(default_factory=list)

    def add(self, kind: FragmentKind, key: str, value: Any, origin: str = "") -> None:
        self.fragments.append(Fragment(kind, key, value, origin))

    def extend(self, other: ServiceOutput) -> None:
        self.fragments.extend(other.fragments)


# ---------------------------------------------------------------------------
# JSON pointer helpers
# ---------------------------------------------------------------------------


def escape_pointer(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def unescape_pointer(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def channel_ref(address: str) -> str:
    return f"#/channels/{escape_pointer(address)}"


def operation_ref(name: str) -> str:
    return f"#/operations/{escape_pointer(name)}"


def schema_ref(name: str) -> str:
    return f"#/components/schemas/{escape_pointer(name)}"


def message_ref(name: str) -> str:
    return f"#/components/messages/{escape_pointer(name)}"


def security_ref(name: str) -> str:
    return f"#/components/securitySchemes/{escape_pointer(name)}"


def split_ref(ref: str) -> list[str]:
    """``#/channels/a~1b`` -> ``["channels", "a/b"]``. Non-local refs give ``[]``."""
    if not ref.startswith("#/"):
        return []
    return [unescape_pointer(token) for token in ref[2:].split("/")]


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class Document:
    """Mutable accumulation target, frozen once assembly is done."""

    SECTIONS = ("servers", "channels", "operations")
    COMPONENT_SECTIONS = ("schemas", "messages", "securitySchemes")

    def __init__(
        self,
        version: str = "3.0.0",
        title: str = "AsyncAPI",
        api_version: str = "1.0.0",
        description: str | None = None,
    ):
        if not version or not version.startswith("3."):
            raise InvalidConfigError("asyncapi_version", version, f"Unsupported AsyncAPI version {version!r}")
        self.asyncapi = version
        self.info: dict[str, Any] = {"title": title, "version": api_version}
        if description:
            self.info["description"] = description
        self.servers: dict[str, dict[str, Any]] = {}
        self.channels: dict[str, dict[str, Any]] = {}
        self.operations: dict[str, dict[str, Any]] = {}
        self.components: dict[str, dict[str, Any]] = {name: {} for name in self.COMPONENT_SECTIONS}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def _check_mutable(self) -> None:
        if self._frozen:
            raise DocumentFrozenError("Document is frozen after assembly")

    def section(self, name: str) -> dict[str, Any]:
        """Return the map for a top-level section or a component section."""
        if name in self.SECTIONS:
            return getattr(self, name)
        if name in self.COMPONENT_SECTIONS:
            return self.components[name]
        raise KeyError(name)

    def get(self, name: str, key: str) -> Any:
        return self.section(name).get(key)

    def put(self, name: str, key: str, value: Any) -> None:
        self._check_mutable()
        self.section(name)[key] = value

    def remove(self, name: str, key: str) -> None:
        self._check_mutable()
        self.section(name).pop(key, None)

    def set_info(self, key: str, value: Any) -> None:
        self._check_mutable()
        self.info[key] = value

    def resolves(self, ref: str) -> bool:
        """True when a local ``$ref`` points at an existing key."""
        tokens = split_ref(ref)
        if not tokens:
            return False
        node: Any = self._view()
        for token in tokens:
            if not isinstance(node, dict) or token not in node:
                return False
            node = node[token]
        return True

    def _view(self) -> dict[str, Any]:
        return {
            "asyncapi": self.asyncapi,
            "info": self.info,
            "servers": self.servers,
            "channels": self.channels,
            "operations": self.operations,
            "components": self.components,
        }

    def to_dict(self) -> dict[str, Any]:
        """Deep copy in AsyncAPI top-level shape."""
        return copy.deepcopy(self._view())


__all__ = [
    "FragmentKind",
    "Fragment",
    "ServiceOutput",
    "escape_pointer",
    "unescape_pointer",
    "channel_ref",
    "operation_ref",
    "schema_ref",
    "message_ref",
    "security_ref",
    "split_ref",
    "Document",
]
