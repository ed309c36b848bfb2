"""
Document Assembler.

The single writer of the :class:`~asyncapi_emitter.model.document.Document`.
Fragments from all services are merged in canonical order, cross
references are checked, and the document is frozen.

Manifesto:
    Services finish in any order; the document must not care. Sorting
    fragments by ``(kind, key, origin)`` before merging makes the result
    independent of task completion order.

Architecture:
    ::

        fragments ──sort(kind, key, origin)──► merge
                                                 │  same key: overwrite, except
                                                 │    tags, security  -> union
                                                 │    channel.messages -> union
                                                 ▼
                                        check_references
                                                 │  channel message ref dangling -> ref removed
                                                 │  operation channel/message ref dangling -> operation dropped
                                                 │  security ref dangling -> ref removed
                                                 ▼
                                              freeze()

Tags:
    assembly, merge, referential-integrity, asyncapi-emitter

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import copy
from typing import Any, Iterable

from asyncapi_emitter.core.diagnostics import DiagnosticCollector
from asyncapi_emitter.core.errors import ReferenceIntegrityError
from asyncapi_emitter.core.logging import get_logger
from asyncapi_emitter.model.document import (
    Document,
    Fragment,
    FragmentKind,
    channel_ref,
    escape_pointer,
    operation_ref,
)

logger = get_logger(__name__)

SECTION_FOR_KIND: dict[FragmentKind, str] = {
    FragmentKind.SERVER: "servers",
    FragmentKind.CHANNEL: "channels",
    FragmentKind.OPERATION: "operations",
    FragmentKind.MESSAGE: "messages",
    FragmentKind.SCHEMA: "schemas",
    FragmentKind.SECURITY_SCHEME: "securitySchemes",
}

ADDITIVE_LIST_FIELDS = ("tags", "security")


def _union_by(existing: list[dict[str, Any]], incoming: list[dict[str, Any]], key: str) -> list[dict[str, Any]]:
    merged = {item.get(key): item for item in existing}
    for item in incoming:
        merged.setdefault(item.get(key), item)
    return [merged[k] for k in sorted(merged, key=str)]


def merge_values(kind: FragmentKind, existing: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    """Second fragment for a key: overwrite, keeping additive fields accumulated."""
    merged = copy.deepcopy(incoming)
    if "tags" in existing or "tags" in incoming:
        merged["tags"] = _union_by(existing.get("tags", []), incoming.get("tags", []), "name")
    if "security" in existing or "security" in incoming:
        merged["security"] = _union_by(existing.get("security", []), incoming.get("security", []), "$ref")
    if kind is FragmentKind.CHANNEL:
        messages = dict(existing.get("messages", {}))
        messages.update(incoming.get("messages", {}))
        merged["messages"] = messages
    return merged


class DocumentAssembler:
    def __init__(self, document: Document, diagnostics: DiagnosticCollector):
        self.document = document
        self.diagnostics = diagnostics

    def merge(self, fragments: Iterable[Fragment]) -> None:
        ordered = sorted(fragments, key=lambda f: f.sort_key)
        for fragment in ordered:
            self._merge_one(fragment)
        logger.debug("fragments_merged", count=len(ordered))

    def _merge_one(self, fragment: Fragment) -> None:
        if fragment.kind is FragmentKind.INFO_TAGS:
            current = self.document.info.get("tags", [])
            self.document.set_info("tags", _union_by(current, list(fragment.value), "name"))
            return
        section = SECTION_FOR_KIND[fragment.kind]
        existing = self.document.get(section, fragment.key)
        if existing is None:
            self.document.put(section, fragment.key, copy.deepcopy(fragment.value))
        else:
            self.document.put(section, fragment.key, merge_values(fragment.kind, existing, fragment.value))

    # ── Referential integrity ────────────────────────────────────

    def _dangling(self, message: str, path: str) -> None:
        self.diagnostics.add_error(ReferenceIntegrityError(message).with_context(path=path), path=path)

    def check_references(self) -> None:
        doc = self.document

        for address, channel in list(doc.channels.items()):
            messages = channel.get("messages", {})
            for name, ref in list(messages.items()):
                if not doc.resolves(ref.get("$ref", "")):
                    path = f"{channel_ref(address)}/messages/{escape_pointer(name)}"
                    self._dangling(f"Channel '{address}' references missing message '{ref.get('$ref')}'", path)
                    del messages[name]

        for name, operation in list(doc.operations.items()):
            path = operation_ref(name)
            channel = operation.get("channel", {}).get("$ref", "")
            if not doc.resolves(channel):
                self._dangling(f"Operation '{name}' references missing channel '{channel}'; operation dropped", path)
                doc.remove("operations", name)
                continue
            missing = [m["$ref"] for m in operation.get("messages", []) if not doc.resolves(m.get("$ref", ""))]
            if missing:
                self._dangling(
                    f"Operation '{name}' references missing message '{missing[0]}'; operation dropped", path
                )
                doc.remove("operations", name)
                continue
            self._prune_security(operation, path)

        for name, server in doc.servers.items():
            self._prune_security(server, f"#/servers/{escape_pointer(name)}")

    def _prune_security(self, target: dict[str, Any], path: str) -> None:
        requirements = target.get("security")
        if not requirements:
            return
        kept = []
        for requirement in requirements:
            if self.document.resolves(requirement.get("$ref", "")):
                kept.append(requirement)
            else:
                self._dangling(f"Security requirement '{requirement.get('$ref')}' does not resolve", f"{path}/security")
        if kept:
            target["security"] = kept
        else:
            del target["security"]

    def assemble(self, fragments: Iterable[Fragment]) -> Document:
        self.merge(fragments)
        self.check_references()
        self.document.freeze()
        logger.info(
            "document_assembled",
            servers=len(self.document.servers),
            channels=len(self.document.channels),
            operations=len(self.document.operations),
            messages=len(self.document.components["messages"]),
            schemas=len(self.document.components["schemas"]),
        )
        return self.document


__all__ = ["DocumentAssembler", "merge_values"]
