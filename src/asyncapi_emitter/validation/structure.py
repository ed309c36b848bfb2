"""Structural validation of an assembled document.

Collects every problem instead of stopping at the first one. Missing
required fields are errors; missing recommended content is a warning.
The document is only read.
"""

from __future__ import annotations

from typing import Any

from asyncapi_emitter.core.diagnostics import Diagnostic
from asyncapi_emitter.core.logging import get_logger
from asyncapi_emitter.model.document import Document, channel_ref, escape_pointer, message_ref, operation_ref

logger = get_logger(__name__)

VALID_ACTIONS = ("send", "receive")


class StructuralValidator:
    def validate(self, document: Document | dict[str, Any]) -> list[Diagnostic]:
        doc = document.to_dict() if isinstance(document, Document) else document
        issues: list[Diagnostic] = []
        self._check_root(doc, issues)
        self._check_channels(doc.get("channels") or {}, issues)
        self._check_operations(doc.get("operations") or {}, issues)
        self._check_messages((doc.get("components") or {}).get("messages") or {}, issues)
        logger.debug(
            "document_validated",
            errors=sum(1 for d in issues if d.is_error),
            warnings=sum(1 for d in issues if not d.is_error),
        )
        return issues

    def _check_root(self, doc: dict[str, Any], issues: list[Diagnostic]) -> None:
        version = doc.get("asyncapi")
        if not version:
            issues.append(Diagnostic.error("Missing required 'asyncapi' field", "#/asyncapi", "missing-field"))
        elif not str(version).startswith("3."):
            issues.append(
                Diagnostic.warning(f"AsyncAPI version '{version}' is not 3.x", "#/asyncapi", "unsupported-version")
            )

        info = doc.get("info")
        if not isinstance(info, dict):
            issues.append(Diagnostic.error("Missing required 'info' field", "#/info", "missing-field"))
            return
        if not info.get("title"):
            issues.append(Diagnostic.error("Missing required 'info.title' field", "#/info/title", "missing-field"))
        if not info.get("version"):
            issues.append(Diagnostic.error("Missing required 'info.version' field", "#/info/version", "missing-field"))
        if not info.get("description"):
            issues.append(
                Diagnostic.warning("Missing recommended 'info.description' field", "#/info/description",
                                   "missing-description")
            )

    def _check_channels(self, channels: dict[str, Any], issues: list[Diagnostic]) -> None:
        if not channels:
            issues.append(Diagnostic.warning("No channels defined", "#/channels", "no-channels"))
        for key, channel in channels.items():
            if not isinstance(channel, dict) or not channel.get("address"):
                issues.append(
                    Diagnostic.error(f"Channel '{key}' missing required 'address' field",
                                     f"{channel_ref(key)}/address", "missing-field")
                )

    def _check_operations(self, operations: dict[str, Any], issues: list[Diagnostic]) -> None:
        if not operations:
            issues.append(Diagnostic.warning("No operations defined", "#/operations", "no-operations"))
        for name, operation in operations.items():
            path = operation_ref(name)
            action = operation.get("action") if isinstance(operation, dict) else None
            if action not in VALID_ACTIONS:
                issues.append(
                    Diagnostic.error(
                        f"Operation '{name}' action must be 'send' or 'receive', got {action!r}",
                        f"{path}/action",
                        "invalid-action",
                    )
                )
            channel = operation.get("channel") if isinstance(operation, dict) else None
            if not isinstance(channel, dict) or not channel.get("$ref"):
                issues.append(
                    Diagnostic.error(f"Operation '{name}' must have a channel reference", f"{path}/channel",
                                     "missing-field")
                )

    def _check_messages(self, messages: dict[str, Any], issues: list[Diagnostic]) -> None:
        for key, message in messages.items():
            if not isinstance(message, dict) or not message.get("name"):
                issues.append(
                    Diagnostic.error(f"Message '{key}' missing required 'name' field",
                                     f"{message_ref(key)}/name", "missing-field")
                )
            if isinstance(message, dict) and "payload" not in message:
                issues.append(
                    Diagnostic.warning(f"Message '{key}' has no payload", f"#/components/messages/{escape_pointer(key)}",
                                       "missing-payload")
                )


__all__ = ["StructuralValidator", "VALID_ACTIONS"]
