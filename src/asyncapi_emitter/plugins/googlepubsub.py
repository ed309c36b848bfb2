"""Google Cloud Pub/Sub bindings (AsyncAPI googlepubsub binding 0.2.0).

``topic``, ``projectId`` and ``subscription`` identify the resource and are
validated but not rendered; the channel address already names the topic.
"""

from __future__ import annotations

import re
from typing import Any, ClassVar

from asyncapi_emitter.plugins.base import ProtocolPlugin, check_choice

# protobuf Duration in JSON form: "86400s", "3.5s"
DURATION = re.compile(r"^\d+(\.\d{1,9})?s$")


def _check_string_map(data: dict[str, Any], key: str, errors: list[str]) -> None:
    if key not in data:
        return
    value = data[key]
    if not isinstance(value, dict) or not all(isinstance(v, str) for v in value.values()):
        errors.append(f"{key} must map names to strings")


class GooglePubSubPlugin(ProtocolPlugin):
    name = "googlepubsub"
    aliases = ("gcp-pubsub", "pubsub")
    binding_version = "0.2.0"

    fields: ClassVar[dict[str, tuple[str, ...]]] = {
        "channel": ("labels", "messageRetentionDuration", "messageStoragePolicy", "schemaSettings"),
        "message": ("attributes", "orderingKey", "schema"),
    }

    def validation_errors(self, data: dict[str, Any]) -> list[str]:
        errors = super().validation_errors(data)
        if errors:
            return errors
        for key in ("topic", "projectId", "subscription", "orderingKey"):
            if key in data and (not isinstance(data[key], str) or not data[key].strip()):
                errors.append(f"{key} must be a non-empty string")
        _check_string_map(data, "labels", errors)
        _check_string_map(data, "attributes", errors)
        retention = data.get("messageRetentionDuration")
        if retention is not None and (not isinstance(retention, str) or not DURATION.match(retention)):
            errors.append(f"messageRetentionDuration must be a duration like '86400s', got {retention!r}")
        policy = data.get("messageStoragePolicy")
        if policy is not None and not (
            isinstance(policy, dict) and isinstance(policy.get("allowedPersistenceRegions", []), list)
        ):
            errors.append("messageStoragePolicy.allowedPersistenceRegions must be a list")
        settings = data.get("schemaSettings")
        if settings is not None:
            if not isinstance(settings, dict) or not isinstance(settings.get("name"), str):
                errors.append("schemaSettings must have a name")
            else:
                check_choice(settings, "encoding", ("JSON", "BINARY"), errors, case_insensitive=True)
        return errors

    def build(self, scope: str, data: dict[str, Any]) -> dict[str, Any]:
        binding = super().build(scope, data)
        settings = binding.get("schemaSettings")
        if scope == "channel" and isinstance(settings, dict) and "encoding" in settings:
            binding["schemaSettings"] = {**settings, "encoding": str(settings["encoding"]).upper()}
        return binding
