"""Kafka bindings (AsyncAPI kafka binding 0.5.0)."""

from __future__ import annotations

from typing import Any, ClassVar

from asyncapi_emitter.plugins.base import ProtocolPlugin, check_choice, check_int


class KafkaPlugin(ProtocolPlugin):
    name = "kafka"
    aliases = ("kafka-secure",)
    binding_version = "0.5.0"

    fields: ClassVar[dict[str, tuple[str, ...]]] = {
        "server": ("schemaRegistryUrl", "schemaRegistryVendor"),
        "channel": ("topic", "partitions", "replicas", "topicConfiguration"),
        "operation": ("groupId", "clientId"),
        "message": ("key", "schemaIdLocation", "schemaIdPayloadEncoding", "schemaLookupStrategy"),
    }

    def validation_errors(self, data: dict[str, Any]) -> list[str]:
        errors = super().validation_errors(data)
        if errors:
            return errors
        if "topic" in data and (not isinstance(data["topic"], str) or not data["topic"].strip()):
            errors.append("topic must be a non-empty string")
        check_int(data, "partitions", errors, minimum=1)
        check_int(data, "replicas", errors, minimum=1)
        check_choice(data, "schemaIdLocation", ("header", "payload"), errors)
        if "topicConfiguration" in data and not isinstance(data["topicConfiguration"], dict):
            errors.append("topicConfiguration must be a mapping")
        return errors

    def build(self, scope: str, data: dict[str, Any]) -> dict[str, Any]:
        binding = super().build(scope, data)
        if scope == "operation":
            # groupId / clientId are schema objects in the binding
            for key in ("groupId", "clientId"):
                if isinstance(binding.get(key), str):
                    binding[key] = {"type": "string", "enum": [binding[key]]}
        if scope == "message" and isinstance(binding.get("key"), str):
            binding["key"] = {"type": "string", "enum": [binding["key"]]}
        return binding
