"""MQTT bindings (AsyncAPI mqtt binding 0.2.0 / server 0.3.0 defaults)."""

from __future__ import annotations

from typing import Any, ClassVar

from asyncapi_emitter.plugins.base import ProtocolPlugin, check_bool, check_int


class MqttPlugin(ProtocolPlugin):
    name = "mqtt"
    aliases = ("mqtts", "secure-mqtt")
    binding_version = "0.2.0"

    fields: ClassVar[dict[str, tuple[str, ...]]] = {
        "server": ("clientId", "cleanSession", "lastWill", "keepAlive", "sessionExpiryInterval", "maximumPacketSize"),
        "operation": ("qos", "retain", "messageExpiryInterval"),
        "message": ("payloadFormatIndicator", "correlationData", "contentType", "responseTopic"),
    }
    defaults: ClassVar[dict[str, dict[str, Any]]] = {
        "server": {"cleanSession": True, "keepAlive": 60},
        "operation": {"qos": 0, "retain": False},
    }

    def validation_errors(self, data: dict[str, Any]) -> list[str]:
        errors = super().validation_errors(data)
        if errors:
            return errors
        check_int(data, "qos", errors, allowed=(0, 1, 2))
        check_bool(data, "retain", errors)
        check_bool(data, "cleanSession", errors)
        check_int(data, "keepAlive", errors, minimum=1)
        check_int(data, "payloadFormatIndicator", errors, allowed=(0, 1))
        will = data.get("lastWill")
        if will is not None:
            if not isinstance(will, dict) or not will.get("topic"):
                errors.append("lastWill must be a mapping with a topic")
            else:
                check_int(will, "qos", errors, allowed=(0, 1, 2))
        return errors

    def build(self, scope: str, data: dict[str, Any]) -> dict[str, Any]:
        binding = super().build(scope, data)
        if scope == "server" and "bindingVersion" not in data:
            binding["bindingVersion"] = "0.3.0"
        return binding
