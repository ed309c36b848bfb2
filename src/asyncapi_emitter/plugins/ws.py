"""WebSocket bindings (AsyncAPI ws binding 0.1.0). Only channels carry a ws binding."""

from __future__ import annotations

from typing import Any, ClassVar

from asyncapi_emitter.plugins.base import ProtocolPlugin, check_choice


class WebSocketPlugin(ProtocolPlugin):
    name = "ws"
    aliases = ("websocket", "websockets", "wss")
    binding_version = "0.1.0"

    fields: ClassVar[dict[str, tuple[str, ...]]] = {
        "channel": ("method", "query", "headers"),
    }
    defaults: ClassVar[dict[str, dict[str, Any]]] = {
        "channel": {"method": "GET"},
    }

    def validation_errors(self, data: dict[str, Any]) -> list[str]:
        errors = super().validation_errors(data)
        if errors:
            return errors
        check_choice(data, "method", ("GET", "POST"), errors, case_insensitive=True)
        for key in ("headers", "query"):
            if key in data:
                schema = data[key]
                if not isinstance(schema, dict) or schema.get("type", "object") != "object":
                    errors.append(f"{key} must be an object schema")
        return errors

    def build(self, scope: str, data: dict[str, Any]) -> dict[str, Any]:
        binding = super().build(scope, data)
        binding["method"] = str(binding["method"]).upper()
        return binding
