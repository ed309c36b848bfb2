"""HTTP bindings (AsyncAPI http binding 0.3.0)."""

from __future__ import annotations

from typing import Any, ClassVar

from asyncapi_emitter.plugins.base import ProtocolPlugin, check_choice, check_int

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS", "CONNECT", "TRACE")


class HttpPlugin(ProtocolPlugin):
    name = "http"
    aliases = ("https",)
    binding_version = "0.3.0"

    fields: ClassVar[dict[str, tuple[str, ...]]] = {
        "operation": ("method", "query"),
        "message": ("headers", "statusCode"),
    }
    defaults: ClassVar[dict[str, dict[str, Any]]] = {
        "operation": {"method": "POST"},
    }

    def validation_errors(self, data: dict[str, Any]) -> list[str]:
        errors = super().validation_errors(data)
        if errors:
            return errors
        check_choice(data, "method", HTTP_METHODS, errors, case_insensitive=True)
        check_int(data, "statusCode", errors, minimum=100, maximum=599)
        for key in ("headers", "query"):
            if key in data and not isinstance(data[key], dict):
                errors.append(f"{key} must be a schema object")
        return errors

    def build(self, scope: str, data: dict[str, Any]) -> dict[str, Any]:
        binding = super().build(scope, data)
        if scope == "operation":
            binding["method"] = str(binding["method"]).upper()
        return binding
