"""
Protocol plugin contract.

A protocol plugin turns raw ``ProtocolBindingConfig.data`` into an AsyncAPI
binding object for one of four scopes (server, channel, operation,
message). Plugins are looked up by protocol name in a
:class:`~asyncapi_emitter.plugins.registry.PluginRegistry`.

Manifesto:
    Third parties add protocols without touching the core. The contract is
    small and every generator returns a ``Result``, so a broken plugin
    becomes a diagnostic instead of a crash.

Architecture:
    ::

        ProtocolPlugin (ABC)
        ├── name / aliases / binding_version
        ├── validate_config(data) -> bool          (sync, callable standalone)
        ├── validation_errors(data) -> list[str]
        ├── async generate_server_binding(data)    -> Result[dict]
        ├── async generate_channel_binding(data)   -> Result[dict]
        ├── async generate_operation_binding(data) -> Result[dict]
        └── async generate_message_binding(data)   -> Result[dict]

    The default generators copy the scope's known fields out of ``data``,
    apply the scope's defaults and stamp ``bindingVersion``. A scope with
    no known fields has no binding in that protocol.

Examples:
    >>> class NatsPlugin(ProtocolPlugin):
    ...     name = "nats"
    ...     binding_version = "0.1.0"
    ...     fields = {"operation": ("queue",)}
    >>> registry.register(NatsPlugin())

Tags:
    plugins, protocol-bindings, extensibility, asyncapi-emitter

Doc-Types:
    - API Reference
    - Plugin Guide
"""

from __future__ import annotations

from abc import ABC
from typing import Any, ClassVar

from asyncapi_emitter.core.errors import BindingValidationError
from asyncapi_emitter.core.result import Err, Ok, Result

SCOPES = ("server", "channel", "operation", "message")


class ProtocolPlugin(ABC):
    """Base class for protocol binding generators."""

    name: ClassVar[str]
    aliases: ClassVar[tuple[str, ...]] = ()
    binding_version: ClassVar[str] = "0.1.0"

    # scope -> field names copied from data
    fields: ClassVar[dict[str, tuple[str, ...]]] = {}
    # scope -> defaults applied when data omits a field
    defaults: ClassVar[dict[str, dict[str, Any]]] = {}

    # ── Validation ───────────────────────────────────────────────

    def validation_errors(self, data: dict[str, Any]) -> list[str]:
        """Problems with ``data``. Empty list means valid."""
        if not isinstance(data, dict):
            return [f"{self.name} binding data must be a mapping"]
        return []

    def validate_config(self, data: dict[str, Any]) -> bool:
        return not self.validation_errors(data)

    # ── Generation ───────────────────────────────────────────────

    def supports(self, scope: str) -> bool:
        return bool(self.fields.get(scope))

    def build(self, scope: str, data: dict[str, Any]) -> dict[str, Any]:
        """Binding object for ``scope``: defaults, then known fields from data."""
        binding: dict[str, Any] = dict(self.defaults.get(scope, {}))
        for key in self.fields.get(scope, ()):
            if key in data and data[key] is not None:
                binding[key] = data[key]
        binding["bindingVersion"] = data.get("bindingVersion", self.binding_version)
        return binding

    async def _generate(self, scope: str, data: dict[str, Any]) -> Result[dict[str, Any]]:
        if not self.supports(scope):
            return Err(
                BindingValidationError(f"Protocol '{self.name}' has no {scope} binding").with_context(
                    protocol=self.name, binding_scope=scope
                )
            )
        return Ok(self.build(scope, data))

    async def generate_server_binding(self, data: dict[str, Any]) -> Result[dict[str, Any]]:
        return await self._generate("server", data)

    async def generate_channel_binding(self, data: dict[str, Any]) -> Result[dict[str, Any]]:
        return await self._generate("channel", data)

    async def generate_operation_binding(self, data: dict[str, Any]) -> Result[dict[str, Any]]:
        return await self._generate("operation", data)

    async def generate_message_binding(self, data: dict[str, Any]) -> Result[dict[str, Any]]:
        return await self._generate("message", data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, binding_version={self.binding_version!r})"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_int(data: dict[str, Any], key: str, errors: list[str], *, minimum: int | None = None,
              maximum: int | None = None, allowed: tuple[int, ...] | None = None) -> None:
    """Append an error if ``data[key]`` is present and not an acceptable integer."""
    if key not in data or data[key] is None:
        return
    value = data[key]
    if not _is_int(value):
        errors.append(f"{key} must be an integer, got {value!r}")
    elif allowed is not None and value not in allowed:
        errors.append(f"{key} must be one of {', '.join(map(str, allowed))}, got {value}")
    elif minimum is not None and value < minimum:
        errors.append(f"{key} must be >= {minimum}, got {value}")
    elif maximum is not None and value > maximum:
        errors.append(f"{key} must be <= {maximum}, got {value}")


def check_bool(data: dict[str, Any], key: str, errors: list[str]) -> None:
    if key in data and data[key] is not None and not isinstance(data[key], bool):
        errors.append(f"{key} must be a boolean, got {data[key]!r}")


def check_choice(data: dict[str, Any], key: str, choices: tuple[str, ...], errors: list[str],
                 *, case_insensitive: bool = False) -> None:
    if key not in data or data[key] is None:
        return
    value = data[key]
    candidate = value.upper() if case_insensitive and isinstance(value, str) else value
    if candidate not in choices:
        errors.append(f"{key} must be one of {', '.join(choices)}, got {value!r}")


__all__ = ["SCOPES", "ProtocolPlugin", "check_int", "check_bool", "check_choice"]
