"""Protocol plugin registry.

Manifesto:
    Services ask for a binding by protocol name and scope; they never
    import a plugin. Unknown protocols produce an explicit ``Err`` rather
    than an exception, and a plugin that raises is contained to the one
    binding it was asked for.

    Registries are plain instances created per pipeline run.
    :func:`default_registry` returns one with the built-in plugins.

Tags:
    asyncapi-emitter, plugins, registry, protocol-lookup

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from asyncapi_emitter.core.errors import (
    BindingValidationError,
    DuplicatePluginError,
    PluginError,
    PluginNotFoundError,
)
from asyncapi_emitter.core.logging import get_logger
from asyncapi_emitter.core.result import Err, Ok, Result
from asyncapi_emitter.plugins.base import SCOPES, ProtocolPlugin

logger = get_logger(__name__)

# Protocol names the AsyncAPI document accepts on servers
SUPPORTED_PROTOCOLS = (
    "http", "https", "ws", "wss", "mqtt", "secure-mqtt", "kafka", "kafka-secure",
    "amqp", "amqps", "nats", "redis", "stomp", "jms", "sns", "sqs", "googlepubsub",
    "ibmmq", "solace", "pulsar", "anypointmq", "mercure",
)


class PluginRegistry:
    """Protocol name (and aliases) -> plugin."""

    def __init__(self) -> None:
        self._plugins: dict[str, ProtocolPlugin] = {}
        self._aliases: dict[str, str] = {}

    def normalize(self, protocol: str) -> str:
        """Lowercase and resolve aliases (``websocket`` -> ``ws``)."""
        key = protocol.strip().lower()
        return self._aliases.get(key, key)

    def register(self, plugin: ProtocolPlugin) -> Result[ProtocolPlugin]:
        name = getattr(plugin, "name", None)
        if not isinstance(name, str) or not name:
            return Err(PluginError(f"Plugin {plugin!r} has no name"))
        name = name.lower()
        if name in self._plugins or name in self._aliases:
            return Err(DuplicatePluginError(name))
        self._plugins[name] = plugin
        for alias in getattr(plugin, "aliases", ()):
            alias = alias.lower()
            if alias not in self._plugins:
                self._aliases.setdefault(alias, name)
        logger.debug(
            "protocol_plugin_registered",
            name=name,
            cls=type(plugin).__name__,
            aliases=list(getattr(plugin, "aliases", ())),
        )
        return Ok(plugin)

    def unregister(self, protocol: str) -> bool:
        name = self.normalize(protocol)
        plugin = self._plugins.pop(name, None)
        if plugin is None:
            return False
        self._aliases = {alias: target for alias, target in self._aliases.items() if target != name}
        return True

    def get_plugin(self, protocol: str) -> ProtocolPlugin | None:
        return self._plugins.get(self.normalize(protocol))

    def has(self, protocol: str) -> bool:
        return self.get_plugin(protocol) is not None

    def list_plugins(self) -> list[str]:
        """List all registered plugin names."""
        return sorted(self._plugins.keys())

    def clear(self) -> None:
        """Clear registry (for testing)."""
        self._plugins.clear()
        self._aliases.clear()

    async def generate_binding(self, protocol: str, scope: str, data: dict[str, Any]) -> Result[dict[str, Any]]:
        """Binding object for ``scope``, or an ``Err`` describing why there is none."""
        if scope not in SCOPES:
            return Err(BindingValidationError(f"Unknown binding scope '{scope}'").with_context(protocol=protocol))

        plugin = self.get_plugin(protocol)
        if plugin is None:
            logger.warning("protocol_plugin_missing", protocol=protocol, binding_scope=scope)
            return Err(PluginNotFoundError(protocol))

        name = plugin.name
        try:
            problems = plugin.validation_errors(data)
        except Exception as e:
            return Err(PluginError(f"Plugin '{name}' failed validating binding data", cause=e).with_context(protocol=name))
        if problems:
            return Err(
                BindingValidationError(f"Invalid {name} {scope} binding: {'; '.join(problems)}").with_context(
                    protocol=name, binding_scope=scope
                )
            )

        generator = getattr(plugin, f"generate_{scope}_binding")
        try:
            result = await generator(data)
        except Exception as e:
            logger.warning("protocol_plugin_failed", protocol=name, binding_scope=scope, error=str(e))
            return Err(PluginError(f"Plugin '{name}' failed generating {scope} binding: {e}", cause=e).with_context(
                protocol=name, binding_scope=scope
            ))

        if not isinstance(result, (Ok, Err)):
            result = Ok(result)
        if result.is_ok() and not isinstance(result.unwrap(), dict):
            return Err(PluginError(f"Plugin '{name}' returned a non-mapping {scope} binding").with_context(protocol=name))
        return result


def default_registry() -> PluginRegistry:
    """Registry with the built-in broker plugins and the sqs, sns, googlepubsub and pulsar cloud plugins."""
    from asyncapi_emitter.plugins.amqp import AmqpPlugin
    from asyncapi_emitter.plugins.googlepubsub import GooglePubSubPlugin
    from asyncapi_emitter.plugins.http import HttpPlugin
    from asyncapi_emitter.plugins.kafka import KafkaPlugin
    from asyncapi_emitter.plugins.mqtt import MqttPlugin
    from asyncapi_emitter.plugins.pulsar import PulsarPlugin
    from asyncapi_emitter.plugins.sns import SnsPlugin
    from asyncapi_emitter.plugins.sqs import SqsPlugin
    from asyncapi_emitter.plugins.ws import WebSocketPlugin

    registry = PluginRegistry()
    for plugin in (
        KafkaPlugin(), MqttPlugin(), HttpPlugin(), WebSocketPlugin(), AmqpPlugin(),
        SqsPlugin(), SnsPlugin(), GooglePubSubPlugin(), PulsarPlugin(),
    ):
        registry.register(plugin).unwrap()
    return registry


__all__ = ["SUPPORTED_PROTOCOLS", "PluginRegistry", "default_registry"]
