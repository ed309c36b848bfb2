"""Tests for asyncapi_emitter.plugins.registry module."""

from typing import Any, ClassVar

import pytest

from asyncapi_emitter.core.errors import (
    BindingValidationError,
    DuplicatePluginError,
    PluginError,
    PluginNotFoundError,
)
from asyncapi_emitter.core.result import Ok
from asyncapi_emitter.plugins.base import ProtocolPlugin
from asyncapi_emitter.plugins.registry import PluginRegistry, default_registry


class NatsPlugin(ProtocolPlugin):
    name = "nats"
    aliases = ("nats-tls",)
    fields: ClassVar[dict[str, tuple[str, ...]]] = {"operation": ("queue",)}


class ExplodingPlugin(ProtocolPlugin):
    name = "boom"
    fields: ClassVar[dict[str, tuple[str, ...]]] = {"channel": ("x",)}

    async def generate_channel_binding(self, data: dict[str, Any]):
        raise RuntimeError("kaboom")


class RawDictPlugin(ProtocolPlugin):
    name = "raw"
    fields: ClassVar[dict[str, tuple[str, ...]]] = {"channel": ("x",)}

    async def generate_channel_binding(self, data: dict[str, Any]):
        return {"x": data.get("x")}


class ListPlugin(ProtocolPlugin):
    name = "listy"
    fields: ClassVar[dict[str, tuple[str, ...]]] = {"channel": ("x",)}

    async def generate_channel_binding(self, data: dict[str, Any]):
        return Ok(["not", "a", "dict"])


class PickyPlugin(ProtocolPlugin):
    name = "picky"
    fields: ClassVar[dict[str, tuple[str, ...]]] = {"channel": ("x",)}

    def validation_errors(self, data: dict[str, Any]) -> list[str]:
        return ["x is required"] if "x" not in data else []


# =============================================================================
# REGISTRATION
# =============================================================================


class TestRegistration:
    """Test register, lookup and aliases."""

    def test_register_and_get(self):
        """Registered plugins are found by name."""
        registry = PluginRegistry()
        plugin = NatsPlugin()
        assert registry.register(plugin).unwrap() is plugin
        assert registry.get_plugin("nats") is plugin
        assert registry.has("NATS")

    def test_alias_lookup(self):
        """Aliases resolve to the plugin."""
        registry = PluginRegistry()
        plugin = NatsPlugin()
        registry.register(plugin)
        assert registry.get_plugin("nats-tls") is plugin
        assert registry.normalize(" NATS-TLS ") == "nats"

    def test_duplicate_rejected(self):
        """Registering a name twice returns DuplicatePluginError."""
        registry = PluginRegistry()
        registry.register(NatsPlugin())
        result = registry.register(NatsPlugin())
        assert result.is_err()
        assert isinstance(result.error, DuplicatePluginError)

    def test_nameless_plugin_rejected(self):
        """Plugins must declare a name."""

        class Nameless(ProtocolPlugin):
            name = ""

        result = PluginRegistry().register(Nameless())
        assert isinstance(result.error, PluginError)

    def test_unregister_removes_aliases(self):
        """Unregistering drops the plugin and its aliases."""
        registry = PluginRegistry()
        registry.register(NatsPlugin())
        assert registry.unregister("nats-tls") is True
        assert registry.get_plugin("nats") is None
        assert registry.get_plugin("nats-tls") is None
        assert registry.unregister("nats") is False

    def test_list_plugins_sorted(self):
        """list_plugins is sorted by name."""
        assert default_registry().list_plugins() == [
            "amqp", "googlepubsub", "http", "kafka", "mqtt", "pulsar", "sns", "sqs", "ws",
        ]

    def test_default_registry_aliases(self):
        """Built-in aliases resolve."""
        registry = default_registry()
        assert registry.get_plugin("websocket").name == "ws"
        assert registry.get_plugin("secure-mqtt").name == "mqtt"
        assert registry.get_plugin("kafka-secure").name == "kafka"
        assert registry.get_plugin("aws-sqs").name == "sqs"
        assert registry.get_plugin("AWS-SNS").name == "sns"
        assert registry.get_plugin("gcp-pubsub").name == "googlepubsub"

    def test_default_registries_are_independent(self):
        """Each call builds a fresh registry."""
        first = default_registry()
        first.clear()
        assert default_registry().has("kafka")


# =============================================================================
# BINDING GENERATION
# =============================================================================


class TestGenerateBinding:
    """Test generate_binding dispatch and error containment."""

    @pytest.mark.asyncio
    async def test_generates_binding(self):
        """A registered plugin produces its binding."""
        result = await default_registry().generate_binding("kafka", "channel", {"topic": "orders", "partitions": 3})
        assert result.unwrap() == {"topic": "orders", "partitions": 3, "bindingVersion": "0.5.0"}

    @pytest.mark.asyncio
    async def test_missing_plugin(self):
        """Unknown protocols give PluginNotFoundError."""
        result = await default_registry().generate_binding("foo", "channel", {})
        assert result.is_err()
        assert isinstance(result.error, PluginNotFoundError)
        assert result.error.protocol == "foo"

    @pytest.mark.asyncio
    async def test_unknown_scope(self):
        """Scopes outside the four known ones are rejected."""
        result = await default_registry().generate_binding("kafka", "topic", {})
        assert isinstance(result.error, BindingValidationError)

    @pytest.mark.asyncio
    async def test_invalid_data(self):
        """Validation failures list every problem."""
        result = await default_registry().generate_binding("kafka", "channel", {"partitions": 0, "replicas": "x"})
        assert isinstance(result.error, BindingValidationError)
        assert result.error.message.startswith("Invalid kafka channel binding:")
        assert "partitions must be >= 1" in result.error.message
        assert "replicas must be an integer" in result.error.message

    @pytest.mark.asyncio
    async def test_custom_validation(self):
        """Plugin-specific validation is honoured."""
        registry = PluginRegistry()
        registry.register(PickyPlugin())
        result = await registry.generate_binding("picky", "channel", {})
        assert "x is required" in result.error.message

    @pytest.mark.asyncio
    async def test_plugin_exception_contained(self):
        """A raising plugin becomes a PluginError."""
        registry = PluginRegistry()
        registry.register(ExplodingPlugin())
        result = await registry.generate_binding("boom", "channel", {})
        assert isinstance(result.error, PluginError)
        assert isinstance(result.error.cause, RuntimeError)

    @pytest.mark.asyncio
    async def test_raw_dict_wrapped(self):
        """A plain dict return is wrapped in Ok."""
        registry = PluginRegistry()
        registry.register(RawDictPlugin())
        result = await registry.generate_binding("raw", "channel", {"x": 1})
        assert result.unwrap() == {"x": 1}

    @pytest.mark.asyncio
    async def test_non_mapping_binding_rejected(self):
        """Bindings must be mappings."""
        registry = PluginRegistry()
        registry.register(ListPlugin())
        result = await registry.generate_binding("listy", "channel", {})
        assert isinstance(result.error, PluginError)

    @pytest.mark.asyncio
    async def test_unsupported_scope_for_protocol(self):
        """Scopes a plugin has no fields for give an error."""
        result = await default_registry().generate_binding("ws", "operation", {})
        assert isinstance(result.error, BindingValidationError)
        assert "no operation binding" in result.error.message
