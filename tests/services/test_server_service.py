"""Tests for asyncapi_emitter.services.server module."""

import pytest

from asyncapi_emitter.core.diagnostics import DiagnosticCollector
from asyncapi_emitter.core.settings import EmitterSettings
from asyncapi_emitter.model.declarations import Namespace
from asyncapi_emitter.services.base import ServiceContext
from asyncapi_emitter.services.server import ServerService, split_server_url
from asyncapi_emitter.state import annotations


@pytest.fixture
def namespace():
    return Namespace("Orders")


class TestSplitServerUrl:
    """Test split_server_url."""

    @pytest.mark.parametrize(
        "url,expected",
        [
            ("kafka://broker:9092", ("broker:9092", None)),
            ("mqtt://broker.example.com:1883/", ("broker.example.com:1883", None)),
            ("https://api.example.com/v1/events", ("api.example.com", "/v1/events")),
            ("broker:9092", ("broker:9092", None)),
            ("kafka:///path-only", ("", "/path-only")),
            ("kafka://[broker:9092", ("", None)),
        ],
    )
    def test_split(self, url, expected):
        """Host and pathname are split out of the URL."""
        assert split_server_url(url) == expected


class TestServerTransform:
    """Test ServerService.transform."""

    @pytest.mark.asyncio
    async def test_server_fragment(self, context, store, namespace, index):
        """Each @server becomes a server entry."""
        annotations.server(store, namespace, "production", "kafka://broker:9092", "Kafka", description="Prod")

        fragments = index(await ServerService(context).transform(namespace))

        assert fragments == {
            ("server", "production"): {"host": "broker:9092", "protocol": "kafka", "description": "Prod"}
        }

    @pytest.mark.asyncio
    async def test_pathname_and_protocol_version(self, context, store, namespace, index):
        """Pathname and protocolVersion are emitted when present."""
        annotations.server(store, namespace, "api", "https://api.example.com/v1", "https", protocol_version="2.0")

        server = index(await ServerService(context).transform(namespace))[("server", "api")]

        assert server["pathname"] == "/v1"
        assert server["protocolVersion"] == "2.0"

    @pytest.mark.asyncio
    async def test_missing_host_is_error(self, context, store, namespace, diagnostic_codes):
        """A URL without a host is reported and the server omitted."""
        annotations.server(store, namespace, "broken", "kafka:///nowhere", "kafka")

        assert await ServerService(context).transform(namespace) == []
        assert diagnostic_codes(context) == ["invalid-server-url"]
        assert context.diagnostics.items[0].path == "#/servers/broken"

    @pytest.mark.asyncio
    async def test_unbalanced_bracket_host_is_error(self, context, store, namespace, diagnostic_codes):
        """An unparseable host is reported like a missing one."""
        annotations.server(store, namespace, "prod", "kafka://[broker:9092", "kafka")
        annotations.server(store, namespace, "dr", "kafka://dr:9092", "kafka")

        fragments = await ServerService(context).transform(namespace)

        assert [f.key for f in fragments] == ["dr"]
        assert diagnostic_codes(context) == ["invalid-server-url"]
        assert context.diagnostics.items[0].path == "#/servers/prod"

    @pytest.mark.asyncio
    async def test_protocol_defaults_from_settings(self, store, registry, namespace, index):
        """A server without a protocol uses the configured default."""
        settings = EmitterSettings(default_server_protocol="MQTT")
        context = ServiceContext(store=store, registry=registry, diagnostics=DiagnosticCollector(), settings=settings)
        annotations.server(store, namespace, "broker", "broker:1883")
        annotations.protocol(store, namespace, "mqtt", "server", {"clientId": "orders"})

        server = index(await ServerService(context).transform(namespace))[("server", "broker")]

        assert server["protocol"] == "mqtt"
        assert server["bindings"]["mqtt"]["clientId"] == "orders"
        assert context.diagnostics.items == []

    @pytest.mark.asyncio
    async def test_unsupported_protocol_warns(self, context, store, namespace, index, diagnostic_codes):
        """Unknown protocols still emit the server, with a warning."""
        annotations.server(store, namespace, "legacy", "carrier://pigeon:1", "carrier")

        fragments = index(await ServerService(context).transform(namespace))

        assert ("server", "legacy") in fragments
        assert diagnostic_codes(context) == ["unsupported-protocol"]

    @pytest.mark.asyncio
    async def test_namespace_security_on_every_server(self, context, store, namespace, index):
        """Valid namespace schemes are required by every server."""
        annotations.server(store, namespace, "a", "kafka://a:9092", "kafka")
        annotations.server(store, namespace, "b", "kafka://b:9092", "kafka")
        annotations.security(store, namespace, "kafkaAuth", {"type": "sasl", "mechanism": "PLAIN"})
        annotations.security(store, namespace, "bad", {"type": "sasl", "mechanism": "NOPE"})

        fragments = index(await ServerService(context).transform(namespace))

        expected = [{"$ref": "#/components/securitySchemes/kafkaAuth"}]
        assert fragments[("server", "a")]["security"] == expected
        assert fragments[("server", "b")]["security"] == expected

    @pytest.mark.asyncio
    async def test_server_bindings_match_protocol(self, context, store, namespace, index):
        """Server bindings attach only to servers of the same protocol."""
        annotations.server(store, namespace, "broker", "mqtt://broker:1883", "mqtt")
        annotations.server(store, namespace, "stream", "kafka://stream:9092", "kafka")
        annotations.protocol(store, namespace, "secure-mqtt", "server", {"clientId": "orders"})

        fragments = index(await ServerService(context).transform(namespace))

        assert fragments[("server", "broker")]["bindings"] == {
            "mqtt": {"cleanSession": True, "keepAlive": 60, "clientId": "orders", "bindingVersion": "0.3.0"}
        }
        assert "bindings" not in fragments[("server", "stream")]

    @pytest.mark.asyncio
    async def test_unmatched_server_binding_warns(self, context, store, namespace, diagnostic_codes):
        """A server binding with no server of its protocol warns."""
        annotations.server(store, namespace, "stream", "kafka://stream:9092", "kafka")
        annotations.protocol(store, namespace, "amqp", "server", {})

        await ServerService(context).transform(namespace)

        assert diagnostic_codes(context) == ["unmatched-server-binding"]

    @pytest.mark.asyncio
    async def test_bindings_without_server_warn(self, context, store, namespace, diagnostic_codes):
        """Server bindings on a namespace without servers are ignored."""
        annotations.protocol(store, namespace, "kafka", "server", {})

        assert await ServerService(context).transform(namespace) == []
        assert diagnostic_codes(context) == ["ignored-binding-scope"]

    @pytest.mark.asyncio
    async def test_namespace_tags_go_to_info(self, context, store, namespace, index):
        """Namespace tags produce an info tags fragment."""
        annotations.tags(store, namespace, ["orders", "billing"])

        fragments = index(await ServerService(context).transform(namespace))

        assert fragments == {("infoTags", "info"): [{"name": "billing"}, {"name": "orders"}]}
