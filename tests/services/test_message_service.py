"""Tests for asyncapi_emitter.services.message module."""

import pytest

from asyncapi_emitter.discovery.walker import DiscoveryResult
from asyncapi_emitter.model.declarations import Model, ModelProperty
from asyncapi_emitter.model.types import INT32, STRING, nullable
from asyncapi_emitter.services.message import MessageService, headers_schema, is_valid_correlation_location
from asyncapi_emitter.state import annotations


@pytest.fixture
def event_model():
    """model OrderEvent { traceId: string; retry?: int32; orderId: string; note: string | null }"""
    return Model(
        "OrderEvent",
        [
            ModelProperty("traceId", STRING),
            ModelProperty("retry", INT32, optional=True),
            ModelProperty("orderId", STRING),
            ModelProperty("note", nullable(STRING)),
        ],
        doc="Order lifecycle event",
    )


class TestCorrelationLocation:
    """Test is_valid_correlation_location."""

    @pytest.mark.parametrize(
        "location",
        [
            "$message.header#/correlationId",
            "$message.payload#/meta/id",
            "$message.payload#",
            "#/id",
            "/id",
            "#/a~1b/c~0d",
        ],
    )
    def test_valid(self, location):
        """Runtime expressions and JSON pointers are accepted."""
        assert is_valid_correlation_location(location)

    @pytest.mark.parametrize(
        "location",
        ["", "#", "$message.body#/id", "$message.header/id", "correlationId", "#/bad~2escape"],
    )
    def test_invalid(self, location):
        """Other locations are rejected."""
        assert not is_valid_correlation_location(location)


class TestHeadersSchema:
    """Test headers_schema."""

    def test_required_and_pattern(self, store):
        """Required headers are listed; patterns and descriptions kept."""
        trace = ModelProperty("traceId", STRING)
        retry = ModelProperty("retry", INT32, optional=True)
        headers = [
            (trace, annotations.header(store, trace, "X-Trace-Id", pattern="^[a-f0-9]+$")),
            (retry, annotations.header(store, retry, description="Retry count")),
        ]
        assert headers_schema(headers) == {
            "type": "object",
            "properties": {
                "X-Trace-Id": {"type": "string", "pattern": "^[a-f0-9]+$"},
                "retry": {"type": "integer", "description": "Retry count"},
            },
            "required": ["X-Trace-Id"],
        }


class TestMessageTransform:
    """Test MessageService.transform."""

    @pytest.mark.asyncio
    async def test_basic_message(self, context, store, order_model, index):
        """A @message model becomes a message with its payload inline."""
        annotations.message(store, order_model, title="Order", summary="Order placed")

        fragments = index(await MessageService(context).transform(order_model))

        assert fragments[("message", "Order")] == {
            "name": "Order",
            "title": "Order",
            "summary": "Order placed",
            "contentType": "application/json",
            "payload": {
                "type": "object",
                "properties": {"id": {"type": "string"}, "total": {"type": "number", "format": "double"}},
                "required": ["id", "total"],
            },
        }
        assert ("schema", "Order") in fragments

    @pytest.mark.asyncio
    async def test_headers_removed_from_payload(self, context, store, event_model, index):
        """Header properties move out of the payload."""
        annotations.message(store, event_model)
        annotations.header(store, event_model.property("traceId"), "X-Trace-Id")
        annotations.header(store, event_model.property("retry"))

        message = index(await MessageService(context).transform(event_model))[("message", "OrderEvent")]

        assert list(message["payload"]["properties"]) == ["orderId", "note"]
        assert message["payload"]["required"] == ["orderId", "note"]
        assert message["headers"]["required"] == ["X-Trace-Id"]
        assert set(message["headers"]["properties"]) == {"X-Trace-Id", "retry"}
        assert message["description"] == "Order lifecycle event"

    @pytest.mark.asyncio
    async def test_headers_removed_from_component_schema(self, context, store, event_model, index):
        """The model's component schema matches the header-free payload."""
        annotations.message(store, event_model)
        annotations.header(store, event_model.property("traceId"), "X-Trace-Id")

        fragments = index(await MessageService(context).transform(event_model))

        schema = fragments[("schema", "OrderEvent")]
        assert "traceId" not in schema["properties"]
        assert "traceId" not in schema.get("required", [])
        assert schema["properties"] == fragments[("message", "OrderEvent")]["payload"]["properties"]

    @pytest.mark.asyncio
    async def test_content_type_override(self, context, store, order_model, index):
        """An explicit content type wins over the default."""
        annotations.message(store, order_model, content_type="application/avro")
        message = index(await MessageService(context).transform(order_model))[("message", "Order")]
        assert message["contentType"] == "application/avro"

    @pytest.mark.asyncio
    async def test_valid_correlation_id(self, context, store, order_model, index):
        """A valid location becomes the correlation id."""
        annotations.message(store, order_model)
        annotations.correlation_id(store, order_model, "$message.header#/correlationId", description="Request id")
        message = index(await MessageService(context).transform(order_model))[("message", "Order")]
        assert message["correlationId"] == {"location": "$message.header#/correlationId", "description": "Request id"}

    @pytest.mark.asyncio
    async def test_invalid_correlation_id(self, context, store, order_model, index, diagnostic_codes):
        """An invalid location is reported and omitted."""
        annotations.message(store, order_model)
        annotations.correlation_id(store, order_model, "$message.body#/id")

        message = index(await MessageService(context).transform(order_model))[("message", "Order")]

        assert "correlationId" not in message
        assert diagnostic_codes(context) == ["invalid-correlation-id"]
        assert context.diagnostics.items[0].path == "#/components/messages/Order/correlationId"

    @pytest.mark.asyncio
    async def test_tags_and_message_bindings(self, context, store, order_model, index):
        """Tags and message-scope bindings are attached."""
        annotations.message(store, order_model)
        annotations.tags(store, order_model, ["orders"])
        annotations.protocol(store, order_model, "http", "message", {"statusCode": 202})

        message = index(await MessageService(context).transform(order_model))[("message", "Order")]

        assert message["tags"] == [{"name": "orders"}]
        assert message["bindings"] == {"http": {"statusCode": 202, "bindingVersion": "0.3.0"}}

    @pytest.mark.asyncio
    async def test_other_scopes_ignored(self, context, store, order_model, diagnostic_codes):
        """Non-message bindings on a message model warn."""
        annotations.message(store, order_model)
        annotations.protocol(store, order_model, "kafka", "channel", {"topic": "orders"})

        await MessageService(context).transform(order_model)

        assert diagnostic_codes(context) == ["ignored-binding-scope"]

    @pytest.mark.asyncio
    async def test_run_uses_message_models_only(self, context, store, order_model):
        """run only transforms discovered message models."""
        annotations.message(store, order_model, "OrderPlaced")
        plain = Model("Plain", [ModelProperty("x", STRING)])

        fragments = await MessageService(context).run(
            DiscoveryResult(models=[order_model, plain], message_models=[order_model])
        )

        assert [f.key for f in fragments if f.kind.value == "message"] == ["OrderPlaced"]
