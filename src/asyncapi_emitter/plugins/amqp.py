"""AMQP 0-9-1 bindings (AsyncAPI amqp binding 0.3.0)."""

from __future__ import annotations

from typing import Any, ClassVar

from asyncapi_emitter.plugins.base import ProtocolPlugin, check_bool, check_choice, check_int

EXCHANGE_TYPES = ("topic", "direct", "fanout", "default", "headers")


class AmqpPlugin(ProtocolPlugin):
    name = "amqp"
    aliases = ("amqps",)
    binding_version = "0.3.0"

    fields: ClassVar[dict[str, tuple[str, ...]]] = {
        "channel": ("is", "exchange", "queue"),
        "operation": ("expiration", "userId", "cc", "priority", "deliveryMode", "mandatory", "bcc", "timestamp", "ack"),
        "message": ("contentEncoding", "messageType"),
    }
    defaults: ClassVar[dict[str, dict[str, Any]]] = {
        "channel": {"is": "routingKey"},
    }

    def validation_errors(self, data: dict[str, Any]) -> list[str]:
        errors = super().validation_errors(data)
        if errors:
            return errors
        check_choice(data, "is", ("routingKey", "queue"), errors)
        check_int(data, "deliveryMode", errors, allowed=(1, 2))
        check_int(data, "priority", errors, minimum=0)
        check_int(data, "expiration", errors, minimum=0)
        for key in ("mandatory", "timestamp", "ack"):
            check_bool(data, key, errors)
        exchange = data.get("exchange")
        if exchange is not None:
            if not isinstance(exchange, dict):
                errors.append("exchange must be a mapping")
            else:
                check_choice(exchange, "type", EXCHANGE_TYPES, errors)
        if data.get("is") == "queue" and not isinstance(data.get("queue"), dict):
            errors.append("queue must be a mapping when is=queue")
        return errors
