"""
Operation Service.

For each discovered operation emits a channel, an operation and (when the
payload is not already a ``@message`` model) a message plus the schema
components the payload references.

Architecture:
    ::

        Operation
          │  @publish -> send, @subscribe -> receive
          │  both     -> error conflicting-operation-type, skipped
          │  neither  -> error missing-operation-type, skipped
          ▼
        @channel(address)  (absent: operation name lowercased)
          │
          ├── payload = return type, else a single model parameter,
          │             else the parameters as an inline object
          │
          ├── payload is @message model -> reference its message by name
          ├── payload is plain model    -> message <Model> with $ref payload
          └── anonymous payload         -> message <opName>Message, inline payload
          ▼
        Fragments: CHANNEL(address) OPERATION(name) [MESSAGE] [SCHEMA...]

Tags:
    operations, channels, services, asyncapi-emitter

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Any

from asyncapi_emitter.core.errors import OperationTypeError
from asyncapi_emitter.core.logging import get_logger
from asyncapi_emitter.discovery.walker import DiscoveryResult
from asyncapi_emitter.model.declarations import Model, Operation
from asyncapi_emitter.model.document import (
    Fragment,
    FragmentKind,
    channel_ref,
    escape_pointer,
    message_ref,
    operation_ref,
    schema_ref,
    security_ref,
)
from asyncapi_emitter.model.records import ChannelConfig, MessageConfig, OperationTypeConfig
from asyncapi_emitter.model.types import NullType, ObjectType, TypeShape
from asyncapi_emitter.services.base import TransformationService
from asyncapi_emitter.services.security import is_valid_security
from asyncapi_emitter.state.store import AnnotationKind

logger = get_logger(__name__)


def default_channel_address(operation: Operation) -> str:
    return operation.name.lower()


def payload_shape(operation: Operation) -> TypeShape | None:
    """The shape an operation's message carries, or None."""
    if operation.return_type is not None and not isinstance(operation.return_type, NullType):
        return operation.return_type
    if not operation.parameters:
        return None
    if len(operation.parameters) == 1 and isinstance(operation.parameters[0].type, Model):
        return operation.parameters[0].type
    return ObjectType(tuple(operation.parameters))


class OperationService(TransformationService):
    name = "operation"

    def items(self, discovery: DiscoveryResult) -> list[Operation]:
        return list(discovery.operations)

    def resolve_action(self, operation: Operation) -> str | None:
        """``send`` / ``receive``, or None after reporting why there is none."""
        path = operation_ref(operation.name)
        records: list[OperationTypeConfig] = self.store.get_all(operation, AnnotationKind.OPERATION_TYPE)
        kinds = {record.type for record in records}
        if len(kinds) > 1:
            self.report(
                OperationTypeError(
                    f"Operation '{operation.name}' is marked both @publish and @subscribe",
                    code="conflicting-operation-type",
                ).with_context(declaration=operation.name),
                path,
            )
            return None
        if not kinds:
            self.report(
                OperationTypeError(
                    f"Operation '{operation.name}' needs @publish or @subscribe"
                ).with_context(declaration=operation.name),
                path,
            )
            return None
        return records[-1].action

    async def transform(self, operation: Operation) -> list[Fragment]:
        action = self.resolve_action(operation)
        if action is None:
            return []

        origin = operation.name
        channel_config: ChannelConfig | None = self.store.get(operation, AnnotationKind.CHANNEL)
        if channel_config is None:
            address = default_channel_address(operation)
            logger.info("default_channel_address", operation=operation.name, address=address)
        else:
            address = channel_config.address

        channel: dict[str, Any] = {"address": address, "messages": {}}
        if channel_config is not None:
            if channel_config.description:
                channel["description"] = channel_config.description
            if channel_config.parameters:
                channel["parameters"] = dict(channel_config.parameters)

        op_path = operation_ref(operation.name)
        fragments: list[Fragment] = []
        message_name: str | None = None
        shape = payload_shape(operation)
        if shape is not None:
            message_name, message_fragments = self._message_for(operation, shape)
            fragments.extend(message_fragments)

        document_op: dict[str, Any] = {"action": action, "channel": {"$ref": channel_ref(address)}}
        if operation.doc:
            document_op["summary"] = operation.doc
        if message_name is not None:
            channel["messages"][message_name] = {"$ref": message_ref(message_name)}
            document_op["messages"] = [
                {"$ref": f"{channel_ref(address)}/messages/{escape_pointer(message_name)}"}
            ]

        security = [
            {"$ref": security_ref(cfg.name)}
            for cfg in self.store.get_all(operation, AnnotationKind.SECURITY)
            if is_valid_security(cfg)
        ]
        if security:
            document_op["security"] = security

        tags = self.tags_for(operation)
        if tags:
            document_op["tags"] = tags

        operation_bindings = await self.bindings_for(operation, "operation", op_path)
        if operation_bindings:
            document_op["bindings"] = operation_bindings

        channel_bindings = await self.bindings_for(operation, "channel", channel_ref(address))
        if channel_bindings:
            channel["bindings"] = channel_bindings

        message_binding_configs = self.binding_configs(operation, "message")
        if message_binding_configs:
            own_message = next(
                (f for f in fragments if f.kind is FragmentKind.MESSAGE and f.key == message_name), None
            )
            if own_message is None:
                self.diagnostics.warning(
                    f"Message bindings on operation '{operation.name}' ignored: annotate the message model instead",
                    f"{op_path}/bindings",
                    "ignored-message-binding",
                )
            else:
                message_bindings = await self.bindings_for(
                    operation, "message", message_ref(message_name), message_binding_configs
                )
                if message_bindings:
                    own_message.value["bindings"] = message_bindings

        fragments.append(Fragment(FragmentKind.CHANNEL, address, channel, origin))
        fragments.append(Fragment(FragmentKind.OPERATION, operation.name, document_op, origin))
        return fragments

    def _message_for(self, operation: Operation, shape: TypeShape) -> tuple[str, list[Fragment]]:
        """Message name for the payload plus any fragments this service must emit for it."""
        origin = operation.name
        converter = self.context.converter
        fragments = self.schema_fragments(shape, origin)

        if isinstance(shape, Model):
            config: MessageConfig | None = self.store.get(shape, AnnotationKind.MESSAGE)
            if config is not None:
                # emitted by the message service
                return config.name, fragments
            message_name = shape.name
            payload = {"$ref": schema_ref(shape.name)}
        else:
            message_name = f"{operation.name}Message"
            payload = converter.convert(shape).to_json_schema()

        message = {
            "name": message_name,
            "contentType": self.context.settings.default_content_type,
            "payload": payload,
        }
        fragments.append(Fragment(FragmentKind.MESSAGE, message_name, message, origin))
        return message_name, fragments


__all__ = ["OperationService", "default_channel_address", "payload_shape"]
