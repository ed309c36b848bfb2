"""
Message Service.

Turns each ``@message`` model into a message component. Properties marked
``@header`` move out of the payload into a separate ``headers`` schema;
``@correlationId`` becomes the message's correlation id when its location
is a valid runtime expression.

Tags:
    messages, headers, correlation-id, services, asyncapi-emitter

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import re
from typing import Any

from asyncapi_emitter.core.errors import CorrelationIdError
from asyncapi_emitter.core.logging import get_logger
from asyncapi_emitter.discovery.walker import DiscoveryResult
from asyncapi_emitter.model.declarations import Model, ModelProperty
from asyncapi_emitter.model.document import Fragment, FragmentKind, message_ref
from asyncapi_emitter.model.records import CorrelationIdConfig, HeaderConfig, MessageConfig
from asyncapi_emitter.services.base import TransformationService
from asyncapi_emitter.state.store import AnnotationKind

logger = get_logger(__name__)

# JSON pointer: "" or "/" followed by tokens where "~" only appears as "~0" / "~1"
_POINTER = r"(?:/(?:[^~/]|~[01])*)*"
RUNTIME_EXPRESSION = re.compile(rf"^\$message\.(?:header|payload)#{_POINTER}$")
JSON_POINTER = re.compile(rf"^#?{_POINTER}$")


def is_valid_correlation_location(location: str) -> bool:
    """``$message.header#/...``, ``$message.payload#/...``, ``#/...`` or ``/...``."""
    if location.startswith("$"):
        return bool(RUNTIME_EXPRESSION.match(location))
    return location not in ("", "#") and bool(JSON_POINTER.match(location))


def headers_schema(headers: list[tuple[ModelProperty, HeaderConfig]]) -> dict[str, Any]:
    properties: dict[str, Any] = {}
    required: list[str] = []
    for _prop, config in headers:
        schema: dict[str, Any] = {"type": config.type}
        if config.pattern:
            schema["pattern"] = config.pattern
        if config.description:
            schema["description"] = config.description
        properties[config.name] = schema
        if config.required:
            required.append(config.name)
    result: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        result["required"] = required
    return result


class MessageService(TransformationService):
    name = "message"

    def items(self, discovery: DiscoveryResult) -> list[Model]:
        return list(discovery.message_models)

    def header_properties(self, model: Model) -> list[tuple[ModelProperty, HeaderConfig]]:
        return [
            (prop, self.store.get(prop, AnnotationKind.HEADER))
            for prop in model.properties
            if self.store.has(prop, AnnotationKind.HEADER)
        ]

    def correlation_id(self, model: Model, path: str) -> dict[str, Any] | None:
        config: CorrelationIdConfig | None = self.store.get(model, AnnotationKind.CORRELATION_ID)
        if config is None:
            return None
        if not is_valid_correlation_location(config.location):
            self.report(
                CorrelationIdError(
                    f"Correlation id location '{config.location}' on '{model.name}' is not a valid "
                    "runtime expression or JSON pointer",
                    field="location",
                ).with_context(declaration=model.name),
                f"{path}/correlationId",
            )
            return None
        result = {"location": config.location}
        if config.description:
            result["description"] = config.description
        return result

    async def transform(self, model: Model) -> list[Fragment]:
        config: MessageConfig = self.store.get(model, AnnotationKind.MESSAGE)
        path = message_ref(config.name)
        converter = self.context.converter
        origin = model.name

        headers = self.header_properties(model)
        payload = converter.convert(model).without({prop.name for prop, _ in headers})

        message: dict[str, Any] = {"name": config.name}
        if config.title:
            message["title"] = config.title
        if config.summary:
            message["summary"] = config.summary
        if config.description:
            message["description"] = config.description
        message["contentType"] = config.content_type or self.context.settings.default_content_type
        if headers:
            message["headers"] = headers_schema(headers)
        message["payload"] = payload.to_json_schema()

        correlation = self.correlation_id(model, path)
        if correlation is not None:
            message["correlationId"] = correlation

        tags = self.tags_for(model)
        if tags:
            message["tags"] = tags

        bindings = await self.bindings_for(model, "message", path)
        if bindings:
            message["bindings"] = bindings
        for scope in ("operation", "channel", "server"):
            if self.binding_configs(model, scope):
                self.diagnostics.warning(
                    f"{scope} binding on message model '{model.name}' ignored",
                    f"{path}/bindings",
                    "ignored-binding-scope",
                )

        fragments = self.schema_fragments(model, origin)
        fragments.append(Fragment(FragmentKind.MESSAGE, config.name, message, origin))
        logger.debug("message_transformed", message=config.name, headers=len(headers))
        return fragments


__all__ = [
    "MessageService",
    "headers_schema",
    "is_valid_correlation_location",
]
