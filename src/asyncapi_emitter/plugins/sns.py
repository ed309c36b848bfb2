"""Amazon SNS bindings (AsyncAPI sns binding 0.1.0).

``topic`` may be a name or an ARN. On channels it supplies the topic
``name``; on operations it becomes the topic identifier. A top-level
``filterPolicy`` or short-form ``deadLetterQueue`` applies to every
consumer that does not set its own.
"""

from __future__ import annotations

from typing import Any, ClassVar

from asyncapi_emitter.plugins.base import ProtocolPlugin, check_bool, check_choice, check_int

CONSUMER_PROTOCOLS = ("http", "https", "email", "email-json", "sms", "sqs", "application", "lambda", "firehose")


def topic_identifier(topic: str) -> dict[str, str]:
    return {"arn": topic} if topic.startswith("arn:") else {"name": topic}


class SnsPlugin(ProtocolPlugin):
    name = "sns"
    aliases = ("aws-sns",)
    binding_version = "0.1.0"

    fields: ClassVar[dict[str, tuple[str, ...]]] = {
        "channel": ("name", "ordering", "policy", "tags"),
        "operation": ("topic", "consumers", "deliveryPolicy"),
    }

    def validation_errors(self, data: dict[str, Any]) -> list[str]:
        errors = super().validation_errors(data)
        if errors:
            return errors
        topic = data.get("topic", data.get("name"))
        if not isinstance(topic, str) or not topic.strip():
            errors.append("topic must be a non-empty string")
        ordering = data.get("ordering")
        if ordering is not None:
            if not isinstance(ordering, dict):
                errors.append("ordering must be a mapping")
            else:
                check_choice(ordering, "type", ("standard", "FIFO"), errors)
                check_bool(ordering, "contentBasedDeduplication", errors)
        for key in ("filterPolicy", "policy", "deliveryPolicy"):
            if key in data and not isinstance(data[key], dict):
                errors.append(f"{key} must be a mapping")
        dead_letter = data.get("deadLetterQueue")
        if dead_letter is not None:
            if not isinstance(dead_letter, dict) or not isinstance(dead_letter.get("targetArn"), str):
                errors.append("deadLetterQueue must have a targetArn")
            else:
                check_int(dead_letter, "maxReceiveCount", errors, minimum=1)
        consumers = data.get("consumers")
        if consumers is not None:
            if not isinstance(consumers, list):
                errors.append("consumers must be a list")
            else:
                for i, consumer in enumerate(consumers):
                    if not isinstance(consumer, dict):
                        errors.append(f"consumers[{i}] must be a mapping")
                        continue
                    check_choice(consumer, "protocol", CONSUMER_PROTOCOLS, errors)
                    if not isinstance(consumer.get("endpoint"), dict):
                        errors.append(f"consumers[{i}].endpoint must be a mapping")
                    check_bool(consumer, "rawMessageDelivery", errors)
        return errors

    def build(self, scope: str, data: dict[str, Any]) -> dict[str, Any]:
        binding = super().build(scope, data)
        topic = data.get("topic")
        if scope == "channel":
            if "name" not in binding and isinstance(topic, str):
                binding["name"] = topic.rsplit(":", 1)[-1]
            if "ordering" not in binding and str(binding.get("name", "")).endswith(".fifo"):
                binding["ordering"] = {"type": "FIFO"}
        elif scope == "operation":
            if isinstance(topic, str):
                binding["topic"] = topic_identifier(topic)
            if "consumers" in binding:
                binding["consumers"] = [self._consumer(c, data) for c in binding["consumers"]]
        return binding

    @staticmethod
    def _consumer(consumer: dict[str, Any], data: dict[str, Any]) -> dict[str, Any]:
        consumer = dict(consumer)
        consumer.setdefault("rawMessageDelivery", False)
        if isinstance(data.get("filterPolicy"), dict):
            consumer.setdefault("filterPolicy", data["filterPolicy"])
        dead_letter = data.get("deadLetterQueue")
        if isinstance(dead_letter, dict) and "targetArn" in dead_letter:
            redrive: dict[str, Any] = {"deadLetterQueue": {"arn": dead_letter["targetArn"]}}
            if dead_letter.get("maxReceiveCount") is not None:
                redrive["maxReceiveCount"] = dead_letter["maxReceiveCount"]
            consumer.setdefault("redrivePolicy", redrive)
        return consumer
