"""Amazon SQS bindings (AsyncAPI sqs binding 0.2.0).

Besides AsyncAPI queue objects the plugin accepts the short form used by
service annotations::

    {"queue": "orders.fifo", "visibilityTimeoutSeconds": 30,
     "deadLetterQueue": {"targetArn": "arn:aws:sqs:...:orders-dlq", "maxReceiveCount": 5}}

A queue given as a name, URL or ARN becomes ``{"name": ..., "fifoQueue": ...}``.
"""

from __future__ import annotations

from typing import Any, ClassVar

from asyncapi_emitter.plugins.base import ProtocolPlugin, check_choice, check_int

MAX_VISIBILITY_TIMEOUT = 43200
DEFAULT_MAX_RECEIVE_COUNT = 10


def queue_name(reference: str) -> str:
    """``https://sqs.../123/orders`` or ``arn:aws:sqs:...:orders`` -> ``orders``."""
    return reference.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]


def queue_object(value: str | dict[str, Any]) -> dict[str, Any]:
    queue = {"name": queue_name(value)} if isinstance(value, str) else dict(value)
    queue.setdefault("fifoQueue", str(queue.get("name", "")).endswith(".fifo"))
    return queue


def _check_queue(value: Any, label: str, errors: list[str]) -> None:
    if isinstance(value, str):
        if not value.strip():
            errors.append(f"{label} must be a non-empty queue name")
        return
    if not isinstance(value, dict):
        errors.append(f"{label} must be a queue name or queue object")
        return
    name = value.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append(f"{label}.name must be a non-empty string")
    check_choice(value, "deduplicationScope", ("queue", "messageGroup"), errors)
    check_choice(value, "fifoThroughputLimit", ("perQueue", "perMessageGroupId"), errors)
    check_int(value, "visibilityTimeout", errors, minimum=0, maximum=MAX_VISIBILITY_TIMEOUT)
    check_int(value, "deliveryDelay", errors, minimum=0, maximum=900)
    check_int(value, "receiveMessageWaitTime", errors, minimum=0, maximum=20)
    check_int(value, "messageRetentionPeriod", errors, minimum=60, maximum=1209600)


def _is_short_dead_letter(value: Any) -> bool:
    return isinstance(value, dict) and "targetArn" in value


class SqsPlugin(ProtocolPlugin):
    name = "sqs"
    aliases = ("aws-sqs",)
    binding_version = "0.2.0"

    fields: ClassVar[dict[str, tuple[str, ...]]] = {
        "channel": ("queue", "deadLetterQueue"),
        "operation": ("queues",),
    }

    def validation_errors(self, data: dict[str, Any]) -> list[str]:
        errors = super().validation_errors(data)
        if errors:
            return errors
        if "queue" not in data and "queues" not in data:
            errors.append("queue is required")
        if "queue" in data:
            _check_queue(data["queue"], "queue", errors)
        if "queues" in data:
            queues = data["queues"]
            if not isinstance(queues, list) or not queues:
                errors.append("queues must be a non-empty list")
            else:
                for i, queue in enumerate(queues):
                    _check_queue(queue, f"queues[{i}]", errors)
        check_int(data, "visibilityTimeoutSeconds", errors, minimum=0, maximum=MAX_VISIBILITY_TIMEOUT)
        dead_letter = data.get("deadLetterQueue")
        if dead_letter is not None:
            if _is_short_dead_letter(dead_letter):
                arn = dead_letter["targetArn"]
                if not isinstance(arn, str) or not arn.startswith("arn:"):
                    errors.append("deadLetterQueue.targetArn must be an ARN")
                check_int(dead_letter, "maxReceiveCount", errors, minimum=1)
            else:
                _check_queue(dead_letter, "deadLetterQueue", errors)
        return errors

    def build(self, scope: str, data: dict[str, Any]) -> dict[str, Any]:
        binding = super().build(scope, data)
        if scope == "channel":
            if "queue" in binding:
                queue = queue_object(binding["queue"])
                if data.get("visibilityTimeoutSeconds") is not None:
                    queue.setdefault("visibilityTimeout", data["visibilityTimeoutSeconds"])
                dead_letter = binding.get("deadLetterQueue")
                if _is_short_dead_letter(dead_letter):
                    queue.setdefault(
                        "redrivePolicy",
                        {
                            "deadLetterQueue": {"arn": dead_letter["targetArn"]},
                            "maxReceiveCount": dead_letter.get("maxReceiveCount", DEFAULT_MAX_RECEIVE_COUNT),
                        },
                    )
                    del binding["deadLetterQueue"]
                binding["queue"] = queue
            if "deadLetterQueue" in binding:
                binding["deadLetterQueue"] = queue_object(binding["deadLetterQueue"])
        elif scope == "operation":
            queues = binding.get("queues") or ([data["queue"]] if data.get("queue") is not None else [])
            binding["queues"] = [queue_object(q) for q in queues]
        return binding
