"""Apache Pulsar bindings (AsyncAPI pulsar binding 0.1.0)."""

from __future__ import annotations

from typing import Any, ClassVar

from asyncapi_emitter.plugins.base import ProtocolPlugin, check_bool, check_choice, check_int


class PulsarPlugin(ProtocolPlugin):
    name = "pulsar"
    aliases = ("pulsar+ssl",)
    binding_version = "0.1.0"

    fields: ClassVar[dict[str, tuple[str, ...]]] = {
        "server": ("tenant",),
        "channel": ("namespace", "persistence", "compaction", "geo-replication", "retention", "ttl", "deduplication"),
    }
    defaults: ClassVar[dict[str, dict[str, Any]]] = {
        "server": {"tenant": "public"},
        "channel": {"persistence": "persistent"},
    }

    def validation_errors(self, data: dict[str, Any]) -> list[str]:
        errors = super().validation_errors(data)
        if errors:
            return errors
        for key in ("tenant", "namespace"):
            if key in data and (not isinstance(data[key], str) or not data[key].strip()):
                errors.append(f"{key} must be a non-empty string")
        check_choice(data, "persistence", ("persistent", "non-persistent"), errors)
        check_int(data, "compaction", errors, minimum=0)
        check_int(data, "ttl", errors, minimum=0)
        check_bool(data, "deduplication", errors)
        regions = data.get("geo-replication")
        if regions is not None and not (isinstance(regions, list) and all(isinstance(r, str) for r in regions)):
            errors.append("geo-replication must be a list of cluster names")
        retention = data.get("retention")
        if retention is not None:
            if not isinstance(retention, dict):
                errors.append("retention must be a mapping")
            else:
                check_int(retention, "time", errors, minimum=0)
                check_int(retention, "size", errors, minimum=0)
        return errors
