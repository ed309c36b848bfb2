"""
Transformation service base.

Every service turns one kind of discovered declaration into document
fragments. Services never write to the Document; they return fragments
and record diagnostics. Per-declaration work runs concurrently, bounded by
``EmitterSettings.max_concurrency``.

Architecture:
    ::

        TransformationService.run(discovery)
              │
              ├── items(discovery)            which declarations this service owns
              ├── asyncio.gather(transform(item) for item)   (Semaphore bound)
              └── flatten -> list[Fragment]

        bindings_for(declaration, scope)  ─► PluginRegistry.generate_binding
              Err(PluginNotFoundError) -> warning, binding omitted
              Err(other)               -> error,   binding omitted

Tags:
    services, transformation, concurrency, asyncapi-emitter

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterable

from asyncapi_emitter.core.diagnostics import DiagnosticCollector, Severity
from asyncapi_emitter.core.errors import EmitterError, PluginNotFoundError
from asyncapi_emitter.core.logging import get_logger
from asyncapi_emitter.core.settings import EmitterSettings
from asyncapi_emitter.discovery.walker import DiscoveryResult
from asyncapi_emitter.model.declarations import Model
from asyncapi_emitter.model.document import Fragment, FragmentKind
from asyncapi_emitter.model.records import ProtocolBindingConfig, TagsConfig
from asyncapi_emitter.plugins.registry import PluginRegistry
from asyncapi_emitter.schema.converter import SchemaConverter
from asyncapi_emitter.state.store import AnnotationKind, AnnotationStore

logger = get_logger(__name__)


@dataclass
class ServiceContext:
    """Everything a service reads. The store is read-only during emission."""

    store: AnnotationStore
    registry: PluginRegistry
    diagnostics: DiagnosticCollector
    settings: EmitterSettings
    converter: SchemaConverter = field(default_factory=SchemaConverter)


class TransformationService(ABC):
    name: ClassVar[str] = "service"

    def __init__(self, context: ServiceContext):
        self.context = context

    @property
    def store(self) -> AnnotationStore:
        return self.context.store

    @property
    def diagnostics(self) -> DiagnosticCollector:
        return self.context.diagnostics

    @abstractmethod
    def items(self, discovery: DiscoveryResult) -> list[Any]:
        """Declarations (or declaration/record pairs) this service transforms."""

    @abstractmethod
    async def transform(self, item: Any) -> list[Fragment]:
        """Fragments for a single item."""

    async def run(self, discovery: DiscoveryResult) -> list[Fragment]:
        items = self.items(discovery)
        limit = self.context.settings.max_concurrency
        semaphore = asyncio.Semaphore(limit) if limit else None

        async def contained(item: Any) -> list[Fragment]:
            try:
                return await self.transform(item)
            except Exception as e:
                label = getattr(item, "name", None) or type(item).__name__
                logger.warning("transform_failed", service=self.name, item=label, error=str(e))
                self.report(
                    EmitterError(
                        f"{self.name} service failed on '{label}': {e}", code="transform-failed", cause=e
                    ).with_context(declaration=getattr(item, "name", None)),
                    "#",
                )
                return []

        async def guarded(item: Any) -> list[Fragment]:
            if semaphore is None:
                return await contained(item)
            async with semaphore:
                return await contained(item)

        results = await asyncio.gather(*(guarded(item) for item in items))
        fragments = [fragment for batch in results for fragment in batch]
        logger.debug("service_completed", service=self.name, items=len(items), fragments=len(fragments))
        return fragments

    # ── Shared helpers ───────────────────────────────────────────

    def report(self, error: EmitterError, path: str, severity: Severity = Severity.ERROR) -> None:
        self.diagnostics.add_error(error, severity, path)

    def tags_for(self, declaration: Any) -> list[dict[str, str]]:
        """Accumulated tags of a declaration as sorted AsyncAPI tag objects."""
        names: set[str] = set()
        records: list[TagsConfig] = self.store.get_all(declaration, AnnotationKind.TAGS)
        for record in records:
            names.update(record.tags)
        return [{"name": n} for n in sorted(names)]

    def header_names(self, model: Model) -> set[str]:
        """Properties of ``model`` marked ``@header``."""
        return {prop.name for prop in model.properties if self.store.has(prop, AnnotationKind.HEADER)}

    def schema_fragments(self, shape: Any, origin: str) -> list[Fragment]:
        """Component schemas reachable from ``shape``, header properties left out."""
        schemas = self.context.converter.component_schemas(shape, omit=self.header_names)
        return [
            Fragment(FragmentKind.SCHEMA, name, schema.to_json_schema(), origin)
            for name, schema in schemas.items()
        ]

    def binding_configs(self, declaration: Any, scope: str) -> list[ProtocolBindingConfig]:
        return [
            cfg
            for cfg in self.store.get_all(declaration, AnnotationKind.PROTOCOL_BINDING)
            if cfg.scope == scope
        ]

    async def bindings_for(
        self,
        declaration: Any,
        scope: str,
        path: str,
        configs: Iterable[ProtocolBindingConfig] | None = None,
    ) -> dict[str, Any]:
        """``{protocol: binding}`` for the declaration's bindings of ``scope``."""
        registry = self.context.registry
        bindings: dict[str, Any] = {}
        for cfg in configs if configs is not None else self.binding_configs(declaration, scope):
            result = await registry.generate_binding(cfg.protocol, scope, cfg.data)
            if result.is_ok():
                plugin = registry.get_plugin(cfg.protocol)
                bindings[plugin.name if plugin else cfg.protocol] = result.unwrap()
                continue
            error = result.error
            if isinstance(error, EmitterError):
                error.with_context(declaration=getattr(declaration, "name", None))
            severity = Severity.WARNING if isinstance(error, PluginNotFoundError) else Severity.ERROR
            self.diagnostics.add_error(error, severity, f"{path}/bindings/{cfg.protocol}")
        return bindings


__all__ = ["ServiceContext", "TransformationService"]
