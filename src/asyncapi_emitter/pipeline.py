"""
Emission pipeline.

Runs one emission pass: discovery, transformation, assembly, validation.
A document is always returned together with the diagnostics that explain
anything left out of it.

Manifesto:
    Tooling integrations prefer an empty but valid document to a crash.
    The only failure that raises is building the initial empty document
    (invalid settings / unsupported version); everything else becomes a
    diagnostic.

Architecture:
    ::

        EmissionPipeline.run(program, store)
              │  LogContext(run_id=...)
              ▼
        Document(settings)                         raises ConfigError
              │
        DiscoveryWalker.discover(program)          runs to completion first
              │  root missing -> warning missing-root-namespace
              ▼
        asyncio.gather(
            ServerService, OperationService,       per-item concurrency bounded
            MessageService, SecurityService)       by settings.max_concurrency
              │  fragments
              ▼
        DocumentAssembler.assemble(fragments)      merge, check refs, freeze
              │
        StructuralValidator.validate(document)
              ▼
        EmissionResult(document, diagnostics)

Examples:
    >>> store = AnnotationStore()
    >>> channel(store, op, "orders/created")
    >>> publish(store, op)
    >>> result = emit_sync(Program(ns), store)
    >>> result.document["operations"]["orderCreated"]["action"]
    'send'
    >>> result.has_errors
    False

Tags:
    pipeline, orchestration, asyncio, asyncapi-emitter

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from typing import Any

from asyncapi_emitter.assembly.assembler import DocumentAssembler
from asyncapi_emitter.core.diagnostics import Diagnostic, DiagnosticCollector, Severity
from asyncapi_emitter.core.errors import DiscoveryError
from asyncapi_emitter.core.logging import LogContext, get_logger
from asyncapi_emitter.core.settings import EmitterSettings, get_settings
from asyncapi_emitter.discovery.walker import DiscoveryWalker
from asyncapi_emitter.model.document import Document
from asyncapi_emitter.plugins.registry import PluginRegistry, default_registry
from asyncapi_emitter.services import ALL_SERVICES, ServiceContext
from asyncapi_emitter.state.store import AnnotationStore
from asyncapi_emitter.validation.structure import StructuralValidator

logger = get_logger(__name__)


@dataclass(frozen=True)
class EmissionResult:
    document: dict[str, Any]
    diagnostics: tuple[Diagnostic, ...]

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def with_code(self, code: str) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.code == code]


class EmissionPipeline:
    def __init__(self, settings: EmitterSettings | None = None, registry: PluginRegistry | None = None):
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else default_registry()

    def new_document(self) -> Document:
        return Document(
            version=self.settings.asyncapi_version,
            title=self.settings.title,
            api_version=self.settings.api_version,
            description=self.settings.description,
        )

    async def run(self, program: Any, store: AnnotationStore) -> EmissionResult:
        run_id = uuid.uuid4().hex[:12]
        async with LogContext(run_id=run_id):
            document = self.new_document()
            diagnostics = DiagnosticCollector()
            logger.info("emission_started", asyncapi_version=document.asyncapi)

            discovery = DiscoveryWalker(store).discover(program)
            if discovery.root_missing:
                diagnostics.add_error(
                    DiscoveryError("No root namespace available; emitting an empty document"),
                    Severity.WARNING,
                    "#",
                )

            context = ServiceContext(
                store=store,
                registry=self.registry,
                diagnostics=diagnostics,
                settings=self.settings,
            )
            services = [service_cls(context) for service_cls in ALL_SERVICES]
            batches = await asyncio.gather(*(service.run(discovery) for service in services))
            fragments = [fragment for batch in batches for fragment in batch]

            DocumentAssembler(document, diagnostics).assemble(fragments)
            diagnostics.extend(StructuralValidator().validate(document))

            result = EmissionResult(document=document.to_dict(), diagnostics=diagnostics.items)
            logger.info(
                "emission_completed",
                errors=len(result.errors),
                warnings=len(result.warnings),
                fragments=len(fragments),
            )
            return result


async def emit(
    program: Any,
    store: AnnotationStore,
    *,
    settings: EmitterSettings | None = None,
    registry: PluginRegistry | None = None,
) -> EmissionResult:
    """Run one emission pass."""
    return await EmissionPipeline(settings=settings, registry=registry).run(program, store)


def emit_sync(
    program: Any,
    store: AnnotationStore,
    *,
    settings: EmitterSettings | None = None,
    registry: PluginRegistry | None = None,
) -> EmissionResult:
    """Blocking :func:`emit` for callers without an event loop."""
    return asyncio.run(emit(program, store, settings=settings, registry=registry))


__all__ = ["EmissionResult", "EmissionPipeline", "emit", "emit_sync"]
