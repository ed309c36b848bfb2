"""
Server Service.

Namespace-level configuration: every ``@server`` becomes a
``servers[name]`` entry, namespace ``server`` bindings attach to servers of
the same protocol, namespace ``@security`` adds requirements to every
server in that namespace, and namespace ``@tags`` go to ``info.tags``.
A server without a protocol uses ``EmitterSettings.default_server_protocol``.

Tags:
    servers, namespaces, services, asyncapi-emitter

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

from asyncapi_emitter.core.errors import SemanticError
from asyncapi_emitter.core.logging import get_logger
from asyncapi_emitter.discovery.walker import DiscoveryResult
from asyncapi_emitter.model.document import Fragment, FragmentKind, escape_pointer, security_ref
from asyncapi_emitter.model.records import ServerConfig
from asyncapi_emitter.plugins.registry import SUPPORTED_PROTOCOLS
from asyncapi_emitter.services.base import TransformationService
from asyncapi_emitter.services.security import is_valid_security
from asyncapi_emitter.state.store import AnnotationKind

logger = get_logger(__name__)


def split_server_url(url: str) -> tuple[str, str | None]:
    """``kafka://broker:9092/prod`` -> ``("broker:9092", "/prod")``.

    Unparseable URLs (an unbalanced ``[`` in the host) give an empty host.
    """
    try:
        parts = urlsplit(url if "://" in url else f"//{url}")
    except ValueError:
        return "", None
    pathname = parts.path if parts.path not in ("", "/") else None
    return parts.netloc, pathname


class ServerService(TransformationService):
    name = "server"

    def items(self, discovery: DiscoveryResult) -> list[Any]:
        return list(discovery.namespaces)

    def protocol_of(self, config: ServerConfig) -> str:
        return (config.protocol or self.context.settings.default_server_protocol).lower()

    async def transform(self, namespace: Any) -> list[Fragment]:
        origin = getattr(namespace, "name", "")
        fragments: list[Fragment] = []

        tags = self.tags_for(namespace)
        if tags:
            fragments.append(Fragment(FragmentKind.INFO_TAGS, "info", tags, origin))

        configs: list[ServerConfig] = self.store.get_all(namespace, AnnotationKind.SERVER)
        server_bindings = self.binding_configs(namespace, "server")
        if server_bindings and not configs:
            self.diagnostics.warning(
                f"Server bindings on namespace '{origin}' ignored: it declares no @server",
                "#/servers",
                "ignored-binding-scope",
            )
        if not configs:
            return fragments

        security = [
            {"$ref": security_ref(cfg.name)}
            for cfg in self.store.get_all(namespace, AnnotationKind.SECURITY)
            if is_valid_security(cfg)
        ]

        registry = self.context.registry
        for config in configs:
            path = f"#/servers/{escape_pointer(config.name)}"
            host, pathname = split_server_url(config.url)
            if not host:
                self.report(
                    SemanticError(f"Server '{config.name}' has no host in url '{config.url}'", field="url",
                                  code="invalid-server-url").with_context(declaration=origin),
                    path,
                )
                continue

            protocol = self.protocol_of(config)
            if protocol not in SUPPORTED_PROTOCOLS:
                self.diagnostics.warning(
                    f"Server '{config.name}' uses unsupported protocol '{protocol}'",
                    f"{path}/protocol",
                    "unsupported-protocol",
                )

            server: dict[str, Any] = {"host": host, "protocol": protocol}
            if config.protocol_version:
                server["protocolVersion"] = config.protocol_version
            if pathname:
                server["pathname"] = pathname
            if config.description:
                server["description"] = config.description
            if security:
                server["security"] = list(security)

            matching = [
                cfg for cfg in server_bindings
                if registry.normalize(cfg.protocol) == registry.normalize(protocol)
            ]
            bindings = await self.bindings_for(namespace, "server", path, matching)
            if bindings:
                server["bindings"] = bindings

            fragments.append(Fragment(FragmentKind.SERVER, config.name, server, origin))

        for cfg in server_bindings:
            if not any(registry.normalize(cfg.protocol) == registry.normalize(self.protocol_of(c)) for c in configs):
                self.diagnostics.warning(
                    f"Server binding for '{cfg.protocol}' on namespace '{origin}' matches no server",
                    "#/servers",
                    "unmatched-server-binding",
                )
        return fragments


__all__ = ["ServerService", "split_server_url"]
