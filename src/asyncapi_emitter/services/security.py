"""
Security Service.

Validates each discovered ``@security`` annotation against the rules of
its scheme type and emits a ``components.securitySchemes`` entry for the
valid ones. Invalid schemes are reported and left out of the document;
operations and servers that point at them drop the reference.

Rules:
    ::

        http                 scheme in IANA HTTP auth registry; bearer needs bearerFormat
        apiKey               in ∈ {user, password, query, header, cookie};
                             query/header/cookie also need a name
        oauth2               at least one flow;
                             implicit            -> authorizationUrl
                             password            -> tokenUrl
                             clientCredentials   -> tokenUrl
                             authorizationCode   -> authorizationUrl + tokenUrl
                             URLs must be absolute http(s); flow without scopes warns
        openIdConnect        openIdConnectUrl must be an absolute http(s) URL
        sasl                 mechanism in IANA SASL mechanism registry
        x509 / *Encryption   no extra fields

Tags:
    security, validation, oauth2, sasl, asyncapi-emitter

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

from asyncapi_emitter.core.diagnostics import Severity
from asyncapi_emitter.core.errors import SecuritySchemeError
from asyncapi_emitter.core.logging import get_logger
from asyncapi_emitter.discovery.walker import DiscoveryResult
from asyncapi_emitter.model.document import Fragment, FragmentKind, security_ref
from asyncapi_emitter.model.records import (
    ApiKeyScheme,
    AsymmetricEncryptionScheme,
    HttpAuthScheme,
    OAuth2Scheme,
    OpenIdConnectScheme,
    SaslScheme,
    SecurityConfig,
    SymmetricEncryptionScheme,
    X509Scheme,
)
from asyncapi_emitter.services.base import TransformationService

logger = get_logger(__name__)

HTTP_AUTH_SCHEMES = frozenset({
    "basic", "bearer", "digest", "dpop", "gnap", "hoba", "mutual", "negotiate",
    "oauth", "privatetoken", "scram-sha-1", "scram-sha-256", "vapid",
})

SASL_MECHANISMS = frozenset({
    "PLAIN", "SCRAM-SHA-1", "SCRAM-SHA-256", "SCRAM-SHA-512", "GSSAPI",
    "EXTERNAL", "ANONYMOUS", "OTP", "DIGEST-MD5", "AWS_MSK_IAM", "OAUTHBEARER",
})

# SASL mechanisms with a dedicated AsyncAPI security scheme type
SASL_SCHEME_TYPES = {
    "PLAIN": "plain",
    "SCRAM-SHA-256": "scramSha256",
    "SCRAM-SHA-512": "scramSha512",
    "GSSAPI": "gssapi",
}

API_KEY_LOCATIONS = ("user", "password", "query", "header", "cookie")

# flow name -> required URL fields
OAUTH_FLOW_URLS: dict[str, tuple[str, ...]] = {
    "implicit": ("authorizationUrl",),
    "password": ("tokenUrl",),
    "clientCredentials": ("tokenUrl",),
    "authorizationCode": ("authorizationUrl", "tokenUrl"),
}


@dataclass
class SchemeCheck:
    errors: list[SecuritySchemeError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error(self, message: str, field_name: str | None = None) -> None:
        self.errors.append(SecuritySchemeError(message, field=field_name))


def _is_http_url(value: str | None) -> bool:
    if not value:
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def validate_security_scheme(scheme: Any) -> SchemeCheck:
    """Check a scheme record. Pure: no logging, no diagnostics."""
    check = SchemeCheck()
    match scheme:
        case HttpAuthScheme():
            name = scheme.scheme.strip().lower()
            if not name:
                check.error("http security scheme requires a scheme name", "scheme")
            elif name not in HTTP_AUTH_SCHEMES:
                check.error(f"Unknown HTTP authentication scheme '{scheme.scheme}'", "scheme")
            elif name == "bearer" and not scheme.bearer_format:
                check.error("bearer http security scheme requires bearerFormat", "bearerFormat")
        case ApiKeyScheme():
            if scheme.location not in API_KEY_LOCATIONS:
                check.error(
                    f"apiKey location '{scheme.location}' must be one of {', '.join(API_KEY_LOCATIONS)}",
                    "in",
                )
            elif scheme.location in ("query", "header", "cookie") and not scheme.name:
                check.error(f"apiKey in '{scheme.location}' requires a name", "name")
        case OAuth2Scheme():
            flows = scheme.flows.defined()
            if not flows:
                check.error("oauth2 security scheme must define at least one flow", "flows")
            for flow_name, flow in flows.items():
                for url_field in OAUTH_FLOW_URLS[flow_name]:
                    value = flow.model_dump(by_alias=True).get(url_field)
                    if not value:
                        check.error(f"oauth2 {flow_name} flow must have {url_field}", f"flows.{flow_name}.{url_field}")
                    elif not _is_http_url(value):
                        check.error(f"oauth2 {flow_name} flow has invalid {url_field} '{value}'",
                                    f"flows.{flow_name}.{url_field}")
                if flow.refresh_url and not _is_http_url(flow.refresh_url):
                    check.error(f"oauth2 {flow_name} flow has invalid refreshUrl '{flow.refresh_url}'",
                                f"flows.{flow_name}.refreshUrl")
                if not flow.scopes:
                    check.warnings.append(f"oauth2 {flow_name} flow defines no scopes")
        case OpenIdConnectScheme():
            if not _is_http_url(scheme.open_id_connect_url):
                check.error("openIdConnect security scheme requires a valid openIdConnectUrl", "openIdConnectUrl")
        case SaslScheme():
            if scheme.mechanism.upper() not in SASL_MECHANISMS:
                check.error(f"Unknown SASL mechanism '{scheme.mechanism}'", "mechanism")
        case X509Scheme() | SymmetricEncryptionScheme() | AsymmetricEncryptionScheme():
            pass
        case _:
            check.error(f"Unsupported security scheme type {getattr(scheme, 'type', scheme)!r}", "type")
    return check


def render_security_scheme(scheme: Any) -> dict[str, Any]:
    """AsyncAPI security scheme object for a valid scheme record."""
    result: dict[str, Any]
    match scheme:
        case HttpAuthScheme():
            result = {"type": "http", "scheme": scheme.scheme.strip().lower()}
            if scheme.bearer_format:
                result["bearerFormat"] = scheme.bearer_format
        case ApiKeyScheme():
            if scheme.location in ("user", "password"):
                result = {"type": "apiKey", "in": scheme.location}
            else:
                result = {"type": "httpApiKey", "name": scheme.name, "in": scheme.location}
        case OAuth2Scheme():
            flows = {}
            for flow_name, flow in scheme.flows.defined().items():
                rendered = flow.model_dump(by_alias=True, exclude_none=True)
                rendered["availableScopes"] = dict(flow.scopes)
                flows[flow_name] = rendered
            result = {"type": "oauth2", "flows": flows}
            if scheme.scopes:
                result["scopes"] = list(scheme.scopes)
        case OpenIdConnectScheme():
            result = {"type": "openIdConnect", "openIdConnectUrl": scheme.open_id_connect_url}
            if scheme.scopes:
                result["scopes"] = list(scheme.scopes)
        case SaslScheme():
            mechanism = scheme.mechanism.upper()
            if mechanism in SASL_SCHEME_TYPES:
                result = {"type": SASL_SCHEME_TYPES[mechanism]}
            else:
                result = {"type": "sasl", "x-sasl-mechanism": mechanism}
        case _:
            result = {"type": scheme.type}
    if getattr(scheme, "description", None):
        result["description"] = scheme.description
    return result


def is_valid_security(config: SecurityConfig) -> bool:
    return validate_security_scheme(config.scheme).is_valid


class SecurityService(TransformationService):
    name = "security"

    def items(self, discovery: DiscoveryResult) -> list[tuple[Any, SecurityConfig]]:
        return list(discovery.security)

    async def transform(self, item: tuple[Any, SecurityConfig]) -> list[Fragment]:
        declaration, config = item
        path = security_ref(config.name)
        check = validate_security_scheme(config.scheme)
        for warning in check.warnings:
            self.diagnostics.warning(f"Security scheme '{config.name}': {warning}", path, "security-scheme-warning")
        if not check.is_valid:
            for error in check.errors:
                error.with_context(declaration=getattr(declaration, "name", None), path=path)
                self.report(error, path, Severity.ERROR)
            return []
        return [
            Fragment(
                FragmentKind.SECURITY_SCHEME,
                config.name,
                render_security_scheme(config.scheme),
                origin=getattr(declaration, "name", ""),
            )
        ]


__all__ = [
    "HTTP_AUTH_SCHEMES",
    "SASL_MECHANISMS",
    "SchemeCheck",
    "validate_security_scheme",
    "render_security_scheme",
    "is_valid_security",
    "SecurityService",
]
