"""
Annotation records.

Typed configuration values that annotation processors attach to
declarations. Pydantic validates the *shape* of each record when it is
created; cross-field rules (which URLs an OAuth flow needs, whether a SASL
mechanism is registered, ...) are checked later by the transformation
services.

Records are frozen and reject unknown fields. Field names follow Python
conventions and accept the AsyncAPI camelCase spelling as an alias
(``bearerFormat``, ``in``, ``tokenUrl``).

Tags:
    annotations, records, pydantic, asyncapi-emitter

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Record(BaseModel):
    """Base for every annotation record."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


# ── Channels / operations ────────────────────────────────────────────────


class ChannelConfig(Record):
    address: str = Field(..., min_length=1, description="Channel address, e.g. orders/created")
    parameters: dict[str, dict[str, Any]] | None = Field(default=None)
    description: str | None = Field(default=None)


class OperationTypeConfig(Record):
    """Publish/subscribe marker. ``publish`` maps to ``send``, ``subscribe`` to ``receive``."""

    type: Literal["publish", "subscribe"]

    @property
    def action(self) -> str:
        return "send" if self.type == "publish" else "receive"


# ── Servers ──────────────────────────────────────────────────────────────


class ServerConfig(Record):
    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    protocol: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None)
    protocol_version: str | None = Field(default=None, alias="protocolVersion")


# ── Security schemes ─────────────────────────────────────────────────────


class HttpAuthScheme(Record):
    type: Literal["http"] = "http"
    scheme: str = ""
    bearer_format: str | None = Field(default=None, alias="bearerFormat")
    description: str | None = None


class ApiKeyScheme(Record):
    type: Literal["apiKey"] = "apiKey"
    location: str = Field(default="", alias="in")
    name: str | None = None
    description: str | None = None


class OAuthFlow(Record):
    authorization_url: str | None = Field(default=None, alias="authorizationUrl")
    token_url: str | None = Field(default=None, alias="tokenUrl")
    refresh_url: str | None = Field(default=None, alias="refreshUrl")
    scopes: dict[str, str] = Field(default_factory=dict, alias="availableScopes")


class OAuthFlows(Record):
    implicit: OAuthFlow | None = None
    password: OAuthFlow | None = None
    client_credentials: OAuthFlow | None = Field(default=None, alias="clientCredentials")
    authorization_code: OAuthFlow | None = Field(default=None, alias="authorizationCode")

    def defined(self) -> dict[str, OAuthFlow]:
        """Flows that are present, keyed by their AsyncAPI name."""
        result = {}
        for field_name, info in type(self).model_fields.items():
            flow = getattr(self, field_name)
            if flow is not None:
                result[info.alias or field_name] = flow
        return result


class OAuth2Scheme(Record):
    type: Literal["oauth2"] = "oauth2"
    flows: OAuthFlows = Field(default_factory=OAuthFlows)
    scopes: list[str] | None = None
    description: str | None = None


class OpenIdConnectScheme(Record):
    type: Literal["openIdConnect"] = "openIdConnect"
    open_id_connect_url: str = Field(default="", alias="openIdConnectUrl")
    scopes: list[str] | None = None
    description: str | None = None


class SaslScheme(Record):
    type: Literal["sasl"] = "sasl"
    mechanism: str = ""
    description: str | None = None


class X509Scheme(Record):
    type: Literal["x509"] = "x509"
    description: str | None = None


class SymmetricEncryptionScheme(Record):
    type: Literal["symmetricEncryption"] = "symmetricEncryption"
    description: str | None = None


class AsymmetricEncryptionScheme(Record):
    type: Literal["asymmetricEncryption"] = "asymmetricEncryption"
    description: str | None = None


SecurityScheme = Annotated[
    Union[
        HttpAuthScheme,
        ApiKeyScheme,
        OAuth2Scheme,
        OpenIdConnectScheme,
        SaslScheme,
        X509Scheme,
        SymmetricEncryptionScheme,
        AsymmetricEncryptionScheme,
    ],
    Field(discriminator="type"),
]


class SecurityConfig(Record):
    name: str = Field(..., min_length=1)
    scheme: SecurityScheme


# ── Protocol bindings ────────────────────────────────────────────────────

BindingScope = Literal["operation", "message", "server", "channel"]


class ProtocolBindingConfig(Record):
    protocol: str = Field(..., min_length=1)
    scope: BindingScope = Field(..., alias="bindingScope")
    data: dict[str, Any] = Field(default_factory=dict)


# ── Messages ─────────────────────────────────────────────────────────────


class MessageConfig(Record):
    name: str = Field(..., min_length=1)
    title: str | None = None
    summary: str | None = None
    description: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")


class HeaderConfig(Record):
    name: str = Field(..., min_length=1)
    type: str = "string"
    required: bool = False
    pattern: str | None = None
    description: str | None = None


class CorrelationIdConfig(Record):
    location: str = Field(..., min_length=1)
    required: bool = True
    id_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "string", "format": "uuid"},
        alias="schema",
    )
    description: str | None = None


# ── Tags ─────────────────────────────────────────────────────────────────


class TagsConfig(Record):
    tags: frozenset[str] = Field(..., min_length=1)
    category: str = "general"
    priority: int = Field(default=4, ge=1)
    required: bool = False


__all__ = [
    "Record",
    "ChannelConfig",
    "OperationTypeConfig",
    "ServerConfig",
    "HttpAuthScheme",
    "ApiKeyScheme",
    "OAuthFlow",
    "OAuthFlows",
    "OAuth2Scheme",
    "OpenIdConnectScheme",
    "SaslScheme",
    "X509Scheme",
    "SymmetricEncryptionScheme",
    "AsymmetricEncryptionScheme",
    "SecurityScheme",
    "SecurityConfig",
    "BindingScope",
    "ProtocolBindingConfig",
    "MessageConfig",
    "HeaderConfig",
    "CorrelationIdConfig",
    "TagsConfig",
]
