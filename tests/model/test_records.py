"""Tests for asyncapi_emitter.model.records module."""

import pytest
from pydantic import TypeAdapter, ValidationError

from asyncapi_emitter.model.records import (
    ApiKeyScheme,
    ChannelConfig,
    CorrelationIdConfig,
    HttpAuthScheme,
    OAuth2Scheme,
    OperationTypeConfig,
    ProtocolBindingConfig,
    SaslScheme,
    SecurityConfig,
    SecurityScheme,
    TagsConfig,
)


class TestChannelAndOperationRecords:
    """Test channel and operation-type records."""

    def test_empty_address_rejected(self):
        """Channel address must be non-empty."""
        with pytest.raises(ValidationError):
            ChannelConfig(address="")

    def test_unknown_fields_rejected(self):
        """Records forbid extra fields."""
        with pytest.raises(ValidationError):
            ChannelConfig(address="orders", topic="x")

    def test_records_are_frozen(self):
        """Records cannot be mutated."""
        config = ChannelConfig(address="orders")
        with pytest.raises(ValidationError):
            config.address = "other"

    def test_action_mapping(self):
        """publish maps to send and subscribe to receive."""
        assert OperationTypeConfig(type="publish").action == "send"
        assert OperationTypeConfig(type="subscribe").action == "receive"

    def test_invalid_operation_type(self):
        """Only publish and subscribe are valid."""
        with pytest.raises(ValidationError):
            OperationTypeConfig(type="request")


class TestSecurityRecords:
    """Test security scheme records."""

    def test_discriminated_union(self):
        """The type field selects the scheme model."""
        adapter = TypeAdapter(SecurityScheme)
        scheme = adapter.validate_python({"type": "http", "scheme": "bearer", "bearerFormat": "JWT"})
        assert isinstance(scheme, HttpAuthScheme)
        assert scheme.bearer_format == "JWT"

    def test_api_key_alias(self):
        """The in alias maps to location."""
        scheme = TypeAdapter(SecurityScheme).validate_python({"type": "apiKey", "in": "header", "name": "X-Key"})
        assert isinstance(scheme, ApiKeyScheme)
        assert scheme.location == "header"

    def test_unknown_type_rejected(self):
        """Unknown discriminants fail validation."""
        with pytest.raises(ValidationError):
            TypeAdapter(SecurityScheme).validate_python({"type": "kerberos"})

    def test_oauth_flows_defined(self):
        """defined() returns present flows keyed by AsyncAPI name."""
        scheme = OAuth2Scheme.model_validate(
            {
                "flows": {
                    "clientCredentials": {"tokenUrl": "https://auth/token", "availableScopes": {"read": "Read"}},
                }
            }
        )
        flows = scheme.flows.defined()
        assert list(flows) == ["clientCredentials"]
        assert flows["clientCredentials"].scopes == {"read": "Read"}

    def test_security_config(self):
        """SecurityConfig wraps a named scheme."""
        config = SecurityConfig(name="kafkaAuth", scheme={"type": "sasl", "mechanism": "PLAIN"})
        assert isinstance(config.scheme, SaslScheme)


class TestOtherRecords:
    """Test binding, correlation id and tags records."""

    def test_binding_scope_alias(self):
        """bindingScope is accepted as alias for scope."""
        config = ProtocolBindingConfig.model_validate({"protocol": "kafka", "bindingScope": "channel"})
        assert config.scope == "channel"
        assert config.data == {}

    def test_invalid_binding_scope(self):
        """Scopes outside the four known ones are rejected."""
        with pytest.raises(ValidationError):
            ProtocolBindingConfig(protocol="kafka", scope="topic")

    def test_correlation_id_default_schema(self):
        """Correlation ids default to a uuid string schema."""
        config = CorrelationIdConfig(location="$message.header#/id")
        assert config.id_schema == {"type": "string", "format": "uuid"}
        assert config.required is True

    def test_tags_require_at_least_one(self):
        """Empty tag sets are rejected."""
        with pytest.raises(ValidationError):
            TagsConfig(tags=frozenset())

    def test_tags_priority_minimum(self):
        """Priority must be at least 1."""
        with pytest.raises(ValidationError):
            TagsConfig(tags=frozenset({"a"}), priority=0)
