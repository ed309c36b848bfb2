"""Tests for asyncapi_emitter.core.result module."""

import pytest

from asyncapi_emitter.core.errors import PluginError
from asyncapi_emitter.core.result import Err, Ok


class TestOk:
    """Test Ok class."""

    def test_create_ok(self):
        """Create Ok with a binding."""
        result = Ok({"bindingVersion": "0.5.0"})
        assert result.is_ok() is True
        assert result.is_err() is False
        assert result.unwrap() == {"bindingVersion": "0.5.0"}

    def test_unwrap_or_ignores_default(self):
        """unwrap_or returns the value."""
        assert Ok(10).unwrap_or(99) == 10

    def test_to_dict(self):
        """to_dict marks ok and carries the value."""
        assert Ok({"a": 1}).to_dict() == {"ok": True, "value": {"a": 1}}


class TestErr:
    """Test Err class."""

    def test_create_err(self):
        """Create Err with error."""
        error = ValueError("bad qos")
        result = Err(error)
        assert result.error is error
        assert result.is_err() is True
        assert result.is_ok() is False

    def test_unwrap_raises(self):
        """unwrap raises the stored error."""
        with pytest.raises(ValueError, match="bad qos"):
            Err(ValueError("bad qos")).unwrap()

    def test_unwrap_or_returns_default(self):
        """unwrap_or returns the default."""
        assert Err(ValueError("x")).unwrap_or({}) == {}

    def test_to_dict_with_emitter_error(self):
        """EmitterError is serialized through its own to_dict."""
        data = Err(PluginError("failed")).to_dict()
        assert data["ok"] is False
        assert data["error"]["code"] == "plugin-failure"

    def test_to_dict_with_plain_exception(self):
        """Plain exceptions are serialized by type and message."""
        assert Err(ValueError("v")).to_dict() == {
            "ok": False,
            "error": {"error_type": "ValueError", "message": "v"},
        }
