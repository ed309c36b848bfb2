"""Tests for asyncapi_emitter.model.document module."""

import pytest

from asyncapi_emitter.core.errors import DocumentFrozenError, InvalidConfigError
from asyncapi_emitter.model.document import (
    Document,
    Fragment,
    FragmentKind,
    ServiceOutput,
    channel_ref,
    escape_pointer,
    message_ref,
    split_ref,
    unescape_pointer,
)


# =============================================================================
# JSON POINTERS
# =============================================================================


class TestPointers:
    """Test JSON pointer helpers."""

    def test_escape_slash_and_tilde(self):
        """Slash becomes ~1 and tilde becomes ~0."""
        assert escape_pointer("orders/created") == "orders~1created"
        assert escape_pointer("a~b") == "a~0b"
        assert escape_pointer("~/") == "~0~1"

    def test_unescape_reverses_escape(self):
        """unescape_pointer reverses escape_pointer."""
        assert unescape_pointer("~0~1") == "~/"
        assert unescape_pointer("orders~1created") == "orders/created"

    def test_channel_ref_escapes_address(self):
        """Channel refs escape the address."""
        assert channel_ref("orders/created") == "#/channels/orders~1created"

    def test_message_ref(self):
        """Message refs point into components."""
        assert message_ref("Order") == "#/components/messages/Order"

    def test_split_ref(self):
        """split_ref unescapes each token."""
        assert split_ref("#/channels/orders~1created/messages/Order") == [
            "channels",
            "orders/created",
            "messages",
            "Order",
        ]

    def test_split_non_local_ref(self):
        """Non-local refs split to nothing."""
        assert split_ref("other.yaml#/x") == []


# =============================================================================
# FRAGMENTS
# =============================================================================


class TestFragment:
    """Test Fragment ordering."""

    def test_kind_order(self):
        """Kinds are ordered server first, info tags last."""
        assert FragmentKind.SERVER.order < FragmentKind.CHANNEL.order < FragmentKind.OPERATION.order
        assert FragmentKind.INFO_TAGS.order == len(FragmentKind) - 1

    def test_sort_key(self):
        """Fragments sort by kind, then key, then origin."""
        fragments = [
            Fragment(FragmentKind.SCHEMA, "B", {}),
            Fragment(FragmentKind.CHANNEL, "z", {}),
            Fragment(FragmentKind.SCHEMA, "A", {}, origin="message"),
        ]
        ordered = sorted(fragments, key=lambda f: f.sort_key)
        assert [(f.kind, f.key) for f in ordered] == [
            (FragmentKind.CHANNEL, "z"),
            (FragmentKind.SCHEMA, "A"),
            (FragmentKind.SCHEMA, "B"),
        ]

    def test_service_output(self):
        """ServiceOutput collects and concatenates fragments."""
        first = ServiceOutput()
        first.add(FragmentKind.CHANNEL, "orders", {"address": "orders"})
        second = ServiceOutput()
        second.add(FragmentKind.OPERATION, "op", {})
        first.extend(second)
        assert [f.key for f in first.fragments] == ["orders", "op"]


# =============================================================================
# DOCUMENT
# =============================================================================


class TestDocument:
    """Test Document."""

    def test_rejects_non_3x_version(self):
        """Only AsyncAPI 3.x documents can be built."""
        with pytest.raises(InvalidConfigError):
            Document(version="2.6.0")

    def test_to_dict_shape(self):
        """Every top-level section is present, even when empty."""
        data = Document(title="Orders API", api_version="2.0.0").to_dict()
        assert data == {
            "asyncapi": "3.0.0",
            "info": {"title": "Orders API", "version": "2.0.0"},
            "servers": {},
            "channels": {},
            "operations": {},
            "components": {"schemas": {}, "messages": {}, "securitySchemes": {}},
        }

    def test_description_in_info(self):
        """description lands in info when given."""
        assert Document(description="Events").info["description"] == "Events"

    def test_put_get_remove(self):
        """Sections are addressable by name, components included."""
        document = Document()
        document.put("channels", "orders", {"address": "orders"})
        document.put("messages", "Order", {"name": "Order"})
        assert document.get("channels", "orders") == {"address": "orders"}
        assert document.components["messages"]["Order"] == {"name": "Order"}
        document.remove("channels", "orders")
        assert document.get("channels", "orders") is None

    def test_unknown_section(self):
        """Unknown sections raise KeyError."""
        with pytest.raises(KeyError):
            Document().section("tags")

    def test_frozen_document_rejects_mutation(self):
        """Mutations after freeze raise DocumentFrozenError."""
        document = Document()
        document.freeze()
        assert document.frozen
        with pytest.raises(DocumentFrozenError):
            document.put("channels", "x", {})
        with pytest.raises(DocumentFrozenError):
            document.set_info("tags", [])

    def test_resolves(self):
        """resolves follows escaped pointers into the document."""
        document = Document()
        document.put("channels", "orders/created", {"address": "orders/created", "messages": {"Order": {}}})
        assert document.resolves("#/channels/orders~1created")
        assert document.resolves("#/channels/orders~1created/messages/Order")
        assert not document.resolves("#/channels/orders")
        assert not document.resolves("#/components/messages/Order")
        assert not document.resolves("external.json#/x")

    def test_to_dict_is_a_copy(self):
        """Mutating the exported dict leaves the document unchanged."""
        document = Document()
        document.put("channels", "orders", {"address": "orders"})
        exported = document.to_dict()
        exported["channels"]["orders"]["address"] = "changed"
        assert document.get("channels", "orders")["address"] == "orders"
