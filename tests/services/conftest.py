"""Shared fixtures for transformation service tests."""

import pytest

from asyncapi_emitter.core.diagnostics import DiagnosticCollector
from asyncapi_emitter.services.base import ServiceContext


@pytest.fixture
def context(store, registry, settings) -> ServiceContext:
    """Service context over the per-test store, registry and settings."""
    return ServiceContext(store=store, registry=registry, diagnostics=DiagnosticCollector(), settings=settings)


def by_key(fragments):
    """Index fragments by (kind value, key)."""
    return {(f.kind.value, f.key): f.value for f in fragments}


def codes(context):
    """Diagnostic codes recorded so far, in order."""
    return [d.code for d in context.diagnostics.items]


@pytest.fixture
def index():
    return by_key


@pytest.fixture
def diagnostic_codes():
    return codes
