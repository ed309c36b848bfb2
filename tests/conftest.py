"""
Shared pytest fixtures and configuration for asyncapi-emitter tests.

This module provides:
- Settings cache cleanup for test isolation
- A fresh AnnotationStore and plugin registry per test
- Sample declaration trees (orders namespace, Order model)

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments:

    def test_something(store, order_model):
        ...
"""

import os
import sys
from pathlib import Path
from typing import Generator

import pytest

# Ensure asyncapi_emitter package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from asyncapi_emitter.core.settings import EmitterSettings, clear_settings_cache
from asyncapi_emitter.model.declarations import Model, ModelProperty, Namespace, Operation, Program
from asyncapi_emitter.model.types import FLOAT64, STRING
from asyncapi_emitter.plugins.registry import PluginRegistry, default_registry
from asyncapi_emitter.state.store import AnnotationStore


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        if Path(item.fspath).name == "test_pipeline.py":
            item.add_marker(pytest.mark.integration)
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_cache(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Clear cached settings and ASYNCAPI_EMITTER_* variables around each test.

    Ensures no test sees settings loaded by another.
    """
    for key in list(os.environ):
        if key.startswith("ASYNCAPI_EMITTER_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def store() -> AnnotationStore:
    return AnnotationStore()


@pytest.fixture
def registry() -> PluginRegistry:
    """Registry with the built-in plugins."""
    return default_registry()


@pytest.fixture
def settings() -> EmitterSettings:
    return EmitterSettings(title="Orders API", api_version="2.1.0", description="Order lifecycle events")


# =============================================================================
# Declaration Fixtures
# =============================================================================


@pytest.fixture
def order_model() -> Model:
    """model Order { id: string; total: float64 }"""
    return Model(
        name="Order",
        properties=[
            ModelProperty("id", STRING),
            ModelProperty("total", FLOAT64),
        ],
    )


@pytest.fixture
def order_created(order_model: Model) -> Operation:
    return Operation(name="orderCreated", return_type=order_model, doc="An order was placed")


@pytest.fixture
def orders_namespace(order_model: Model, order_created: Operation) -> Namespace:
    return Namespace(name="Orders", operations=[order_created], models=[order_model])


@pytest.fixture
def program(orders_namespace: Namespace) -> Program:
    return Program(global_namespace=orders_namespace)
