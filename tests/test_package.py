"""Import tests for the public package surface."""

import importlib

import pytest

import asyncapi_emitter

MODULES = [
    "asyncapi_emitter.core.errors",
    "asyncapi_emitter.core.logging",
    "asyncapi_emitter.pipeline",
    "asyncapi_emitter.plugins.registry",
    "asyncapi_emitter.services.server",
    "asyncapi_emitter.services.security",
    "asyncapi_emitter.state.annotations",
]


class TestPackage:
    """Test the top-level package."""

    def test_exports_resolve(self):
        """Every name in __all__ is importable from the package."""
        missing = [name for name in asyncapi_emitter.__all__ if not hasattr(asyncapi_emitter, name)]
        assert missing == []

    def test_version(self):
        """The package carries a version string."""
        assert isinstance(asyncapi_emitter.__version__, str)

    @pytest.mark.parametrize("module", MODULES)
    def test_module_imports(self, module):
        """Core modules import cleanly."""
        assert importlib.import_module(module) is not None

    def test_default_registry_builds(self):
        """The default registry registers every built-in plugin."""
        assert asyncapi_emitter.default_registry().has("sqs")
