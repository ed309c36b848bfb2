"""Protocol binding plugins."""

from asyncapi_emitter.plugins.base import ProtocolPlugin
from asyncapi_emitter.plugins.registry import PluginRegistry, default_registry

__all__ = ["ProtocolPlugin", "PluginRegistry", "default_registry"]
