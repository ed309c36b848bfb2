from asyncapi_emitter.discovery.walker import DiscoveryResult, DiscoveryWalker

__all__ = ["DiscoveryResult", "DiscoveryWalker"]
