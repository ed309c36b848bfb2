"""Transformation services: declarations in, document fragments out."""

from asyncapi_emitter.services.base import ServiceContext, TransformationService
from asyncapi_emitter.services.message import MessageService
from asyncapi_emitter.services.operation import OperationService
from asyncapi_emitter.services.security import SecurityService
from asyncapi_emitter.services.server import ServerService

ALL_SERVICES = (ServerService, OperationService, MessageService, SecurityService)

__all__ = [
    "ALL_SERVICES",
    "ServiceContext",
    "TransformationService",
    "MessageService",
    "OperationService",
    "SecurityService",
    "ServerService",
]
