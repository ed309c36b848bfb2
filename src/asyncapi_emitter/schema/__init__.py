"""Type-to-schema conversion."""

from asyncapi_emitter.schema.converter import SchemaConverter, SchemaFragment, convert

__all__ = ["SchemaConverter", "SchemaFragment", "convert"]
