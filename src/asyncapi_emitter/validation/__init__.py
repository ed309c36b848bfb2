from asyncapi_emitter.validation.structure import StructuralValidator

__all__ = ["StructuralValidator"]
