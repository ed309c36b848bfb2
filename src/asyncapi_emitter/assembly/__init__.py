from asyncapi_emitter.assembly.assembler import DocumentAssembler

__all__ = ["DocumentAssembler"]
