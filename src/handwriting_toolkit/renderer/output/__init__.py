"""PDF output for rendered pages."""

from .assembler import AssemblerClosedError, DocumentAssembler

__all__ = ["AssemblerClosedError", "DocumentAssembler"]
