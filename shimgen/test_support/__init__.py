# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared helpers for tests that need to look inside emitted shim modules.

`decode_module` reads the emitted bytes back into section-level records so
tests can assert on structure and thunk instructions.
"""

from .wasm_reader import Body, DecodedModule, Export, FuncType, Import, decode_module

__all__ = ["Body", "DecodedModule", "Export", "FuncType", "Import", "decode_module"]
