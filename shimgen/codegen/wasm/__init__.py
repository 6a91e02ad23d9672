# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""WebAssembly shim backend: section encoder plus the thunk module emitter."""

from .shim import build_shim_module, emit_shim_module, write_shim_module

__all__ = ["build_shim_module", "emit_shim_module", "write_shim_module"]
