# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Code generation backends. WebAssembly shims live under `shimgen.codegen.wasm`."""

__all__ = []
