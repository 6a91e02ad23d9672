# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shim module emission: `Interface` -> WebAssembly bytes.

Module layout (section order is mandated by the binary format):

- Type:     type 0 = (i32) -> i32 for the dispatch import,
            type 1 = () -> i32 for every thunk.
- Import:   the dispatch function, bound to type 0. It occupies function
            index 0, so thunks start at index 1.
- Function: one type-1 entry per declared function.
- Export:   one entry per function, sorted by name; the k-th export (0-based)
            is bound to function index k + 1.
- Code:     one thunk per function: `i32.const <k>; call 0; end`.

With DispatchOrder.DECLARATION (the default) the Function/Code sections and
the pushed constants follow declaration order while exports follow sorted
order, so the name bound to function index i + 1 is not necessarily the
function whose declaration index is pushed by that body. Hosts resolve an
exported name to a dispatch argument by its sorted position; the two agree
only for interfaces declared in sorted order. DispatchOrder.SORTED lays out
the Code section in sorted order so they always agree.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from shimgen.config import DispatchOrder, ShimOptions
from shimgen.errors import ShimWriteError
from shimgen.interface import Interface, Signature

from .encoder import (
	CodeSection,
	ExportSection,
	ExternalKind,
	Function,
	FunctionSection,
	ImportSection,
	Module,
	TypeSection,
	ValType,
	call,
	end,
	i32_const,
)

logger = logging.getLogger(__name__)

DISPATCH_TYPE_INDEX = 0
THUNK_TYPE_INDEX = 1
DISPATCH_FUNC_INDEX = 0
FIRST_THUNK_INDEX = 1


def _sorted_by_name(functions: List[Signature]) -> List[Signature]:
	return sorted(functions, key=lambda sig: sig.name)


def _thunk(dispatch_arg: int) -> Function:
	f = Function()
	f.instruction(i32_const(dispatch_arg))
	f.instruction(call(DISPATCH_FUNC_INDEX))
	f.instruction(end())
	return f


def build_shim_module(interface: Interface, options: Optional[ShimOptions] = None) -> Module:
	"""Assemble the shim's sections without serialising them."""
	opts = options or ShimOptions()
	declared = list(interface.functions)
	exported = _sorted_by_name(declared)
	if opts.dispatch_order is DispatchOrder.SORTED:
		bodies = exported
	else:
		bodies = declared

	module = Module()

	types = TypeSection()
	types.function([ValType.I32], [ValType.I32])  # dispatch import
	types.function([], [ValType.I32])  # thunk
	module.section(types)

	imports = ImportSection()
	imports.import_function(opts.import_module, opts.import_name, DISPATCH_TYPE_INDEX)
	module.section(imports)

	functions = FunctionSection()
	for _ in bodies:
		functions.function(THUNK_TYPE_INDEX)
	module.section(functions)

	exports = ExportSection()
	for func_index, sig in enumerate(exported, start=FIRST_THUNK_INDEX):
		exports.export(sig.name, ExternalKind.FUNC, func_index)
	module.section(exports)

	codes = CodeSection()
	for dispatch_arg, _sig in enumerate(bodies):
		codes.function(_thunk(dispatch_arg))
	module.section(codes)

	return module


def emit_shim_module(interface: Interface, options: Optional[ShimOptions] = None) -> bytes:
	"""Encode the shim module for `interface`; deterministic for equal inputs."""
	module = build_shim_module(interface, options)
	for sid, size in module.section_sizes:
		logger.debug("section %s: %d byte(s)", sid.name.lower(), size)
	data = module.finish()
	logger.debug("encoded shim module: %d thunk(s), %d byte(s)", len(interface.functions), len(data))
	return data


def write_shim_module(interface: Interface, export_path: Path, options: Optional[ShimOptions] = None) -> int:
	"""
	Encode and write the shim module; returns the number of bytes written.

	The module is fully encoded before the output file is opened. A failed
	write may leave a truncated file behind.
	"""
	data = emit_shim_module(interface, options)
	try:
		with open(export_path, "wb") as fh:
			fh.write(data)
	except OSError as err:
		raise ShimWriteError(f"could not write shim module {export_path}: {err}") from err
	logger.info("wrote shim module %s (%d bytes)", export_path, len(data))
	return len(data)


__all__ = [
	"DISPATCH_TYPE_INDEX",
	"THUNK_TYPE_INDEX",
	"DISPATCH_FUNC_INDEX",
	"FIRST_THUNK_INDEX",
	"build_shim_module",
	"emit_shim_module",
	"write_shim_module",
]
