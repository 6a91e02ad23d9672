# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Interface shim compiler.

Turns a `namespace main { export function ...; }` interface file into a
WebAssembly module exporting one dispatch thunk per declared function. The
CLI entrypoint is `shimgen.shimc:main`.
"""

from .config import DispatchOrder, ShimOptions
from .errors import InterfaceError, InterfaceSyntaxError, ShimError, ShimReadError, ShimWriteError
from .interface import Interface, Param, Signature, extract_interface, load_interface, parse_interface_source
from .shimc import create_shims

__all__ = [
	"DispatchOrder",
	"ShimOptions",
	"ShimError",
	"InterfaceSyntaxError",
	"InterfaceError",
	"ShimReadError",
	"ShimWriteError",
	"Interface",
	"Param",
	"Signature",
	"extract_interface",
	"load_interface",
	"parse_interface_source",
	"create_shims",
]
