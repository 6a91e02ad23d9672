# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shim compiler driver.

`create_shims` is the library entry point: interface file in, WebAssembly
shim module out. `main` wraps it as the `shimc` command line.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from shimgen.codegen.wasm.shim import write_shim_module
from shimgen.config import DEFAULT_IMPORT_MODULE, DEFAULT_IMPORT_NAME, DispatchOrder, ShimOptions
from shimgen.core.diagnostics import Diagnostic
from shimgen.errors import ShimError, ShimWriteError
from shimgen.interface import Interface, load_interface

logger = logging.getLogger(__name__)


def create_shims(interface_path: Path, export_path: Path, options: Optional[ShimOptions] = None) -> Interface:
	"""
	Compile the interface file at `interface_path` into a shim module written
	to `export_path`.

	Extraction completes before anything is written; on any failure a
	`ShimError` subclass is raised. Returns the extracted interface.
	"""
	interface = load_interface(Path(interface_path))
	write_shim_module(interface, Path(export_path), options)
	return interface


def _write_interface_json(interface: Interface, path: Path) -> None:
	try:
		path.write_text(json.dumps(interface.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
	except OSError as err:
		raise ShimWriteError(f"could not write interface description {path}: {err}") from err


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(
		prog="shimc",
		description="Compile a TypeScript-like interface file into a WebAssembly dispatch shim",
	)
	p.add_argument("interface", type=Path, help="Path to the interface file (namespace main { ... })")
	p.add_argument("-o", "--output", type=Path, required=True, help="Path to the output .wasm module")
	p.add_argument(
		"--import-module",
		default=DEFAULT_IMPORT_MODULE,
		help=f"Module label of the dispatch import (default: {DEFAULT_IMPORT_MODULE})",
	)
	p.add_argument(
		"--import-name",
		default=DEFAULT_IMPORT_NAME,
		help=f"Function label of the dispatch import (default: {DEFAULT_IMPORT_NAME})",
	)
	p.add_argument(
		"--dispatch-order",
		choices=[order.value for order in DispatchOrder],
		default=DispatchOrder.DECLARATION.value,
		help="Constant pushed by each thunk: declaration index (default) or sorted export position",
	)
	p.add_argument("--emit-interface", type=Path, help="Also write the extracted interface as JSON to the given path")
	p.add_argument("--json", action="store_true", help="Emit machine-readable diagnostics on stdout")
	p.add_argument("-v", "--verbose", action="store_true", help="Log pipeline progress to stderr")
	return p


def _report(diagnostics: List[Diagnostic], source: Path, *, as_json: bool) -> None:
	if as_json:
		payload = {
			"exit_code": 1,
			"diagnostics": [d.to_json(str(source)) for d in diagnostics],
		}
		print(json.dumps(payload))
		return
	for d in diagnostics:
		print(d.format_human(str(source)), file=sys.stderr)
		for note in d.notes:
			print(f"  note: {note}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
	"""
	Minimal CLI: extracts the interface, writes the shim module. Any failure
	prints diagnostics and exits 1.

	With --json, prints `{"exit_code", "diagnostics"}` to stdout; otherwise
	prints `file:line:column: severity: message` lines to stderr.
	"""
	parser = _build_parser()
	args = parser.parse_args(argv)

	logging.basicConfig(
		level=logging.INFO if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
		stream=sys.stderr,
	)

	try:
		options = ShimOptions(
			import_module=args.import_module,
			import_name=args.import_name,
			dispatch_order=DispatchOrder(args.dispatch_order),
		)
	except ValueError as err:
		parser.error(str(err))

	try:
		interface = create_shims(args.interface, args.output, options)
		if args.emit_interface is not None:
			_write_interface_json(interface, args.emit_interface)
	except ShimError as err:
		_report(err.diagnostics, args.interface, as_json=args.json)
		return 1

	if args.json:
		print(json.dumps({"exit_code": 0, "diagnostics": [], "exports": sorted(f.name for f in interface.functions)}))
	return 0


__all__ = ["create_shims", "main"]
