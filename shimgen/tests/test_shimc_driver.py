# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from shimgen.codegen.wasm.shim import emit_shim_module
from shimgen.config import DispatchOrder, ShimOptions
from shimgen.errors import InterfaceError, InterfaceSyntaxError
from shimgen.interface import parse_interface_source
from shimgen.shimc import create_shims, main
from shimgen.test_support import decode_module

ADD_SUB = """
namespace main {
  export function add(a: i32, b: i32): I32;
  export function sub(a: i32, b: i32): I32;
}
"""


def _write(tmp_path: Path, text: str, name: str = "iface.ts") -> Path:
	path = tmp_path / name
	path.write_text(text)
	return path


def test_create_shims_writes_module(tmp_path: Path) -> None:
	src = _write(tmp_path, ADD_SUB)
	out = tmp_path / "shim.wasm"
	iface = create_shims(src, out)
	assert [f.name for f in iface.functions] == ["add", "sub"]
	assert out.read_bytes() == emit_shim_module(parse_interface_source(ADD_SUB))


def test_create_shims_is_deterministic(tmp_path: Path) -> None:
	src = _write(tmp_path, ADD_SUB)
	create_shims(src, tmp_path / "a.wasm")
	create_shims(src, tmp_path / "b.wasm")
	assert (tmp_path / "a.wasm").read_bytes() == (tmp_path / "b.wasm").read_bytes()


def test_create_shims_does_not_write_on_validation_error(tmp_path: Path) -> None:
	src = _write(tmp_path, "namespace other {}")
	out = tmp_path / "shim.wasm"
	with pytest.raises(InterfaceError):
		create_shims(src, out)
	assert not out.exists()


def test_create_shims_does_not_write_on_syntax_error(tmp_path: Path) -> None:
	src = _write(tmp_path, "namespace main { export function (): I32; }")
	out = tmp_path / "shim.wasm"
	with pytest.raises(InterfaceSyntaxError):
		create_shims(src, out)
	assert not out.exists()


def test_create_shims_overwrites_existing_output(tmp_path: Path) -> None:
	src = _write(tmp_path, ADD_SUB)
	out = tmp_path / "shim.wasm"
	out.write_bytes(b"stale")
	create_shims(src, out, ShimOptions(dispatch_order=DispatchOrder.SORTED))
	assert out.read_bytes()[:4] == b"\x00asm"


def test_cli_success(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, ADD_SUB)
	out = tmp_path / "shim.wasm"
	exit_code = main([str(src), "-o", str(out)])
	assert exit_code == 0
	mod = decode_module(out.read_bytes())
	assert [e.name for e in mod.exports] == ["add", "sub"]
	captured = capsys.readouterr()
	assert captured.err == ""


def test_cli_import_labels_and_interface_json(tmp_path: Path) -> None:
	src = _write(tmp_path, "namespace main { export function zeta(): I32; export function alpha(): I32; }")
	out = tmp_path / "shim.wasm"
	iface_json = tmp_path / "iface.json"
	exit_code = main(
		[
			str(src),
			"-o",
			str(out),
			"--import-module",
			"env",
			"--import-name",
			"call",
			"--dispatch-order",
			"sorted",
			"--emit-interface",
			str(iface_json),
		]
	)
	assert exit_code == 0
	mod = decode_module(out.read_bytes())
	assert (mod.imports[0].module, mod.imports[0].name) == ("env", "call")
	assert mod.body_for_export("alpha").instructions[0][1] == 0
	data = json.loads(iface_json.read_text())
	assert data["name"] == "main"
	assert [f["name"] for f in data["functions"]] == ["zeta", "alpha"]


def test_cli_reports_validation_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "namespace main {\n  export function f(a: i32);\n}\n")
	out = tmp_path / "shim.wasm"
	exit_code = main([str(src), "-o", str(out)])
	assert exit_code == 1
	assert not out.exists()
	err = capsys.readouterr().err
	assert f"{src}:2:" in err
	assert "error: missing return type on function 'f'" in err
	assert "[E-RETURN-TYPE]" in err


def test_cli_reports_syntax_errors_as_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, "namespace main { export function f(: I32; }")
	exit_code = main([str(src), "-o", str(tmp_path / "shim.wasm"), "--json"])
	assert exit_code == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	assert payload["diagnostics"]
	first = payload["diagnostics"][0]
	assert first["phase"] == "parser"
	assert first["severity"] == "error"
	assert first["file"] == str(src)
	assert first["line"] == 1


def test_cli_reports_missing_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	exit_code = main([str(tmp_path / "nope.ts"), "-o", str(tmp_path / "shim.wasm"), "--json"])
	assert exit_code == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["diagnostics"][0]["phase"] == "io"


def test_cli_json_success_lists_exports(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	src = _write(tmp_path, ADD_SUB)
	exit_code = main([str(src), "-o", str(tmp_path / "shim.wasm"), "--json"])
	assert exit_code == 0
	payload = json.loads(capsys.readouterr().out)
	assert payload == {"exit_code": 0, "diagnostics": [], "exports": ["add", "sub"]}


def test_cli_rejects_empty_import_label(tmp_path: Path) -> None:
	src = _write(tmp_path, ADD_SUB)
	with pytest.raises(SystemExit) as excinfo:
		main([str(src), "-o", str(tmp_path / "shim.wasm"), "--import-name", ""])
	assert excinfo.value.code == 2
