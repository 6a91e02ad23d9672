# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import logging

import pytest
from lark import UnexpectedInput

from shimgen.errors import InterfaceSyntaxError
from shimgen.parser import ast, parse_interface_text
from shimgen.parser import parser as p


def test_parse_namespace_with_exported_functions() -> None:
	prog = p.parse_program(
		"""
namespace main {
  export function add(a: i32, b: i32): I32;
  export function sub(a: i32, b: i32): I32;
}
"""
	)
	assert len(prog.items) == 1
	ns = prog.items[0]
	assert isinstance(ns, ast.NamespaceDecl)
	assert ns.name == "main"
	assert ns.keyword == "namespace"
	assert not ns.quoted
	assert [type(i) for i in ns.body] == [ast.ExportDecl, ast.ExportDecl]
	add = ns.body[0].decl
	assert isinstance(add, ast.FunctionDecl)
	assert add.name == "add"
	assert [param.name for param in add.params] == ["a", "b"]
	assert isinstance(add.return_type, ast.TypeRef)
	assert add.return_type.name == "I32"
	assert add.return_type.is_bare


def test_parse_records_locations() -> None:
	prog = p.parse_program("namespace main {\n  export function f(): I32;\n}\n")
	ns = prog.items[0]
	assert ns.loc == ast.Located(line=1, column=1)
	assert ns.body[0].loc.line == 2


def test_parse_quoted_module_name_and_declare() -> None:
	prog = p.parse_program('declare module "main" { export function f(): I32; }')
	ns = prog.items[0]
	assert isinstance(ns, ast.NamespaceDecl)
	assert ns.name == "main"
	assert ns.quoted
	assert ns.ambient
	assert ns.keyword == "module"


def test_parse_semicolons_and_comments_are_optional_noise() -> None:
	prog = p.parse_program(
		"""
// leading comment
namespace main {
  /* block
     comment */
  export function a(): I32
  export function b(x?: i64,): I32;
}
"""
	)
	fns = [item.decl for item in prog.items[0].body]
	assert [fn.name for fn in fns] == ["a", "b"]
	assert fns[1].params[0].optional


def test_parse_wider_constructs_for_later_rejection() -> None:
	prog = p.parse_program(
		"""
type Pair = [I32, I32];
const limit: I32 = 10;
interface Point { x: I32; y?: I32 }
function helper(): I32;
namespace main {
  export const k = 1;
  export type T = I32 | I64;
  namespace inner {}
}
"""
	)
	kinds = [type(i) for i in prog.items]
	assert kinds == [ast.TypeAlias, ast.ConstDecl, ast.InterfaceDecl, ast.FunctionDecl, ast.NamespaceDecl]
	body = prog.items[-1].body
	assert [ast.describe(i) for i in body] == ["exported constant", "exported type alias", "namespace declaration"]


@pytest.mark.parametrize(
	"annotation, expected_type",
	[
		("I32 | I64", ast.UnionType),
		("Promise<I32>", ast.TypeRef),
		("I32[]", ast.ArrayType),
		("[I32, I64]", ast.TupleType),
		("{ a: I32 }", ast.ObjectType),
		('"ok"', ast.LiteralType),
		("wasm.I32", ast.TypeRef),
		("(x: i32) => void", ast.FunctionType),
	],
)
def test_parse_return_type_shapes(annotation: str, expected_type: type) -> None:
	prog = p.parse_program(f"namespace main {{ export function f(): {annotation}; }}")
	ret = prog.items[0].body[0].decl.return_type
	assert isinstance(ret, expected_type)


def test_generic_and_qualified_refs_are_not_bare() -> None:
	prog = p.parse_program("namespace main { export function f(): Promise<I32>; export function g(): a.B; }")
	f_ret, g_ret = (item.decl.return_type for item in prog.items[0].body)
	assert not f_ret.is_bare
	assert f_ret.args[0].name == "I32"
	assert not g_ret.is_bare
	assert g_ret.name == "a.B"


def test_missing_brace_is_a_syntax_error() -> None:
	with pytest.raises(UnexpectedInput):
		p.parse_program("namespace main { export function f(): I32;")


def test_recovering_parse_collects_multiple_errors() -> None:
	program, errors = p.parse_program_recovering(
		"""
namespace main {
  export function f(: I32;
  export function g() I32 %;
}
"""
	)
	assert program is None
	assert len(errors) >= 2


def test_recovering_parse_success_returns_program() -> None:
	program, errors = p.parse_program_recovering("namespace main {}", file="x.d.ts")
	assert errors == []
	assert program is not None
	assert program.file == "x.d.ts"


def test_syntax_errors_are_logged_then_raised(caplog: pytest.LogCaptureFixture) -> None:
	caplog.set_level(logging.WARNING, logger="shimgen.parser")
	with pytest.raises(InterfaceSyntaxError) as excinfo:
		parse_interface_text("namespace main { export function f(: I32; }", file="bad.ts")
	err = excinfo.value
	assert err.message == "failed to parse interface file"
	assert err.diagnostics
	assert all(d.phase == "parser" and d.code == "E-SYNTAX" for d in err.diagnostics)
	assert all(d.span.file == "bad.ts" for d in err.diagnostics)
	assert err.diagnostics[0].span.line == 1
	warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
	assert len(warnings) == len(err.diagnostics)
	assert "bad.ts:1:" in warnings[0].getMessage()


def test_parse_parameter_forms() -> None:
	prog = p.parse_program(
		"namespace main { export function f(...rest: i32[], opt?: i64, n: i32 = 1, flag = true, cb: (x: i32) => void): I32; }"
	)
	rest, opt, n, flag, cb = prog.items[0].body[0].decl.params
	assert rest.rest and rest.name == "rest"
	assert isinstance(rest.type_expr, ast.ArrayType)
	assert opt.optional and opt.default is None
	assert n.default == "1"
	assert flag.type_expr is None and flag.default == "true"
	assert isinstance(cb.type_expr, ast.FunctionType)
	assert [q.name for q in cb.type_expr.params] == ["x"]
	assert cb.type_expr.result.name == "void"


def test_parse_type_params() -> None:
	prog = p.parse_program("namespace main { export function f<T, U extends I32 = I32>(a: T): I32; }")
	fn = prog.items[0].body[0].decl
	assert fn.type_params == ["T", "U"]
	assert fn.params[0].type_expr.name == "T"


def test_parse_implementation_body_is_opaque() -> None:
	prog = p.parse_program(
		"""
namespace main {
  export function f(): I32 {
    if (x) { return "}"; }
    return 0;
  }
  export function g(): I32;
}
"""
	)
	f, g = (item.decl for item in prog.items[0].body)
	assert f.has_body
	assert not g.has_body
	assert f.return_type.name == "I32"


def test_unbalanced_body_is_a_syntax_error() -> None:
	with pytest.raises(UnexpectedInput):
		p.parse_program("namespace main { export function f(): I32 { return 0; }")
