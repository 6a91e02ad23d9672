# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Interface extraction: syntax tree -> `Interface`.

The accepted input is deliberately narrow:

    namespace main {
      export function add(a: i32, b: i32): I32;
      ...
    }

`extract_interface` is a direct validation pass over the generic tree. Every
node kind outside the subset is rejected explicitly with an `InterfaceError`;
nothing is skipped silently, and the first violation aborts extraction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from shimgen.core.span import Span
from shimgen.errors import InterfaceError, ShimReadError
from shimgen.parser import ast, parse_interface_text

logger = logging.getLogger(__name__)

MAIN_INTERFACE = "main"

# Wire-level value kinds a Param may be lowered to.
VALUE_KINDS = ("I32", "I64", "F32", "F64")

# Parameters are not lowered from their annotations yet: every parameter is
# encoded as this placeholder.
PLACEHOLDER_PARAM_NAME = "c"
PLACEHOLDER_PARAM_KIND = "I32"
RESULT_NAME = "result"


@dataclass(frozen=True)
class Param:
	"""
	One parameter or result value.

	`type` is the lowered wire kind (one of VALUE_KINDS). `declared_type` is
	the annotation as written in the source, kept separately so real
	type-driven lowering can be added without changing this shape.
	"""

	name: str
	type: str
	declared_type: Optional[str] = None

	def __post_init__(self) -> None:
		if self.type not in VALUE_KINDS:
			raise ValueError(f"unknown value kind {self.type!r} for {self.name!r}")

	def to_dict(self) -> Dict[str, Any]:
		return {"name": self.name, "type": self.type, "declared_type": self.declared_type}


@dataclass(frozen=True)
class Signature:
	name: str
	params: Tuple[Param, ...]
	results: Tuple[Param, ...]

	def to_dict(self) -> Dict[str, Any]:
		return {
			"name": self.name,
			"params": [p.to_dict() for p in self.params],
			"results": [r.to_dict() for r in self.results],
		}


@dataclass(frozen=True)
class Interface:
	"""Named, ordered collection of signatures; `functions` keeps declaration order."""

	name: str
	functions: Tuple[Signature, ...]

	def __post_init__(self) -> None:
		if self.name != MAIN_INTERFACE:
			raise ValueError(f"interface must be named {MAIN_INTERFACE!r}, got {self.name!r}")

	def to_dict(self) -> Dict[str, Any]:
		return {"name": self.name, "functions": [f.to_dict() for f in self.functions]}


def _span(node: Any, file: Optional[str]) -> Span:
	return Span.from_loc(getattr(node, "loc", None), file=file)


def _render_type(type_expr: ast.TypeExpr) -> str:
	if isinstance(type_expr, ast.TypeRef):
		if type_expr.args:
			return f"{type_expr.name}<{', '.join(_render_type(a) for a in type_expr.args)}>"
		return type_expr.name
	if isinstance(type_expr, ast.UnionType):
		return " | ".join(_render_type(m) for m in type_expr.members)
	if isinstance(type_expr, ast.ArrayType):
		return f"{_render_type(type_expr.element)}[]"
	if isinstance(type_expr, ast.TupleType):
		return f"[{', '.join(_render_type(e) for e in type_expr.elements)}]"
	if isinstance(type_expr, ast.LiteralType):
		return type_expr.value
	if isinstance(type_expr, ast.ObjectType):
		return "{ " + "; ".join(f"{m.name}: {_render_type(m.type_expr)}" for m in type_expr.members) + " }"
	if isinstance(type_expr, ast.FunctionType):
		params = ", ".join(_render_param(p) for p in type_expr.params)
		return f"({params}) => {_render_type(type_expr.result)}"
	return type_expr.construct


def _render_param(param: ast.Param) -> str:
	name = ("..." if param.rest else "") + param.name + ("?" if param.optional else "")
	return f"{name}: {_render_type(param.type_expr)}" if param.type_expr is not None else name


def _value_kind(name: str) -> Optional[str]:
	upper = name.upper()
	return upper if upper in VALUE_KINDS else None


def _result_param(fn: ast.FunctionDecl, file: Optional[str]) -> Param:
	ret = fn.return_type
	if ret is None:
		raise InterfaceError(
			f"missing return type on function '{fn.name}'",
			code="E-RETURN-TYPE",
			span=_span(fn, file),
		)
	if not isinstance(ret, ast.TypeRef) or not ret.is_bare:
		raise InterfaceError(
			f"illegal return type '{_render_type(ret)}' on function '{fn.name}': "
			f"expected a single named type, found {ret.construct}",
			code="E-RETURN-TYPE",
			span=_span(ret, file),
		)
	kind = _value_kind(ret.name)
	if kind is None:
		raise InterfaceError(
			f"illegal return type '{ret.name}' on function '{fn.name}': "
			f"expected one of {', '.join(VALUE_KINDS)}",
			code="E-RETURN-TYPE",
			span=_span(ret, file),
		)
	return Param(name=RESULT_NAME, type=kind, declared_type=ret.name)


def _signature(fn: ast.FunctionDecl, file: Optional[str]) -> Signature:
	params = tuple(
		Param(
			name=PLACEHOLDER_PARAM_NAME,
			type=PLACEHOLDER_PARAM_KIND,
			declared_type=_render_type(p.type_expr) if p.type_expr is not None else None,
		)
		for p in fn.params
	)
	return Signature(name=fn.name, params=params, results=(_result_param(fn, file),))


def _extract_main(ns: ast.NamespaceDecl, file: Optional[str]) -> Interface:
	signatures: list[Signature] = []
	seen: Dict[str, ast.FunctionDecl] = {}
	for item in ns.body:
		if not (isinstance(item, ast.ExportDecl) and isinstance(item.decl, ast.FunctionDecl)):
			raise InterfaceError(
				f"unsupported {ast.describe(item)} in '{MAIN_INTERFACE}' namespace: "
				"only exported function declarations are allowed",
				code="E-MEMBER",
				span=_span(item, file),
			)
		fn = item.decl
		if fn.name in seen:
			raise InterfaceError(
				f"duplicate exported function '{fn.name}'",
				code="E-DUPLICATE-EXPORT",
				span=_span(fn, file),
			)
		seen[fn.name] = fn
		signatures.append(_signature(fn, file))
	return Interface(name=MAIN_INTERFACE, functions=tuple(signatures))


def extract_interface(program: ast.Program) -> Interface:
	"""
	Validate a parsed interface file and build its `Interface`.

	Raises `InterfaceError` on the first construct outside the accepted
	subset, or when no `main` namespace is declared.
	"""
	file = program.file
	found: Optional[Interface] = None
	for item in program.items:
		if not isinstance(item, ast.NamespaceDecl):
			raise InterfaceError(
				f"unsupported top-level {ast.describe(item)}: "
				f"only a '{MAIN_INTERFACE}' namespace declaration is allowed",
				code="E-TOPLEVEL",
				span=_span(item, file),
			)
		if item.name != MAIN_INTERFACE:
			raise InterfaceError(
				f"could not parse {item.keyword} with name {item.name!r}: "
				f"expected '{MAIN_INTERFACE}'",
				code="E-NAMESPACE",
				span=_span(item, file),
			)
		if found is not None:
			raise InterfaceError(
				f"duplicate '{MAIN_INTERFACE}' {item.keyword} declaration",
				code="E-DUPLICATE-NAMESPACE",
				span=_span(item, file),
			)
		found = _extract_main(item, file)
	if found is None:
		raise InterfaceError(
			f"you need to declare a '{MAIN_INTERFACE}' module",
			code="E-NO-MAIN",
			span=Span(file=file),
		)
	logger.info("extracted interface '%s' with %d function(s)", found.name, len(found.functions))
	return found


def parse_interface_source(source: str, *, file: Optional[str] = None) -> Interface:
	"""Parse and extract in one step; syntax errors surface before validation."""
	return extract_interface(parse_interface_text(source, file=file))


def load_interface(path: Path) -> Interface:
	"""Read an interface file from disk and extract its `Interface`."""
	try:
		source = Path(path).read_text(encoding="utf-8-sig")
	except (OSError, UnicodeDecodeError) as err:
		raise ShimReadError(f"could not read interface file {path}: {err}") from err
	return parse_interface_source(source, file=str(path))


__all__ = [
	"MAIN_INTERFACE",
	"VALUE_KINDS",
	"Param",
	"Signature",
	"Interface",
	"extract_interface",
	"parse_interface_source",
	"load_interface",
]
