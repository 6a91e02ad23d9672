# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import ast as py_ast
from pathlib import Path
from typing import List, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from .ast import (
	ArrayType,
	ConstDecl,
	ExportDecl,
	FunctionDecl,
	FunctionType,
	InterfaceDecl,
	Item,
	LiteralType,
	Located,
	Member,
	NamespaceDecl,
	ObjectType,
	Param,
	Program,
	TupleType,
	TypeAlias,
	TypeExpr,
	TypeRef,
	UnionType,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text(encoding="utf-8")

# Upper bound on collected syntax errors for one file; recovery past this
# point rarely produces anything but noise.
MAX_SYNTAX_ERRORS = 20

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="program",
	propagate_positions=True,
	maybe_placeholders=False,
)


def parse_program(source: str, *, file: Optional[str] = None) -> Program:
	"""Parse interface source; raises lark's `UnexpectedInput` on the first error."""
	tree = _PARSER.parse(source)
	return _build_program(tree, file)


def parse_program_recovering(
	source: str,
	*,
	file: Optional[str] = None,
	max_errors: int = MAX_SYNTAX_ERRORS,
) -> Tuple[Optional[Program], List[UnexpectedInput]]:
	"""
	Parse interface source, collecting every syntax error instead of stopping
	at the first one.

	Returns `(program, [])` on success and `(None, errors)` otherwise. The tree
	produced after recovery is never returned: recovery drops tokens, so it
	does not describe the input faithfully.
	"""
	errors: List[UnexpectedInput] = []
	seen: set[Tuple[object, object]] = set()
	attempts = 0

	def _record(err: UnexpectedInput) -> None:
		# Recovery can report the same position more than once (notably at EOF).
		key = (getattr(err, "line", None), getattr(err, "column", None))
		if key in seen:
			return
		seen.add(key)
		errors.append(err)

	def _on_error(err: UnexpectedInput) -> bool:
		nonlocal attempts
		attempts += 1
		_record(err)
		if getattr(err, "interactive_parser", None) is None:
			return False
		return attempts < max_errors and len(errors) < max_errors

	try:
		tree = _PARSER.parse(source, on_error=_on_error)
	except UnexpectedInput as err:
		_record(err)
		return None, errors
	if errors:
		return None, errors
	return _build_program(tree, file), []


def _name(tree: Tree) -> str:
	return tree.data if isinstance(tree.data, str) else tree.data.value


def _loc(node: Tree | Token) -> Optional[Located]:
	if isinstance(node, Token):
		if node.line is None:
			return None
		return Located(line=node.line, column=node.column)
	meta = node.meta
	if getattr(meta, "empty", True):
		return None
	return Located(line=meta.line, column=meta.column)


def _tokens(tree: Tree) -> List[Token]:
	return [child for child in tree.children if isinstance(child, Token)]


def _subtrees(tree: Tree) -> List[Tree]:
	return [child for child in tree.children if isinstance(child, Tree)]


def _find_token(tree: Tree, *types: str) -> Optional[Token]:
	return next((tok for tok in _tokens(tree) if tok.type in types), None)


def _find_tree(tree: Tree, name: str) -> Optional[Tree]:
	return next((child for child in _subtrees(tree) if _name(child) == name), None)


def _unquote(tok: Token) -> str:
	# Single- and double-quoted literals share Python's escape rules closely
	# enough for identifiers and labels.
	return py_ast.literal_eval(tok.value)


def _build_program(tree: Tree, file: Optional[str]) -> Program:
	return Program(items=[_build_item(child) for child in _subtrees(tree)], file=file)


def _build_item(tree: Tree) -> Item:
	kind = _name(tree)
	if kind == "namespace_decl":
		return _build_namespace(tree)
	if kind == "export_decl":
		inner = _subtrees(tree)[0]
		return ExportDecl(decl=_build_item(inner), loc=_loc(tree))
	if kind == "function_decl":
		return _build_function(tree)
	if kind == "const_decl":
		return _build_const(tree)
	if kind == "type_alias":
		return _build_type_alias(tree)
	if kind == "interface_decl":
		return _build_interface(tree)
	raise TypeError(f"unexpected item node {kind}")


def _build_namespace(tree: Tree) -> NamespaceDecl:
	keyword = _find_token(tree, "NAMESPACE", "MODULE")
	assert keyword is not None
	name_node = next(child for child in _subtrees(tree) if _name(child) in ("ident_name", "string_name"))
	name_tok = _tokens(name_node)[0]
	quoted = _name(name_node) == "string_name"
	body = [_build_item(child) for child in _subtrees(tree) if child is not name_node]
	return NamespaceDecl(
		name=_unquote(name_tok) if quoted else name_tok.value,
		body=body,
		keyword=keyword.value,
		quoted=quoted,
		ambient=_find_token(tree, "DECLARE") is not None,
		loc=_loc(tree),
	)


def _build_function(tree: Tree) -> FunctionDecl:
	name_tok = _find_token(tree, "NAME")
	assert name_tok is not None
	params_node = _find_tree(tree, "params")
	params = [_build_param(p) for p in _subtrees(params_node)] if params_node is not None else []
	ret_node = _find_tree(tree, "return_annotation")
	return_type = _build_type(_subtrees(ret_node)[0]) if ret_node is not None else None
	tparams_node = _find_tree(tree, "type_params")
	type_params = [_tokens(tp)[0].value for tp in _subtrees(tparams_node)] if tparams_node is not None else []
	return FunctionDecl(
		name=name_tok.value,
		params=params,
		return_type=return_type,
		loc=_loc(tree),
		ambient=_find_token(tree, "DECLARE") is not None,
		type_params=type_params,
		has_body=_find_tree(tree, "block") is not None,
	)


def _build_param(tree: Tree) -> Param:
	name_tok = _find_token(tree, "NAME")
	assert name_tok is not None
	# The default, if any, is the last token and never the first NAME.
	tail = _tokens(tree)[-1]
	default = tail.value if tail is not name_tok and tail.type != "OPTIONAL" else None
	types = _subtrees(tree)
	return Param(
		name=name_tok.value,
		type_expr=_build_type(types[0]) if types else None,
		optional=_find_token(tree, "OPTIONAL") is not None,
		rest=_find_token(tree, "REST") is not None,
		default=default,
		loc=_loc(tree),
	)


def _build_const(tree: Tree) -> ConstDecl:
	keyword = _find_token(tree, "CONST", "LET")
	assert keyword is not None
	name_tok = _find_token(tree, "NAME")
	assert name_tok is not None
	types = _subtrees(tree)
	return ConstDecl(
		name=name_tok.value,
		type_expr=_build_type(types[0]) if types else None,
		keyword=keyword.value,
		loc=_loc(tree),
	)


def _build_type_alias(tree: Tree) -> TypeAlias:
	name_tok = _find_token(tree, "NAME")
	assert name_tok is not None
	return TypeAlias(name=name_tok.value, type_expr=_build_type(_subtrees(tree)[0]), loc=_loc(tree))


def _build_interface(tree: Tree) -> InterfaceDecl:
	name_tok = _find_token(tree, "NAME")
	assert name_tok is not None
	return InterfaceDecl(name=name_tok.value, members=_build_members(_find_tree(tree, "members")), loc=_loc(tree))


def _build_members(tree: Optional[Tree]) -> List[Member]:
	if tree is None:
		return []
	members: List[Member] = []
	for node in _subtrees(tree):
		name_tok = _find_token(node, "NAME")
		assert name_tok is not None
		members.append(
			Member(
				name=name_tok.value,
				type_expr=_build_type(_subtrees(node)[0]),
				optional=_find_token(node, "OPTIONAL") is not None,
				loc=_loc(node),
			)
		)
	return members


def _build_type(tree: Tree) -> TypeExpr:
	kind = _name(tree)
	loc = _loc(tree)
	if kind == "type_ref":
		qualified = _find_tree(tree, "qualified_name")
		assert qualified is not None
		args_node = _find_tree(tree, "type_args")
		args = [_build_type(arg) for arg in _subtrees(args_node)] if args_node is not None else []
		return TypeRef(parts=[tok.value for tok in _tokens(qualified)], args=args, loc=loc)
	if kind == "union_type":
		return UnionType(members=[_build_type(m) for m in _subtrees(tree)], loc=loc)
	if kind == "array_type":
		return ArrayType(element=_build_type(_subtrees(tree)[0]), loc=loc)
	if kind == "tuple_type":
		return TupleType(elements=[_build_type(e) for e in _subtrees(tree)], loc=loc)
	if kind == "object_type":
		return ObjectType(members=_build_members(_find_tree(tree, "members")), loc=loc)
	if kind == "literal_type":
		return LiteralType(value=_tokens(tree)[0].value, loc=loc)
	if kind == "function_type":
		params_node = _find_tree(tree, "params")
		params = [_build_param(p) for p in _subtrees(params_node)] if params_node is not None else []
		return FunctionType(params=params, result=_build_type(_subtrees(tree)[-1]), loc=loc)
	raise TypeError(f"unexpected type node {kind}")


__all__ = ["MAX_SYNTAX_ERRORS", "parse_program", "parse_program_recovering"]
