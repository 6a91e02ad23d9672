# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generic syntax tree produced by the interface-file front end.

The node set mirrors the grammar rather than the accepted subset: anything the
grammar parses gets a node here, and the extractor decides what to reject.
Every node kind carries a human-readable `construct` label used in error
messages ("type alias", "exported constant", ...).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Union


@dataclass(frozen=True)
class Located:
	line: int
	column: int


# Type expressions


class TypeExpr:
	construct: ClassVar[str] = "type"
	loc: Optional[Located]


@dataclass
class TypeRef(TypeExpr):
	"""A (possibly qualified, possibly generic) named type reference."""

	construct: ClassVar[str] = "type reference"
	parts: List[str]
	args: List[TypeExpr] = field(default_factory=list)
	loc: Optional[Located] = None

	@property
	def name(self) -> str:
		return ".".join(self.parts)

	@property
	def is_bare(self) -> bool:
		return len(self.parts) == 1 and not self.args


@dataclass
class UnionType(TypeExpr):
	construct: ClassVar[str] = "union type"
	members: List[TypeExpr]
	loc: Optional[Located] = None


@dataclass
class ArrayType(TypeExpr):
	construct: ClassVar[str] = "array type"
	element: TypeExpr
	loc: Optional[Located] = None


@dataclass
class TupleType(TypeExpr):
	construct: ClassVar[str] = "tuple type"
	elements: List[TypeExpr]
	loc: Optional[Located] = None


@dataclass
class Member:
	name: str
	type_expr: TypeExpr
	optional: bool = False
	loc: Optional[Located] = None


@dataclass
class ObjectType(TypeExpr):
	construct: ClassVar[str] = "object type"
	members: List[Member]
	loc: Optional[Located] = None


@dataclass
class LiteralType(TypeExpr):
	construct: ClassVar[str] = "literal type"
	value: str
	loc: Optional[Located] = None


@dataclass
class FunctionType(TypeExpr):
	construct: ClassVar[str] = "function type"
	params: List["Param"]
	result: TypeExpr
	loc: Optional[Located] = None


# Declarations


class Decl:
	construct: ClassVar[str] = "declaration"
	loc: Optional[Located]


@dataclass
class Param:
	name: str
	type_expr: Optional[TypeExpr]
	optional: bool = False
	rest: bool = False
	default: Optional[str] = None
	loc: Optional[Located] = None


@dataclass
class FunctionDecl(Decl):
	construct: ClassVar[str] = "function declaration"
	name: str
	params: List[Param]
	return_type: Optional[TypeExpr]
	loc: Optional[Located] = None
	ambient: bool = False
	type_params: List[str] = field(default_factory=list)
	# Implementation bodies are accepted but not kept.
	has_body: bool = False


@dataclass
class ConstDecl(Decl):
	construct: ClassVar[str] = "constant declaration"
	name: str
	type_expr: Optional[TypeExpr]
	keyword: str = "const"
	loc: Optional[Located] = None


@dataclass
class TypeAlias(Decl):
	construct: ClassVar[str] = "type alias"
	name: str
	type_expr: TypeExpr
	loc: Optional[Located] = None


@dataclass
class InterfaceDecl(Decl):
	construct: ClassVar[str] = "interface declaration"
	name: str
	members: List[Member]
	loc: Optional[Located] = None


@dataclass
class NamespaceDecl(Decl):
	"""
	`namespace X { ... }`, `module X { ... }` or `module "X" { ... }`.

	`quoted` records whether the name was written as a string literal; the
	name itself is stored unquoted either way.
	"""

	construct: ClassVar[str] = "namespace declaration"
	name: str
	body: List["Item"]
	keyword: str = "namespace"
	quoted: bool = False
	ambient: bool = False
	loc: Optional[Located] = None


@dataclass
class ExportDecl(Decl):
	construct: ClassVar[str] = "export declaration"
	decl: Decl
	loc: Optional[Located] = None

	def describe(self) -> str:
		inner = self.decl.construct.replace(" declaration", "")
		return f"exported {inner}"


Item = Union[NamespaceDecl, ExportDecl, FunctionDecl, ConstDecl, TypeAlias, InterfaceDecl]


@dataclass
class Program:
	items: List[Item]
	file: Optional[str] = None


def describe(node: object) -> str:
	"""Human-readable construct label for error messages."""
	if isinstance(node, ExportDecl):
		return node.describe()
	return getattr(node, "construct", type(node).__name__)


__all__ = [
	"Located",
	"TypeExpr",
	"TypeRef",
	"UnionType",
	"ArrayType",
	"TupleType",
	"Member",
	"ObjectType",
	"LiteralType",
	"FunctionType",
	"Decl",
	"Param",
	"FunctionDecl",
	"ConstDecl",
	"TypeAlias",
	"InterfaceDecl",
	"NamespaceDecl",
	"ExportDecl",
	"Item",
	"Program",
	"describe",
]
