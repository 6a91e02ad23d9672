# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Decoder for the WebAssembly subset the shim emitter produces.

Tests use this to assert on module structure (section order, entry counts,
export bindings, thunk instructions) instead of comparing raw bytes. Only the
sections and opcodes the emitter uses are understood; anything else raises
`ValueError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from shimgen.codegen.wasm.encoder import (
	FUNC_TYPE_FORM,
	WASM_MAGIC,
	WASM_VERSION,
	ExternalKind,
	Opcode,
	SectionId,
	ValType,
)


class _Cursor:
	def __init__(self, data: bytes, offset: int = 0) -> None:
		self.data = data
		self.offset = offset

	def at_end(self) -> bool:
		return self.offset >= len(self.data)

	def byte(self) -> int:
		if self.offset >= len(self.data):
			raise ValueError("unexpected EOF")
		value = self.data[self.offset]
		self.offset += 1
		return value

	def bytes(self, count: int) -> bytes:
		end = self.offset + count
		if end > len(self.data):
			raise ValueError("unexpected EOF")
		chunk = self.data[self.offset:end]
		self.offset = end
		return chunk

	def u32(self) -> int:
		result = 0
		shift = 0
		while True:
			byte = self.byte()
			result |= (byte & 0x7F) << shift
			if byte & 0x80 == 0:
				return result
			shift += 7

	def s32(self) -> int:
		result = 0
		shift = 0
		while True:
			byte = self.byte()
			result |= (byte & 0x7F) << shift
			shift += 7
			if byte & 0x80 == 0:
				break
		if byte & 0x40:
			result |= -1 << shift
		return result

	def name(self) -> str:
		return self.bytes(self.u32()).decode("utf-8")


@dataclass(frozen=True)
class FuncType:
	params: Tuple[ValType, ...]
	results: Tuple[ValType, ...]


@dataclass(frozen=True)
class Import:
	module: str
	name: str
	kind: ExternalKind
	type_index: int


@dataclass(frozen=True)
class Export:
	name: str
	kind: ExternalKind
	index: int


@dataclass(frozen=True)
class Body:
	locals: Tuple[Tuple[int, ValType], ...]
	instructions: Tuple[Tuple[Opcode, Optional[int]], ...]


@dataclass
class DecodedModule:
	section_ids: List[SectionId] = field(default_factory=list)
	types: List[FuncType] = field(default_factory=list)
	imports: List[Import] = field(default_factory=list)
	functions: List[int] = field(default_factory=list)
	exports: List[Export] = field(default_factory=list)
	bodies: List[Body] = field(default_factory=list)

	def body_for_export(self, name: str) -> Body:
		"""The code body an export resolves to (function index minus imports)."""
		export = next(e for e in self.exports if e.name == name)
		return self.bodies[export.index - len(self.imports)]


def _vector(cur: _Cursor, read_item):
	return [read_item(cur) for _ in range(cur.u32())]


def _read_type(cur: _Cursor) -> FuncType:
	form = cur.byte()
	if form != FUNC_TYPE_FORM:
		raise ValueError(f"unsupported type form 0x{form:02x}")
	params = tuple(_vector(cur, lambda c: ValType(c.byte())))
	results = tuple(_vector(cur, lambda c: ValType(c.byte())))
	return FuncType(params=params, results=results)


def _read_import(cur: _Cursor) -> Import:
	module = cur.name()
	name = cur.name()
	kind = ExternalKind(cur.byte())
	if kind is not ExternalKind.FUNC:
		raise ValueError(f"unsupported import kind {kind.name}")
	return Import(module=module, name=name, kind=kind, type_index=cur.u32())


def _read_export(cur: _Cursor) -> Export:
	name = cur.name()
	kind = ExternalKind(cur.byte())
	return Export(name=name, kind=kind, index=cur.u32())


def _read_body(cur: _Cursor) -> Body:
	size = cur.u32()
	body = _Cursor(cur.bytes(size))
	local_groups = tuple(_vector(body, lambda c: (c.u32(), ValType(c.byte()))))
	instructions: List[Tuple[Opcode, Optional[int]]] = []
	while not body.at_end():
		op = Opcode(body.byte())
		if op is Opcode.I32_CONST:
			instructions.append((op, body.s32()))
		elif op is Opcode.CALL:
			instructions.append((op, body.u32()))
		else:
			instructions.append((op, None))
	return Body(locals=local_groups, instructions=tuple(instructions))


def decode_module(data: bytes) -> DecodedModule:
	if len(data) < 8 or data[:4] != WASM_MAGIC or data[4:8] != WASM_VERSION:
		raise ValueError("invalid wasm header")
	cur = _Cursor(data, 8)
	module = DecodedModule()
	while not cur.at_end():
		sid = SectionId(cur.byte())
		payload = _Cursor(cur.bytes(cur.u32()))
		module.section_ids.append(sid)
		if sid is SectionId.TYPE:
			module.types = _vector(payload, _read_type)
		elif sid is SectionId.IMPORT:
			module.imports = _vector(payload, _read_import)
		elif sid is SectionId.FUNCTION:
			module.functions = _vector(payload, lambda c: c.u32())
		elif sid is SectionId.EXPORT:
			module.exports = _vector(payload, _read_export)
		elif sid is SectionId.CODE:
			module.bodies = _vector(payload, _read_body)
		else:
			raise ValueError(f"unsupported section {sid.name}")
		if not payload.at_end():
			raise ValueError(f"trailing bytes in {sid.name} section")
	return module


__all__ = ["FuncType", "Import", "Export", "Body", "DecodedModule", "decode_module"]
