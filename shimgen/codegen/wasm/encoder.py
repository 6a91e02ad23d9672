# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Minimal WebAssembly binary encoder.

Covers exactly what the shim needs: function types, function imports,
function/export declarations and code bodies built from a handful of
instructions. Sections are accumulated as builder objects and serialised by
`Module`, which also enforces the format's section ordering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple

WASM_MAGIC = b"\x00asm"
WASM_VERSION = b"\x01\x00\x00\x00"

FUNC_TYPE_FORM = 0x60

_U32_MAX = 0xFFFFFFFF
_S32_MIN = -(1 << 31)
_S32_MAX = (1 << 31) - 1


class SectionId(IntEnum):
	CUSTOM = 0
	TYPE = 1
	IMPORT = 2
	FUNCTION = 3
	TABLE = 4
	MEMORY = 5
	GLOBAL = 6
	EXPORT = 7
	START = 8
	ELEMENT = 9
	CODE = 10
	DATA = 11


class ValType(IntEnum):
	I32 = 0x7F
	I64 = 0x7E
	F32 = 0x7D
	F64 = 0x7C


class ExternalKind(IntEnum):
	FUNC = 0x00
	TABLE = 0x01
	MEMORY = 0x02
	GLOBAL = 0x03


class Opcode(IntEnum):
	END = 0x0B
	CALL = 0x10
	I32_CONST = 0x41


def encode_u32(value: int) -> bytes:
	"""Unsigned LEB128 for a u32."""
	if not 0 <= value <= _U32_MAX:
		raise ValueError(f"u32 out of range: {value}")
	parts: list[int] = []
	while True:
		byte = value & 0x7F
		value >>= 7
		if value:
			parts.append(byte | 0x80)
		else:
			parts.append(byte)
			break
	return bytes(parts)


def encode_s32(value: int) -> bytes:
	"""Signed LEB128 for an i32 immediate."""
	if not _S32_MIN <= value <= _S32_MAX:
		raise ValueError(f"i32 out of range: {value}")
	parts: list[int] = []
	while True:
		byte = value & 0x7F
		value >>= 7  # arithmetic shift keeps the sign
		done = (value == 0 and not byte & 0x40) or (value == -1 and byte & 0x40)
		if done:
			parts.append(byte)
			break
		parts.append(byte | 0x80)
	return bytes(parts)


def encode_name(value: str) -> bytes:
	raw = value.encode("utf-8")
	return encode_u32(len(raw)) + raw


def encode_vector(items: Sequence[bytes]) -> bytes:
	return encode_u32(len(items)) + b"".join(items)


@dataclass(frozen=True)
class Instruction:
	opcode: Opcode
	immediate: Optional[int] = None

	def encode(self) -> bytes:
		op = bytes([self.opcode])
		if self.opcode is Opcode.I32_CONST:
			if self.immediate is None:
				raise ValueError("i32.const requires an immediate")
			return op + encode_s32(self.immediate)
		if self.opcode is Opcode.CALL:
			if self.immediate is None:
				raise ValueError("call requires a function index")
			return op + encode_u32(self.immediate)
		return op


def i32_const(value: int) -> Instruction:
	return Instruction(Opcode.I32_CONST, value)


def call(func_index: int) -> Instruction:
	return Instruction(Opcode.CALL, func_index)


def end() -> Instruction:
	return Instruction(Opcode.END)


class Section:
	"""A section builder: subclasses provide the id and the entry payloads."""

	id: SectionId

	def entries(self) -> List[bytes]:
		raise NotImplementedError

	def __len__(self) -> int:
		return len(self.entries())

	def payload(self) -> bytes:
		return encode_vector(self.entries())

	def encode(self) -> bytes:
		body = self.payload()
		return bytes([self.id]) + encode_u32(len(body)) + body


class TypeSection(Section):
	id = SectionId.TYPE

	def __init__(self) -> None:
		self._types: List[Tuple[Tuple[ValType, ...], Tuple[ValType, ...]]] = []

	def function(self, params: Sequence[ValType], results: Sequence[ValType]) -> int:
		"""Declare a function type and return its type index."""
		self._types.append((tuple(params), tuple(results)))
		return len(self._types) - 1

	def entries(self) -> List[bytes]:
		return [
			bytes([FUNC_TYPE_FORM])
			+ encode_vector([bytes([p]) for p in params])
			+ encode_vector([bytes([r]) for r in results])
			for params, results in self._types
		]


class ImportSection(Section):
	id = SectionId.IMPORT

	def __init__(self) -> None:
		self._imports: List[Tuple[str, str, int]] = []

	def import_function(self, module: str, name: str, type_index: int) -> None:
		self._imports.append((module, name, type_index))

	def entries(self) -> List[bytes]:
		return [
			encode_name(module) + encode_name(name) + bytes([ExternalKind.FUNC]) + encode_u32(type_index)
			for module, name, type_index in self._imports
		]


class FunctionSection(Section):
	id = SectionId.FUNCTION

	def __init__(self) -> None:
		self._type_indices: List[int] = []

	def function(self, type_index: int) -> None:
		self._type_indices.append(type_index)

	def entries(self) -> List[bytes]:
		return [encode_u32(idx) for idx in self._type_indices]


class ExportSection(Section):
	id = SectionId.EXPORT

	def __init__(self) -> None:
		self._exports: List[Tuple[str, ExternalKind, int]] = []

	def export(self, name: str, kind: ExternalKind, index: int) -> None:
		if any(existing == name for existing, _, _ in self._exports):
			raise ValueError(f"duplicate export name {name!r}")
		self._exports.append((name, kind, index))

	def entries(self) -> List[bytes]:
		return [encode_name(name) + bytes([kind]) + encode_u32(index) for name, kind, index in self._exports]


@dataclass
class Function:
	"""A code-section function body; `locals` are (count, type) groups."""

	locals: List[Tuple[int, ValType]] = field(default_factory=list)
	instructions: List[Instruction] = field(default_factory=list)

	def instruction(self, instr: Instruction) -> "Function":
		self.instructions.append(instr)
		return self

	def encode(self) -> bytes:
		body = encode_vector([encode_u32(count) + bytes([ty]) for count, ty in self.locals])
		body += b"".join(instr.encode() for instr in self.instructions)
		return encode_u32(len(body)) + body


class CodeSection(Section):
	id = SectionId.CODE

	def __init__(self) -> None:
		self._bodies: List[bytes] = []

	def function(self, func: Function) -> None:
		self._bodies.append(func.encode())

	def entries(self) -> List[bytes]:
		return list(self._bodies)


class Module:
	"""
	Accumulates encoded sections in order.

	Non-custom sections must appear in strictly increasing id order and at
	most once; `section()` raises `ValueError` otherwise.
	"""

	def __init__(self) -> None:
		self._sections: List[Tuple[SectionId, bytes]] = []
		self._last_id = SectionId.CUSTOM

	def section(self, section: Section) -> "Module":
		sid = section.id
		if sid is not SectionId.CUSTOM:
			if sid <= self._last_id:
				raise ValueError(f"section {sid.name} out of order after {self._last_id.name}")
			self._last_id = sid
		self._sections.append((sid, section.encode()))
		return self

	@property
	def section_ids(self) -> List[SectionId]:
		return [sid for sid, _ in self._sections]

	@property
	def section_sizes(self) -> List[Tuple[SectionId, int]]:
		"""Encoded size of each section, header included."""
		return [(sid, len(encoded)) for sid, encoded in self._sections]

	def finish(self) -> bytes:
		return WASM_MAGIC + WASM_VERSION + b"".join(encoded for _, encoded in self._sections)


__all__ = [
	"WASM_MAGIC",
	"WASM_VERSION",
	"SectionId",
	"ValType",
	"ExternalKind",
	"Opcode",
	"encode_u32",
	"encode_s32",
	"encode_name",
	"encode_vector",
	"Instruction",
	"i32_const",
	"call",
	"end",
	"Section",
	"TypeSection",
	"ImportSection",
	"FunctionSection",
	"ExportSection",
	"Function",
	"CodeSection",
	"Module",
]
