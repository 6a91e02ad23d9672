# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

A Span carries best-effort file/line/column information plus the raw
front-end object it was derived from (a lark error or a syntax-tree
location), so richer renderers can still recover parser-specific details.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional


def _position(value: Any) -> Optional[int]:
	# lark reports unknown positions as "?" or -1.
	if isinstance(value, int) and value > 0:
		return value
	return None


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw parser loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a syntax-tree location or a lark error.

		If `loc` is already a Span it is returned unchanged, except that a
		missing file is filled in from `file`.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			if loc.file is None and file is not None:
				return replace(loc, file=file)
			return loc
		return cls(
			file=file or getattr(loc, "file", None),
			line=_position(getattr(loc, "line", None)),
			column=_position(getattr(loc, "column", None)),
			end_line=_position(getattr(loc, "end_line", None)),
			end_column=_position(getattr(loc, "end_column", None)),
			raw=loc,
		)

	def format_location(self) -> str:
		"""`line:column`, with `?` for unknown parts."""
		line = self.line if self.line is not None else "?"
		column = self.column if self.column is not None else "?"
		return f"{line}:{column}"


__all__ = ["Span"]
