# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the parser, extractor and writer.

A diagnostic is a message plus a span and optional metadata. The driver
renders them either as `file:line:column: severity: message` lines or as
JSON objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a compiler diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Pipeline phase that produced the diagnostic: "parser", "interface" or "io".
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Span() denotes an unknown location.
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def format_human(self, default_file: Optional[str] = None) -> str:
		file = self.span.file or default_file or "<input>"
		text = f"{file}:{self.span.format_location()}: {self.severity}: {self.message}"
		if self.code:
			text += f" [{self.code}]"
		return text

	def to_json(self, default_file: Optional[str] = None) -> dict[str, Any]:
		"""Render to a structured JSON-friendly dict."""
		return {
			"phase": self.phase,
			"message": self.message,
			"severity": self.severity,
			"code": self.code,
			"file": self.span.file or default_file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


__all__ = ["Diagnostic"]
