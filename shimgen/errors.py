# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Error hierarchy for the shim compiler.

Every failure is fatal to the invocation that raised it. Errors carry the
diagnostics that explain them so the driver can render the same failure as
human-readable lines or as JSON.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from shimgen.core.diagnostics import Diagnostic
from shimgen.core.span import Span


class ShimError(Exception):
	"""Base class for every shim compiler failure."""

	phase = "shim"

	def __init__(self, message: str, diagnostics: Optional[Iterable[Diagnostic]] = None) -> None:
		super().__init__(message)
		self.message = message
		self.diagnostics: List[Diagnostic] = list(diagnostics or [])
		if not self.diagnostics:
			self.diagnostics.append(Diagnostic(message=message, phase=self.phase))

	@property
	def code(self) -> str | None:
		return self.diagnostics[0].code

	def __str__(self) -> str:
		return self.format_human()

	def format_human(self) -> str:
		head = self.diagnostics[0]
		if len(self.diagnostics) == 1 and head.message == self.message:
			loc = ""
			if head.span.line is not None:
				loc = f" at {head.span.format_location()}"
			prefix = f"[{head.code}] " if head.code else ""
			return f"{prefix}{self.message}{loc}"
		return f"{self.message} ({len(self.diagnostics)} diagnostic(s))"


class InterfaceSyntaxError(ShimError):
	"""The front end could not parse the interface file."""

	phase = "parser"


class InterfaceError(ShimError):
	"""The interface file parsed but falls outside the accepted subset."""

	phase = "interface"

	def __init__(self, message: str, *, code: str, span: Span | None = None) -> None:
		super().__init__(
			message,
			[Diagnostic(message=message, code=code, phase=self.phase, span=span or Span())],
		)


class ShimReadError(ShimError):
	"""The interface file could not be read."""

	phase = "io"


class ShimWriteError(ShimError):
	"""The output module could not be written."""

	phase = "io"


__all__ = [
	"ShimError",
	"InterfaceSyntaxError",
	"InterfaceError",
	"ShimReadError",
	"ShimWriteError",
]
