# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Interface-file front end.

Wraps the lark grammar in `parser.py` and turns lark's `UnexpectedInput`
errors into `Diagnostic`s. Every syntax diagnostic is logged before a single
`InterfaceSyntaxError` is raised, so callers see one failure while logs keep
the full picture.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken

from shimgen.core.diagnostics import Diagnostic
from shimgen.core.span import Span
from shimgen.errors import InterfaceSyntaxError

from . import ast
from .parser import parse_program, parse_program_recovering

logger = logging.getLogger(__name__)


def _syntax_diagnostic(err: UnexpectedInput, file: Optional[str]) -> Diagnostic:
	notes: List[str] = []
	if isinstance(err, UnexpectedToken):
		if err.token.type == "$END":
			message = "unexpected end of input"
		else:
			message = f"unexpected token {err.token.value!r}"
		if err.expected:
			notes.append("expected one of: " + ", ".join(sorted(err.expected)))
	elif isinstance(err, UnexpectedCharacters):
		message = f"unexpected character {err.char!r}"
	else:
		message = str(err).strip().splitlines()[0]
	return Diagnostic(
		message=message,
		code="E-SYNTAX",
		phase="parser",
		span=Span.from_loc(err, file=file),
		notes=notes,
	)


def parse_interface_text(source: str, *, file: Optional[str] = None) -> ast.Program:
	"""
	Parse interface source into the generic syntax tree.

	Raises `InterfaceSyntaxError` carrying one diagnostic per syntax error.
	"""
	program, errors = parse_program_recovering(source, file=file)
	if not errors:
		assert program is not None
		return program
	diagnostics = [_syntax_diagnostic(err, file) for err in errors]
	for diag in diagnostics:
		logger.warning("%s", diag.format_human(file))
	raise InterfaceSyntaxError("failed to parse interface file", diagnostics)


__all__ = ["ast", "parse_interface_text", "parse_program", "parse_program_recovering"]
