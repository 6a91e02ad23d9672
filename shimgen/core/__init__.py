# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Shared compiler plumbing: source spans and diagnostics."""

from .diagnostics import Diagnostic
from .span import Span

__all__ = ["Diagnostic", "Span"]
