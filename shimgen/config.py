# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_IMPORT_MODULE = "coremod"
DEFAULT_IMPORT_NAME = "__invoke"


class DispatchOrder(Enum):
	"""
	How thunk bodies are laid out relative to the export table.

	DECLARATION: the Code section follows declaration order and each thunk
	pushes its declaration index, while exports are bound in name-sorted
	order. The two only agree when the source is already sorted by name.
	This is the historical layout that existing hosts expect.

	SORTED: the Function/Code sections follow the same name-sorted order as
	the exports and each thunk pushes its sorted position, so an exported name
	always dispatches with its own sorted index.
	"""

	DECLARATION = "declaration"
	SORTED = "sorted"


@dataclass(frozen=True)
class ShimOptions:
	import_module: str = DEFAULT_IMPORT_MODULE
	import_name: str = DEFAULT_IMPORT_NAME
	dispatch_order: DispatchOrder = DispatchOrder.DECLARATION

	def __post_init__(self) -> None:
		if not self.import_module:
			raise ValueError("import module label must not be empty")
		if not self.import_name:
			raise ValueError("import function label must not be empty")


__all__ = ["DEFAULT_IMPORT_MODULE", "DEFAULT_IMPORT_NAME", "DispatchOrder", "ShimOptions"]
