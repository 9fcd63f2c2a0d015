# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Parsed shape of an inline call expression."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Union


class LiteralKind(Enum):
	STRING = auto()
	INT = auto()


@dataclass(frozen=True)
class Literal:
	"""One argument literal. `value` is already decoded (quotes stripped, int parsed)."""

	kind: LiteralKind
	value: Union[str, int]
	text: str
	column: Optional[int] = None


@dataclass(frozen=True)
class CallExpr:
	"""`{{ args... | func }}`"""

	func: str
	args: List[Literal] = field(default_factory=list)


__all__ = ["LiteralKind", "Literal", "CallExpr"]
