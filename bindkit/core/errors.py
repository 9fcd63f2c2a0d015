# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structured errors raised by every bindkit entry point.

There is one exception type, `BindError`, carrying a stable `ErrorCode` plus
optional context (offending kind, argument index, access path). Callers branch
on `code`; `format_human()`/`to_dict()` serve CLI and log output.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from bindkit.core.kinds import Kind


class ErrorCode(Enum):
	# structural
	NON_POINTER = "non-pointer"
	NON_SLICE = "non-slice"
	NON_MAP = "non-map"
	NON_STRUCT = "non-struct"
	NIL_POINTER = "nil-pointer"
	NIL_DEREFERENCE = "nil-dereference"
	# access
	NOT_SETTABLE = "not-settable"
	UNKNOWN_FIELD = "unknown-field"
	INDEX_OUT_OF_RANGE = "index-out-of-range"
	# shape / type
	TYPE_MISMATCH = "type-mismatch"
	KEY_TYPE_MISMATCH = "key-type-mismatch"
	VALUE_TYPE_MISMATCH = "value-type-mismatch"
	ELEMENT_TYPE_MISMATCH = "element-type-mismatch"
	ARITY_MISMATCH = "arity-mismatch"
	INVALID_RESULT_SHAPE = "invalid-result-shape"
	UNKNOWN_FUNCTION = "unknown-function"
	UNSUPPORTED_KIND = "unsupported-kind"
	# numeric
	OVERFLOW = "overflow"
	# syntax
	PARSE_ERROR = "parse-error"


@dataclass(eq=False)
class BindError(Exception):
	"""
	A structured, serializable binding error.

	`kind` names the target kind for OVERFLOW/UNSUPPORTED_KIND, `index` the
	argument or entry position for positional failures, `path` the accessor
	path when navigation failed part-way.
	"""

	code: ErrorCode
	message: str
	kind: Optional[Kind] = None
	index: Optional[int] = None
	path: Optional[str] = None

	def __post_init__(self) -> None:
		super().__init__(self.message)

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"code": self.code.value,
			"message": self.message,
			"kind": self.kind.name if self.kind is not None else None,
			"index": self.index,
			"path": self.path,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.code.value}] {self.message}"]
		if self.kind is not None:
			parts.append(f"kind={self.kind.display()}")
		if self.index is not None:
			parts.append(f"index={self.index}")
		if self.path:
			parts.append(f"path={self.path}")
		return " ".join(parts)


def overflow(kind: Kind, literal: object) -> BindError:
	"""Build the OVERFLOW error for a literal that does not fit `kind`."""
	return BindError(ErrorCode.OVERFLOW, f"value {literal!r} overflows {kind.display()}", kind=kind)


__all__ = ["ErrorCode", "BindError", "overflow"]
