# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Closed kind universe and the kind-level conversion table.

Every TypeDescriptor carries exactly one `Kind`. The conversion table below is
total: `conversion(src, dst)` has a defined answer for every pair of kinds, so
the decoder and the invoker never fall through to an implicit rule.

The fixed-width numeric aliases (`Int8`, `Uint32`, `Float32`, ...) are
`typing.Annotated` wrappers over `int`/`float`; annotating a dataclass field or
function parameter with one of them pins the kind used by `describe_type`.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Annotated, Dict, FrozenSet, Tuple


class Kind(Enum):
	"""Closed set of shapes understood by the binding engine."""

	BOOL = auto()
	INT8 = auto()
	INT16 = auto()
	INT32 = auto()
	INT64 = auto()
	UINT8 = auto()
	UINT16 = auto()
	UINT32 = auto()
	UINT64 = auto()
	FLOAT32 = auto()
	FLOAT64 = auto()
	STRING = auto()
	SLICE = auto()
	MAP = auto()
	STRUCT = auto()
	POINTER = auto()
	INTERFACE = auto()
	FUNC = auto()

	def display(self) -> str:
		return _DISPLAY_NAMES[self]


_DISPLAY_NAMES: Dict[Kind, str] = {
	Kind.BOOL: "bool",
	Kind.INT8: "int8",
	Kind.INT16: "int16",
	Kind.INT32: "int32",
	Kind.INT64: "int64",
	Kind.UINT8: "uint8",
	Kind.UINT16: "uint16",
	Kind.UINT32: "uint32",
	Kind.UINT64: "uint64",
	Kind.FLOAT32: "float32",
	Kind.FLOAT64: "float64",
	Kind.STRING: "string",
	Kind.SLICE: "slice",
	Kind.MAP: "map",
	Kind.STRUCT: "struct",
	Kind.POINTER: "ptr",
	Kind.INTERFACE: "interface",
	Kind.FUNC: "func",
}

SIGNED_KINDS: FrozenSet[Kind] = frozenset({Kind.INT8, Kind.INT16, Kind.INT32, Kind.INT64})
UNSIGNED_KINDS: FrozenSet[Kind] = frozenset({Kind.UINT8, Kind.UINT16, Kind.UINT32, Kind.UINT64})
INTEGER_KINDS: FrozenSet[Kind] = SIGNED_KINDS | UNSIGNED_KINDS
FLOAT_KINDS: FrozenSet[Kind] = frozenset({Kind.FLOAT32, Kind.FLOAT64})
NUMERIC_KINDS: FrozenSet[Kind] = INTEGER_KINDS | FLOAT_KINDS
SCALAR_KINDS: FrozenSet[Kind] = NUMERIC_KINDS | {Kind.BOOL, Kind.STRING}
# Kinds whose identity is decided by the full descriptor, not the kind alone.
COMPOSITE_KINDS: FrozenSet[Kind] = frozenset({Kind.SLICE, Kind.MAP, Kind.STRUCT, Kind.POINTER, Kind.FUNC})

BIT_WIDTH: Dict[Kind, int] = {
	Kind.INT8: 8,
	Kind.INT16: 16,
	Kind.INT32: 32,
	Kind.INT64: 64,
	Kind.UINT8: 8,
	Kind.UINT16: 16,
	Kind.UINT32: 32,
	Kind.UINT64: 64,
	Kind.FLOAT32: 32,
	Kind.FLOAT64: 64,
}

MAX_FLOAT32 = 3.40282346638528859811704183484516925440e38
MAX_FLOAT64 = 1.79769313486231570814527423731704356798070e308


def int_range(kind: Kind) -> Tuple[int, int]:
	"""Return the inclusive (min, max) range representable by an integer kind."""
	bits = BIT_WIDTH[kind]
	if kind in SIGNED_KINDS:
		return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
	if kind in UNSIGNED_KINDS:
		return 0, (1 << bits) - 1
	raise ValueError(f"int_range called on non-integer kind {kind.name}")


def float_max(kind: Kind) -> float:
	"""Return the largest finite magnitude representable by a float kind."""
	if kind is Kind.FLOAT32:
		return MAX_FLOAT32
	if kind is Kind.FLOAT64:
		return MAX_FLOAT64
	raise ValueError(f"float_max called on non-float kind {kind.name}")


class Conversion(Enum):
	"""How a value of one kind may become a value of another kind."""

	IDENTICAL = auto()  # same scalar kind, value passes through
	SHAPE = auto()  # same composite kind; descriptors must be equal
	NUMERIC = auto()  # numeric change of representation, range checked
	INTERFACE = auto()  # boxing into an interface; method set checked by caller
	NONE = auto()


def _classify(src: Kind, dst: Kind) -> Conversion:
	if dst is Kind.INTERFACE:
		return Conversion.INTERFACE
	if src is dst:
		return Conversion.SHAPE if src in COMPOSITE_KINDS else Conversion.IDENTICAL
	if src in NUMERIC_KINDS and dst in NUMERIC_KINDS:
		return Conversion.NUMERIC
	# bool/string never convert to or from numbers, and composites never mix.
	return Conversion.NONE


CONVERSIONS: Dict[Tuple[Kind, Kind], Conversion] = {(src, dst): _classify(src, dst) for src in Kind for dst in Kind}


def conversion(src: Kind, dst: Kind) -> Conversion:
	"""Look up the table entry for `src -> dst`."""
	return CONVERSIONS[(src, dst)]


# Fixed-width numeric annotations. Bare `int` is Int64 and bare `float` is Float64.
Int8 = Annotated[int, Kind.INT8]
Int16 = Annotated[int, Kind.INT16]
Int32 = Annotated[int, Kind.INT32]
Int64 = Annotated[int, Kind.INT64]
Uint8 = Annotated[int, Kind.UINT8]
Uint16 = Annotated[int, Kind.UINT16]
Uint32 = Annotated[int, Kind.UINT32]
Uint64 = Annotated[int, Kind.UINT64]
Float32 = Annotated[float, Kind.FLOAT32]
Float64 = Annotated[float, Kind.FLOAT64]


__all__ = [
	"Kind",
	"Conversion",
	"CONVERSIONS",
	"conversion",
	"SIGNED_KINDS",
	"UNSIGNED_KINDS",
	"INTEGER_KINDS",
	"FLOAT_KINDS",
	"NUMERIC_KINDS",
	"SCALAR_KINDS",
	"COMPOSITE_KINDS",
	"BIT_WIDTH",
	"MAX_FLOAT32",
	"MAX_FLOAT64",
	"int_range",
	"float_max",
	"Int8",
	"Int16",
	"Int32",
	"Int64",
	"Uint8",
	"Uint16",
	"Uint32",
	"Uint64",
	"Float32",
	"Float64",
]
