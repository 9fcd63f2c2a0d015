# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Checked conversions between kinds.

Two levels live here:

- descriptor level: `can_convert(src, dst)` answers from the kind table plus a
  structural comparison for composite kinds. This is what accessors and the
  invoker consult before touching storage.
- value level: `convert(obj, dst)` turns a Python object into the
  representation `dst` expects, applying the overflow checks for fixed-width
  numbers. Composite values are validated in place and never copied, so a
  converted list or dict still aliases the caller's storage.
"""

from __future__ import annotations

import math
import struct
from typing import Any, Optional, Union

from bindkit.core.errors import BindError, ErrorCode, overflow
from bindkit.core.kinds import (
	COMPOSITE_KINDS,
	Conversion,
	FLOAT_KINDS,
	INTEGER_KINDS,
	Kind,
	NUMERIC_KINDS,
	conversion,
	float_max,
	int_range,
)
from bindkit.core.types_core import ANY, TypeDescriptor, describe

KindLike = Union[Kind, TypeDescriptor]

# Kinds whose zero value is nil (None).
NILABLE_KINDS = frozenset({Kind.SLICE, Kind.MAP, Kind.POINTER, Kind.FUNC, Kind.INTERFACE})


def _as_descriptor(k: KindLike) -> Optional[TypeDescriptor]:
	return k if isinstance(k, TypeDescriptor) else None


def _kind(k: KindLike) -> Kind:
	return k.kind if isinstance(k, TypeDescriptor) else k


def can_convert(src: KindLike, dst: KindLike) -> bool:
	"""
	Descriptor-level convertibility.

	Bare kinds answer from the table alone (a bare INTERFACE target counts as
	`interface{}`); descriptors additionally compare composite shapes and
	interface method sets.
	"""
	rule = conversion(_kind(src), _kind(dst))
	if rule is Conversion.NONE:
		return False
	if rule is Conversion.INTERFACE:
		dst_td = _as_descriptor(dst)
		if dst_td is None or not dst_td.methods:
			return True
		src_td = _as_descriptor(src)
		return src_td is not None and _implements(src_td, dst_td)
	if rule is Conversion.SHAPE:
		src_td, dst_td = _as_descriptor(src), _as_descriptor(dst)
		if src_td is None or dst_td is None:
			return True
		return same_shape(src_td, dst_td)
	return True


def _implements(src: TypeDescriptor, dst: TypeDescriptor) -> bool:
	if src.kind is Kind.INTERFACE:
		return set(dst.methods) <= set(src.methods)
	if src.kind is Kind.STRUCT and src.host is not None:
		return all(callable(getattr(src.host, m, None)) for m in dst.methods)
	return False


def same_shape(src: TypeDescriptor, dst: TypeDescriptor) -> bool:
	"""Compare composite shapes; an `interface{}` slot on the target side accepts anything."""
	if dst.kind is Kind.INTERFACE and not dst.methods:
		return True
	if src.kind is not dst.kind:
		return False
	if src.kind is Kind.STRUCT:
		return src.host is dst.host and src.name == dst.name
	if src.kind in (Kind.SLICE, Kind.POINTER):
		return _part(src.elem, dst.elem)
	if src.kind is Kind.MAP:
		return _part(src.key, dst.key) and _part(src.elem, dst.elem)
	if src.kind is Kind.FUNC:
		return (
			src.variadic == dst.variadic
			and len(src.params) == len(dst.params)
			and len(src.results) == len(dst.results)
			and all(_part(a, b) for a, b in zip(src.params, dst.params))
			and all(_part(a, b) for a, b in zip(src.results, dst.results))
		)
	if src.kind is Kind.INTERFACE:
		return set(dst.methods) <= set(src.methods)
	return True


def _part(src: Optional[TypeDescriptor], dst: Optional[TypeDescriptor]) -> bool:
	if src is None or dst is None:
		return src is dst
	if src.kind in COMPOSITE_KINDS or dst.kind in COMPOSITE_KINDS or dst.kind is Kind.INTERFACE:
		return same_shape(src, dst)
	return src.kind is dst.kind


def overflows_int(kind: Kind, n: int) -> bool:
	lo, hi = int_range(kind)
	return n < lo or n > hi


def overflows_float(kind: Kind, x: float) -> bool:
	# Infinities and NaN are representable in both widths.
	if math.isinf(x) or math.isnan(x):
		return False
	return abs(x) > float_max(kind)


def to_float32(x: float) -> float:
	"""Round a Python float to the nearest single-precision value."""
	return struct.unpack("<f", struct.pack("<f", x))[0]


def convert_number(obj: Any, kind: Kind) -> Union[int, float]:
	"""
	Convert a Python int/float into the representation of numeric `kind`.

	Raises OVERFLOW when the value does not fit the kind's width, and
	TYPE_MISMATCH when the object is not a number or a float would lose its
	fractional part on the way into an integer kind.
	"""
	if isinstance(obj, bool) or not isinstance(obj, (int, float)):
		raise BindError(ErrorCode.TYPE_MISMATCH, f"{type(obj).__name__} value {obj!r} is not a number", kind=kind)
	if kind in INTEGER_KINDS:
		if isinstance(obj, float):
			if not math.isfinite(obj):
				raise overflow(kind, obj)
			if not obj.is_integer():
				raise BindError(
					ErrorCode.TYPE_MISMATCH,
					f"float {obj!r} has a fractional part and cannot become {kind.display()}",
					kind=kind,
				)
			obj = int(obj)
		if overflows_int(kind, obj):
			raise overflow(kind, obj)
		return obj
	if kind in FLOAT_KINDS:
		try:
			x = float(obj)
		except OverflowError:
			raise overflow(kind, obj) from None
		if overflows_float(kind, x):
			raise overflow(kind, obj)
		return to_float32(x) if kind is Kind.FLOAT32 else x
	raise BindError(ErrorCode.UNSUPPORTED_KIND, f"{kind.display()} is not numeric", kind=kind)


def convert(obj: Any, dst: TypeDescriptor, src: Optional[TypeDescriptor] = None) -> Any:
	"""
	Convert `obj` for storage in a slot of type `dst`.

	Scalars are returned in their converted form; composites are validated and
	returned unchanged. Raises TYPE_MISMATCH when no conversion applies.
	"""
	if obj is None and dst.kind in NILABLE_KINDS:
		return None
	src = src if src is not None else describe(obj)
	rule = conversion(src.kind, dst.kind)
	if rule is Conversion.NONE:
		raise _mismatch(src, dst)
	if rule is Conversion.INTERFACE:
		if dst.methods and not _implements_value(obj, dst):
			raise _mismatch(src, dst)
		return obj
	if dst.kind in NUMERIC_KINDS:
		return convert_number(obj, dst.kind)
	if rule is Conversion.IDENTICAL:
		return obj
	if not fits(obj, dst):
		raise _mismatch(src, dst)
	return obj


def _implements_value(obj: Any, dst: TypeDescriptor) -> bool:
	return all(callable(getattr(obj, m, None)) for m in dst.methods)


def fits(obj: Any, dst: TypeDescriptor) -> bool:
	"""Report whether a Python object can occupy a slot of type `dst` as-is."""
	k = dst.kind
	if k is Kind.INTERFACE:
		return not dst.methods or _implements_value(obj, dst)
	if k is Kind.BOOL:
		return isinstance(obj, bool)
	if k is Kind.STRING:
		return isinstance(obj, str)
	if k in INTEGER_KINDS:
		return isinstance(obj, int) and not isinstance(obj, bool) and not overflows_int(k, obj)
	if k in FLOAT_KINDS:
		if isinstance(obj, bool) or not isinstance(obj, (int, float)):
			return False
		try:
			return not overflows_float(k, float(obj))
		except OverflowError:
			return False
	if k is Kind.SLICE:
		return obj is None or (isinstance(obj, list) and all(fits(e, dst.elem or ANY) for e in obj))
	if k is Kind.MAP:
		return obj is None or (
			isinstance(obj, dict)
			and all(fits(key, dst.key or ANY) and fits(v, dst.elem or ANY) for key, v in obj.items())
		)
	if k is Kind.STRUCT:
		return dst.host is not None and isinstance(obj, dst.host)
	if k in (Kind.POINTER, Kind.FUNC):
		if obj is None:
			return True
		src = describe(obj)
		return src.kind is k and same_shape(src, dst)
	return False


def _mismatch(src: TypeDescriptor, dst: TypeDescriptor) -> BindError:
	return BindError(ErrorCode.TYPE_MISMATCH, f"cannot use {src.display()} as {dst.display()}")


__all__ = [
	"NILABLE_KINDS",
	"can_convert",
	"same_shape",
	"overflows_int",
	"overflows_float",
	"to_float32",
	"convert_number",
	"convert",
	"fits",
]
