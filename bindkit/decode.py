# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fill caller-owned targets from literals and `key=value` text.

Every entry point takes a pointer to the target (a `Pointer` or a pointer
`Value`), dereferences it and writes through the resulting addressable Value,
so the caller's storage is updated in place.

Text format for maps and structs:

	entry ("," entry)*      entry = key "=" value

There is no escaping; a value cannot contain either separator. Entries are
applied left to right and a failure part-way leaves the earlier entries in
place.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Union

from bindkit.convert import can_convert, convert_number
from bindkit.core.errors import BindError, ErrorCode, overflow
from bindkit.core.kinds import FLOAT_KINDS, Kind, SIGNED_KINDS, UNSIGNED_KINDS
from bindkit.core.types_core import INT64, STRING, describe
from bindkit.value import Value, value_of

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INF_SPELLINGS = ("inf", "infinity")


@dataclass(frozen=True)
class DecodeOptions:
	"""
	Decoder policy.

	`strict_fields` turns the struct decoder's silent skips (unknown field,
	unexported field, non-string field) into UNKNOWN_FIELD / NOT_SETTABLE /
	VALUE_TYPE_MISMATCH errors.
	"""

	strict_fields: bool = False
	entry_separator: str = ","
	pair_separator: str = "="


DEFAULT_OPTIONS = DecodeOptions()


def iter_entries(text: str, options: DecodeOptions = DEFAULT_OPTIONS) -> Iterator[Tuple[str, str]]:
	"""Yield `(key, raw)` pairs lazily; PARSE_ERROR for an entry without exactly one `=`."""
	if not text:
		return
	for index, raw in enumerate(text.split(options.entry_separator)):
		parts = raw.split(options.pair_separator)
		if len(parts) != 2:
			raise BindError(ErrorCode.PARSE_ERROR, f"malformed entry {raw!r}", index=index)
		yield parts[0], parts[1]


def split_entries(text: str, options: DecodeOptions = DEFAULT_OPTIONS) -> List[Tuple[str, str]]:
	return list(iter_entries(text, options))


def parse_int(text: str, index: Optional[int] = None) -> int:
	if not _INT_RE.fullmatch(text):
		raise BindError(ErrorCode.PARSE_ERROR, f"invalid integer literal {text!r}", index=index)
	return int(text)


def parse_number(text: str, kind: Kind = Kind.FLOAT64) -> Union[int, float]:
	"""
	Parse an integer or float literal; PARSE_ERROR otherwise.

	A finite-looking literal too large for a double (`1e400`) is OVERFLOW for
	`kind`; spelled-out `inf` and `nan` pass through.
	"""
	if _INT_RE.fullmatch(text):
		return int(text)
	try:
		x = float(text)
	except ValueError:
		raise BindError(ErrorCode.PARSE_ERROR, f"invalid numeric literal {text!r}") from None
	if math.isinf(x) and text.strip().lstrip("+-").lower() not in _INF_SPELLINGS:
		raise overflow(kind, text)
	return x


def _pointee(target: Any) -> Value:
	ptr = value_of(target)
	if ptr.kind is not Kind.POINTER:
		raise BindError(ErrorCode.NON_POINTER, f"target must be a pointer, got {ptr.type.display()}")
	if ptr.is_nil():
		raise BindError(ErrorCode.NIL_POINTER, f"target is a nil {ptr.type.display()}")
	return ptr.elem()


def fill_slice(target: Any, literals: Sequence[Any]) -> None:
	"""Replace `*target` with a new slice holding `literals` (string or interface{} elements)."""
	slot = _pointee(target)
	if slot.kind is not Kind.SLICE:
		raise BindError(ErrorCode.NON_SLICE, f"target must point to a slice, got {slot.type.display()}")
	elem = slot.type.elem
	if elem is None or not (elem.kind is Kind.STRING or (elem.kind is Kind.INTERFACE and not elem.methods)):
		raise BindError(
			ErrorCode.ELEMENT_TYPE_MISMATCH,
			f"slice element must be string or interface{{}}, got {slot.type.display()}",
		)
	items: List[Any] = [None] * len(literals)
	for index, lit in enumerate(literals):
		if not can_convert(describe(lit), elem):
			raise BindError(
				ErrorCode.ELEMENT_TYPE_MISMATCH,
				f"literal {lit!r} cannot be stored in {slot.type.display()}",
				index=index,
			)
		items[index] = lit
	slot.set(items)


def fill_scalar(target: Any, literal: Any) -> None:
	"""Store a numeric literal into `*target` after the width check for its kind."""
	slot = _pointee(target)
	kind = slot.kind
	if kind not in SIGNED_KINDS and kind not in UNSIGNED_KINDS and kind not in FLOAT_KINDS:
		raise BindError(
			ErrorCode.UNSUPPORTED_KIND,
			f"cannot fill {slot.type.display()} from a numeric literal",
			kind=kind,
		)
	number = parse_number(literal, kind) if isinstance(literal, str) else literal
	slot.set(convert_number(number, kind))


def decode_map(text: str, target: Any, options: DecodeOptions = DEFAULT_OPTIONS) -> None:
	"""Decode `int=raw,...` into the map `*target`, allocating it when nil."""
	slot = _pointee(target)
	if slot.kind is not Kind.MAP:
		raise BindError(ErrorCode.NON_MAP, f"target must point to a map, got {slot.type.display()}")
	key_td = slot.type.key
	elem_td = slot.type.elem
	for index, (left, right) in enumerate(iter_entries(text, options)):
		key = parse_int(left, index)
		if slot.interface() is None:
			logger.debug("allocating %s", slot.type.display())
			slot.set({})
		if key_td is None or not can_convert(INT64, key_td):
			raise BindError(
				ErrorCode.KEY_TYPE_MISMATCH,
				f"integer key {key} cannot be used as {_name(key_td)}",
				index=index,
			)
		if elem_td is None or not can_convert(STRING, elem_td):
			raise BindError(
				ErrorCode.VALUE_TYPE_MISMATCH,
				f"string value {right!r} cannot be used as {_name(elem_td)}",
				index=index,
			)
		try:
			slot.set_map_index(key, right)
		except BindError as err:
			err.index = index
			raise


def decode_struct(text: str, target: Any, options: DecodeOptions = DEFAULT_OPTIONS) -> None:
	"""
	Decode `Field=raw,...` into the struct `*target`.

	Only settable string fields are written. Other entries are skipped unless
	`options.strict_fields` is set.
	"""
	slot = _pointee(target)
	if slot.kind is not Kind.STRUCT:
		raise BindError(ErrorCode.NON_STRUCT, f"target must point to a struct, got {slot.type.display()}")
	for index, (name, raw) in enumerate(iter_entries(text, options)):
		fd = slot.type.field_by_name(name)
		if fd is None:
			_skip(options, ErrorCode.UNKNOWN_FIELD, f"{slot.type.display()} has no field {name!r}", index, name)
			continue
		field_value = slot.field(name)
		if not field_value.settable:
			_skip(options, ErrorCode.NOT_SETTABLE, f"field {name!r} is not settable", index, name)
			continue
		if fd.type.kind is not Kind.STRING:
			_skip(
				options,
				ErrorCode.VALUE_TYPE_MISMATCH,
				f"field {name!r} is {fd.type.display()}, not string",
				index,
				name,
			)
			continue
		field_value.set(raw)


def _skip(options: DecodeOptions, code: ErrorCode, message: str, index: int, name: str) -> None:
	if options.strict_fields:
		raise BindError(code, message, index=index, path=name)
	logger.debug("skipping entry %d: %s", index, message)


def _name(td: Any) -> str:
	return td.display() if td is not None else "?"


__all__ = [
	"DecodeOptions",
	"DEFAULT_OPTIONS",
	"iter_entries",
	"split_entries",
	"parse_int",
	"parse_number",
	"fill_slice",
	"fill_scalar",
	"decode_map",
	"decode_struct",
]
