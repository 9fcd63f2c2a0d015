# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Pointers and located values.

`Pointer` is the caller-visible handle on mutable storage: a typed cell that
the decoder can dereference and write through. `Value` is the engine-side view
of one located instance. A Value never owns storage; it holds a loader (and,
when addressable, a storer) closing over the caller's objects, so every read
observes the current contents and every permitted write lands in place.

Settability follows one rule: a Value is settable when it is addressable and
not read-only. A Value becomes read-only when the path to it crosses an
unexported struct field, and everything reached from it stays read-only.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterator, List, Optional, Tuple, TypeVar

from bindkit.convert import NILABLE_KINDS, can_convert, convert
from bindkit.core.errors import BindError, ErrorCode
from bindkit.core.kinds import FLOAT_KINDS, INTEGER_KINDS, Kind
from bindkit.core.types_core import (
	ANY,
	DEFAULT_TABLE,
	FieldDescriptor,
	TypeDescriptor,
	describe,
	describe_type,
	pointer_to,
)

T = TypeVar("T")

_MISSING = object()


class Pointer(Generic[T]):
	"""
	Typed reference to a storage cell.

	`Pointer(int, 5)` owns a fresh cell; `Pointer.to(obj)` points at an existing
	object (struct instances are shared, not copied); `Pointer.nil(User)` is a
	typed nil. `Pointer[T]` is also the annotation used in dataclass fields and
	signatures.
	"""

	__bind_kind__ = Kind.POINTER

	def __init__(self, elem: Any, value: Any = _MISSING) -> None:
		self._elem = describe_type(elem)
		cell = [zero_value(self._elem) if value is _MISSING else convert(value, self._elem)]
		self._nil = False
		self._load: Callable[[], Any] = lambda: cell[0]
		self._store: Callable[[Any], None] = lambda v: cell.__setitem__(0, v)

	@classmethod
	def to(cls, obj: Any) -> "Pointer[Any]":
		"""Point at an existing object, typed by `describe(obj)`."""
		return cls(describe(obj), obj)

	@classmethod
	def nil(cls, elem: Any) -> "Pointer[Any]":
		ptr = cls.from_accessors(describe_type(elem), lambda: None, lambda v: None)
		ptr._nil = True
		return ptr

	@classmethod
	def from_accessors(cls, elem: TypeDescriptor, load: Callable[[], Any], store: Callable[[Any], None]) -> "Pointer[Any]":
		"""Build a pointer onto storage reached through a loader/storer pair."""
		ptr = cls.__new__(cls)
		ptr._elem = elem
		ptr._nil = False
		ptr._load = load
		ptr._store = store
		return ptr

	@property
	def elem_type(self) -> TypeDescriptor:
		return self._elem

	@property
	def __bind_type__(self) -> TypeDescriptor:
		return DEFAULT_TABLE.intern(pointer_to(self._elem))

	@property
	def is_nil(self) -> bool:
		return self._nil

	def load(self) -> Any:
		if self._nil:
			raise BindError(ErrorCode.NIL_DEREFERENCE, f"load through nil {self.__bind_type__.display()}")
		return self._load()

	def store(self, obj: Any) -> None:
		if self._nil:
			raise BindError(ErrorCode.NIL_DEREFERENCE, f"store through nil {self.__bind_type__.display()}")
		self._store(convert(obj, self._elem))

	def __repr__(self) -> str:
		if self._nil:
			return f"Pointer[{self._elem.display()}](nil)"
		return f"Pointer[{self._elem.display()}]({self._load()!r})"


def zero_value(td: TypeDescriptor) -> Any:
	"""Return the zero value of a type: nil for reference kinds, empty/0 for scalars."""
	k = td.kind
	if k is Kind.BOOL:
		return False
	if k in INTEGER_KINDS:
		return 0
	if k in FLOAT_KINDS:
		return 0.0
	if k is Kind.STRING:
		return ""
	if k is Kind.POINTER:
		return Pointer.nil(td.elem or ANY)
	if k is Kind.STRUCT and td.host is not None:
		init = {f.name: zero_value(fd.type) for f, fd in zip(dataclasses.fields(td.host), td.fields) if f.init}
		return td.host(**init)
	return None


def new(tp: Any) -> Pointer[Any]:
	"""Allocate a zero value of `tp` and return a pointer to it."""
	td = describe_type(tp)
	return Pointer(td, zero_value(td))


@dataclass(frozen=True)
class Value:
	"""A located instance: descriptor plus access closures and flags."""

	type: TypeDescriptor
	_load: Callable[[], Any] = field(repr=False)
	_store: Optional[Callable[[Any], None]] = field(default=None, repr=False)
	addressable: bool = False
	settable: bool = False
	read_only: bool = False

	@property
	def kind(self) -> Kind:
		return self.type.kind

	def interface(self) -> Any:
		"""Return the current Python object behind this Value."""
		return self._load()

	def set(self, obj: Any) -> None:
		"""Store `obj`, converting it to this Value's type; NOT_SETTABLE when forbidden."""
		if not self.settable or self._store is None:
			raise BindError(ErrorCode.NOT_SETTABLE, f"cannot set unsettable {self.type.display()} value")
		self._store(convert(obj, self.type))

	def set_value(self, other: "Value") -> None:
		if not self.settable or self._store is None:
			raise BindError(ErrorCode.NOT_SETTABLE, f"cannot set unsettable {self.type.display()} value")
		if not can_convert(other.type, self.type):
			raise BindError(
				ErrorCode.TYPE_MISMATCH,
				f"cannot assign {other.type.display()} to {self.type.display()}",
			)
		self._store(convert(other.interface(), self.type, other.type))

	def convert(self, tp: Any) -> "Value":
		"""Return a new, non-addressable Value of type `tp` holding the converted object."""
		td = describe_type(tp)
		if not can_convert(self.type, td):
			raise BindError(ErrorCode.TYPE_MISMATCH, f"cannot convert {self.type.display()} to {td.display()}")
		return value_of(convert(self.interface(), td, self.type), td)

	def is_nil(self) -> bool:
		if self.kind not in NILABLE_KINDS:
			raise BindError(ErrorCode.TYPE_MISMATCH, f"{self.type.display()} value cannot be nil")
		obj = self.interface()
		return obj is None or (isinstance(obj, Pointer) and obj.is_nil)

	def elem(self) -> "Value":
		"""Dereference a pointer (addressable result) or unwrap an interface."""
		if self.kind is Kind.INTERFACE:
			obj = self.interface()
			return Value(describe(obj), lambda: obj, read_only=self.read_only)
		if self.kind is not Kind.POINTER:
			raise BindError(ErrorCode.NON_POINTER, f"elem of non-pointer {self.type.display()}")
		ptr = self.interface()
		if ptr is None or ptr.is_nil:
			raise BindError(ErrorCode.NIL_DEREFERENCE, f"dereference of nil {self.type.display()}")
		return Value(
			ptr.elem_type,
			ptr.load,
			ptr._store,
			addressable=True,
			settable=not self.read_only,
			read_only=self.read_only,
		)

	def addr(self) -> Pointer[Any]:
		if not self.addressable or self._store is None:
			raise BindError(ErrorCode.NOT_SETTABLE, f"cannot take the address of unaddressable {self.type.display()} value")
		if self.read_only:
			raise BindError(ErrorCode.NOT_SETTABLE, f"cannot take the address of read-only {self.type.display()} value")
		return Pointer.from_accessors(self.type, self._load, self._store)

	def _struct(self) -> Any:
		if self.kind is not Kind.STRUCT:
			raise BindError(ErrorCode.NON_STRUCT, f"field access on non-struct {self.type.display()}")
		return self.interface()

	def _field_value(self, fd: FieldDescriptor) -> "Value":
		obj = self._struct()
		name = fd.name
		read_only = self.read_only or not fd.exported
		return Value(
			fd.type,
			lambda: getattr(obj, name),
			lambda v: setattr(obj, name, v),
			addressable=self.addressable,
			settable=self.addressable and not read_only,
			read_only=read_only,
		)

	def field(self, name: str) -> "Value":
		self._struct()
		fd = self.type.field_by_name(name)
		if fd is None:
			raise BindError(ErrorCode.UNKNOWN_FIELD, f"{self.type.display()} has no field {name!r}", path=name)
		return self._field_value(fd)

	def field_by_index(self, index: int) -> "Value":
		self._struct()
		if index < 0 or index >= self.type.num_field:
			raise BindError(ErrorCode.INDEX_OUT_OF_RANGE, f"field index {index} out of range", index=index)
		return self._field_value(self.type.fields[index])

	def fields(self) -> Iterator[Tuple[FieldDescriptor, "Value"]]:
		"""Yield (descriptor, value) for every field in declaration order, exported or not."""
		self._struct()
		for fd in self.type.fields:
			yield fd, self._field_value(fd)

	def len(self) -> int:
		if self.kind not in (Kind.SLICE, Kind.MAP, Kind.STRING):
			raise BindError(ErrorCode.TYPE_MISMATCH, f"len of {self.type.display()}")
		obj = self.interface()
		return 0 if obj is None else len(obj)

	def index(self, i: int) -> "Value":
		"""Slice element access; elements of a slice are always addressable (settable unless read-only)."""
		if self.kind is not Kind.SLICE:
			raise BindError(ErrorCode.NON_SLICE, f"index of non-slice {self.type.display()}")
		items = self.interface()
		if items is None or i < 0 or i >= len(items):
			raise BindError(ErrorCode.INDEX_OUT_OF_RANGE, f"index {i} out of range", index=i)
		return Value(
			self.type.elem or ANY,
			lambda: items[i],
			lambda v: items.__setitem__(i, v),
			addressable=True,
			settable=not self.read_only,
			read_only=self.read_only,
		)

	def _map(self) -> Any:
		if self.kind is not Kind.MAP:
			raise BindError(ErrorCode.NON_MAP, f"map operation on {self.type.display()}")
		return self.interface()

	def map_index(self, key: Any) -> Optional["Value"]:
		"""Look up `key`; None when absent. Map elements are never addressable."""
		mapping = self._map()
		k = self._map_key(key)
		if mapping is None or k not in mapping:
			return None
		obj = mapping[k]
		return Value(self.type.elem or ANY, lambda: obj, read_only=self.read_only)

	def set_map_index(self, key: Any, obj: Any) -> None:
		"""Insert or overwrite one entry; the map itself need not be addressable, only not read-only."""
		mapping = self._map()
		if self.read_only:
			raise BindError(ErrorCode.NOT_SETTABLE, f"cannot write to read-only {self.type.display()}")
		if mapping is None:
			raise BindError(ErrorCode.NIL_POINTER, f"assignment to entry in nil {self.type.display()}")
		k = self._map_key(key)
		elem = self.type.elem or ANY
		if not can_convert(describe(obj), elem):
			raise BindError(ErrorCode.VALUE_TYPE_MISMATCH, f"cannot use {describe(obj).display()} as map element {elem.display()}")
		mapping[k] = convert(obj, elem)

	def map_keys(self) -> List["Value"]:
		mapping = self._map()
		if mapping is None:
			return []
		key_td = self.type.key or ANY
		return [value_of(k, key_td) for k in mapping]

	def _map_key(self, key: Any) -> Any:
		if isinstance(key, Value):
			key = key.interface()
		key_td = self.type.key or ANY
		if not can_convert(describe(key), key_td):
			raise BindError(ErrorCode.KEY_TYPE_MISMATCH, f"cannot use {describe(key).display()} as map key {key_td.display()}")
		return convert(key, key_td)

	def __repr__(self) -> str:
		flags = "".join(f for f, on in (("A", self.addressable), ("S", self.settable), ("R", self.read_only)) if on) or "-"
		return f"<Value {self.type.display()} {flags} {self.interface()!r}>"


def value_of(obj: Any, tp: Any = None) -> Value:
	"""Wrap an object as a non-addressable Value (typed by `tp` or `describe(obj)`)."""
	if isinstance(obj, Value):
		return obj
	td = describe(obj) if tp is None else describe_type(tp)
	return Value(td, lambda: obj)


def indirect(obj: Any) -> Value:
	"""Return the addressable Value a pointer refers to."""
	return value_of(obj).elem()


__all__ = ["Pointer", "Value", "value_of", "indirect", "new", "zero_value"]
