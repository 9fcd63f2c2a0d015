# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type descriptors and the shared descriptor cache.

A `TypeDescriptor` is an immutable description of a shape: its `Kind` plus the
parts that kind needs (element/key descriptors, struct fields, function
parameters/results, interface methods). Descriptors compare by shape, so two
independently built `map[int64]string` descriptors are equal and interning
returns one canonical instance.

Struct descriptors are the exception: their identity is the host dataclass
(`kind`, `name`, `host`); `fields` does not take part in equality. This lets a
struct refer to itself through a pointer field without building an infinite
descriptor.

`TypeTable` owns the cache. Readers look up an immutable snapshot without
locking; a miss takes the writer lock, builds everything the new shape needs
into a staging dict, and publishes a fresh snapshot (copy-on-write).
"""

from __future__ import annotations

import collections.abc
import dataclasses
import inspect
import sys
import threading
import typing
from dataclasses import dataclass, field
from typing import Annotated, Any, Dict, Mapping, Optional, Sequence, Tuple

from bindkit.core.kinds import Kind, NUMERIC_KINDS, SCALAR_KINDS
from bindkit.core.tags import TagItems, tags_from_metadata


@dataclass(frozen=True)
class FieldDescriptor:
	"""One struct member: name, position, own type, tags and exportedness."""

	name: str
	index: int
	type: "TypeDescriptor"
	tags: TagItems = ()
	exported: bool = False
	# Back-reference to the owning struct; filled in when the struct is finalized.
	owner: Optional["TypeDescriptor"] = field(default=None, compare=False, repr=False)

	def tag(self, key: str) -> Optional[str]:
		"""Return the tag value for `key`, or None when the key is absent."""
		for k, v in self.tags:
			if k == key:
				return v
		return None

	@property
	def tag_map(self) -> Dict[str, str]:
		return dict(self.tags)


@dataclass(frozen=True)
class TypeDescriptor:
	"""Immutable structural description of a type."""

	kind: Kind
	name: str = ""
	elem: Optional["TypeDescriptor"] = None  # SLICE, POINTER, MAP element
	key: Optional["TypeDescriptor"] = None  # MAP key
	params: Tuple["TypeDescriptor", ...] = ()  # FUNC
	results: Tuple["TypeDescriptor", ...] = ()  # FUNC
	variadic: bool = False  # FUNC; last param is a SLICE of the repeated element
	methods: Tuple[str, ...] = ()  # INTERFACE
	host: Optional[type] = None  # STRUCT host class
	fields: Tuple[FieldDescriptor, ...] = field(default=(), compare=False)

	@property
	def method_count(self) -> int:
		return len(self.methods)

	@property
	def num_field(self) -> int:
		return len(self.fields)

	def field_by_name(self, name: str) -> Optional[FieldDescriptor]:
		"""Return the field called `name`, or None when the struct has none."""
		for fd in self.fields:
			if fd.name == name:
				return fd
		return None

	@property
	def variadic_elem(self) -> Optional["TypeDescriptor"]:
		if not self.variadic or not self.params:
			return None
		return self.params[-1].elem

	def display(self) -> str:
		"""Render a compact, Go-flavoured type name."""
		k = self.kind
		if k in SCALAR_KINDS:
			return k.display()
		if k is Kind.SLICE:
			return f"[]{_display(self.elem)}"
		if k is Kind.POINTER:
			return f"*{_display(self.elem)}"
		if k is Kind.MAP:
			return f"map[{_display(self.key)}]{_display(self.elem)}"
		if k is Kind.STRUCT:
			return self.name or "struct"
		if k is Kind.INTERFACE:
			if not self.methods:
				return "interface{}"
			return "interface{" + "; ".join(self.methods) + "}"
		params = [_display(p) for p in self.params]
		if self.variadic and params:
			params[-1] = "..." + _display(self.params[-1].elem)
		out = f"func({', '.join(params)})"
		if len(self.results) == 1:
			out += " " + _display(self.results[0])
		elif self.results:
			out += " (" + ", ".join(_display(r) for r in self.results) + ")"
		return out

	def __str__(self) -> str:
		return self.display()


def _display(td: Optional[TypeDescriptor]) -> str:
	return td.display() if td is not None else "?"


_SCALARS: Dict[Kind, TypeDescriptor] = {k: TypeDescriptor(kind=k) for k in SCALAR_KINDS}
ANY = TypeDescriptor(kind=Kind.INTERFACE)
BOOL = _SCALARS[Kind.BOOL]
INT64 = _SCALARS[Kind.INT64]
FLOAT64 = _SCALARS[Kind.FLOAT64]
STRING = _SCALARS[Kind.STRING]


def scalar(kind: Kind) -> TypeDescriptor:
	"""Return the descriptor for a scalar kind."""
	try:
		return _SCALARS[kind]
	except KeyError:
		raise ValueError(f"{kind.name} is not a scalar kind") from None


def slice_of(elem: TypeDescriptor) -> TypeDescriptor:
	return TypeDescriptor(kind=Kind.SLICE, elem=elem)


def pointer_to(elem: TypeDescriptor) -> TypeDescriptor:
	return TypeDescriptor(kind=Kind.POINTER, elem=elem)


def map_of(key: TypeDescriptor, elem: TypeDescriptor) -> TypeDescriptor:
	return TypeDescriptor(kind=Kind.MAP, key=key, elem=elem)


def interface_of(methods: Sequence[str] = ()) -> TypeDescriptor:
	return TypeDescriptor(kind=Kind.INTERFACE, methods=tuple(sorted(methods)))


def func_of(
	params: Sequence[TypeDescriptor],
	results: Sequence[TypeDescriptor] = (),
	*,
	variadic: bool = False,
) -> TypeDescriptor:
	"""
	Build a FUNC descriptor.

	When `variadic` is set the last parameter must be a SLICE; its element is
	the kind repeated by trailing call arguments.
	"""
	params = tuple(params)
	if variadic and (not params or params[-1].kind is not Kind.SLICE):
		raise ValueError("variadic function type needs a trailing slice parameter")
	return TypeDescriptor(kind=Kind.FUNC, params=params, results=tuple(results), variadic=variadic)


def _finalize_struct(td: TypeDescriptor, fields: Sequence[FieldDescriptor]) -> None:
	# Descriptors are frozen; struct fields are attached exactly once, before the
	# descriptor is published to readers.
	for fd in fields:
		object.__setattr__(fd, "owner", td)
	object.__setattr__(td, "fields", tuple(fields))


def _is_protocol(tp: Any) -> bool:
	return isinstance(tp, type) and bool(getattr(tp, "_is_protocol", False)) and tp is not typing.Protocol


def _protocol_methods(tp: type) -> Tuple[str, ...]:
	names: set[str] = set()
	for base in tp.__mro__:
		if base in (object, typing.Protocol, typing.Generic):
			continue
		for name, attr in vars(base).items():
			if not name.startswith("_") and callable(attr):
				names.add(name)
	return tuple(sorted(names))


def _raw_annotations(obj: Any) -> Dict[str, Any]:
	if not isinstance(obj, type):
		return dict(getattr(obj, "__annotations__", None) or {})
	merged: Dict[str, Any] = {}
	for base in reversed(obj.__mro__):
		merged.update(base.__dict__.get("__annotations__", {}))
	return merged


def _type_hints(obj: Any, localns: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
	"""
	Resolve annotations of a class or function.

	When one annotation cannot be resolved the others are still evaluated one
	by one; only the failing names keep their raw string and describe as
	`interface{}`.
	"""
	try:
		return typing.get_type_hints(obj, localns=localns, include_extras=True)
	except Exception:
		pass
	if isinstance(obj, type):
		globalns = getattr(sys.modules.get(obj.__module__), "__dict__", {})
	else:
		globalns = getattr(obj, "__globals__", {})
	hints: Dict[str, Any] = {}
	for name, ann in _raw_annotations(obj).items():
		if isinstance(ann, str):
			try:
				ann = eval(ann, globalns, localns or {})
			except Exception:
				continue
		hints[name] = ann
	return hints


class TypeTable:
	"""
	Thread-safe descriptor cache.

	Keys are either annotations (`int`, `list[str]`, a dataclass, ...) or
	descriptors themselves (interning). The snapshot mapping is replaced, never
	mutated, so readers need no lock.
	"""

	def __init__(self) -> None:
		self._snapshot: Mapping[Any, TypeDescriptor] = {}
		self._write_lock = threading.Lock()

	def __len__(self) -> int:
		return len(self._snapshot)

	def lookup(self, key: Any) -> Optional[TypeDescriptor]:
		"""Return the cached descriptor for `key` without building anything."""
		try:
			return self._snapshot.get(key)
		except TypeError:  # unhashable annotation
			return None

	def intern(self, td: TypeDescriptor) -> TypeDescriptor:
		"""Return the canonical instance equal to `td`."""
		found = self._snapshot.get(td)
		if found is not None:
			return found
		with self._write_lock:
			found = self._snapshot.get(td)
			if found is not None:
				return found
			self._publish({td: td})
			return td

	def describe_type(self, tp: Any) -> TypeDescriptor:
		"""Describe a static annotation (never raises; unknown shapes are interface{})."""
		if isinstance(tp, TypeDescriptor):
			return tp
		found = self.lookup(tp)
		if found is not None:
			return found
		with self._write_lock:
			found = self.lookup(tp)
			if found is not None:
				return found
			staged: Dict[Any, TypeDescriptor] = {}
			td = self._build(tp, staged)
			self._publish(staged)
			return td

	def describe(self, value: Any) -> TypeDescriptor:
		"""Describe a runtime value (never raises)."""
		return self._describe(value, set())

	def _describe(self, value: Any, active: set[int]) -> TypeDescriptor:
		# `active` holds ids of the containers being described; a container met
		# again inside itself is interface{}.
		own = getattr(value, "__bind_type__", None)
		if isinstance(own, TypeDescriptor):
			return own
		if value is None:
			return ANY
		if isinstance(value, bool):
			return BOOL
		if isinstance(value, int):
			return INT64
		if isinstance(value, float):
			return FLOAT64
		if isinstance(value, str):
			return STRING
		if isinstance(value, (list, dict)):
			if id(value) in active:
				return ANY
			active.add(id(value))
			try:
				if isinstance(value, list):
					return self.intern(slice_of(self._common(value, active)))
				return self.intern(map_of(self._common(value.keys(), active), self._common(value.values(), active)))
			finally:
				active.discard(id(value))
		if dataclasses.is_dataclass(value) and not isinstance(value, type):
			return self.describe_type(type(value))
		if callable(value) and not isinstance(value, type):
			return self.intern(self.describe_callable(value))
		return ANY

	def describe_callable(self, fn: Any) -> TypeDescriptor:
		"""Build a FUNC descriptor from a Python callable's signature."""
		try:
			sig = inspect.signature(fn)
		except (TypeError, ValueError):
			return func_of((slice_of(ANY),), (ANY,), variadic=True)
		hints = _type_hints(fn)
		params: list[TypeDescriptor] = []
		variadic = False
		for p in sig.parameters.values():
			ann = hints.get(p.name, p.annotation)
			td = ANY if ann is inspect.Parameter.empty else self.describe_type(ann)
			if p.kind is inspect.Parameter.VAR_POSITIONAL:
				params.append(self.intern(slice_of(td)))
				variadic = True
				break
			if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
				params.append(td)
		ret = hints.get("return", sig.return_annotation)
		return func_of(params, self._results(ret), variadic=variadic)

	def _results(self, ann: Any) -> Tuple[TypeDescriptor, ...]:
		if ann is inspect.Signature.empty:
			return (ANY,)
		if ann is None or ann is type(None):
			return ()
		if typing.get_origin(ann) is tuple:
			args = typing.get_args(ann)
			if args and args[-1] is not Ellipsis:
				return tuple(self.describe_type(a) for a in args)
		return (self.describe_type(ann),)

	def _common(self, items: Any, active: set[int]) -> TypeDescriptor:
		seen: Optional[TypeDescriptor] = None
		for item in items:
			td = self._describe(item, active)
			if seen is None:
				seen = td
			elif td != seen:
				return ANY
		return seen if seen is not None else ANY

	def _publish(self, staged: Mapping[Any, TypeDescriptor]) -> None:
		if not staged:
			return
		merged = dict(self._snapshot)
		for key, td in staged.items():
			try:
				merged[key] = td
			except TypeError:
				continue
		self._snapshot = merged

	def _resolve(self, tp: Any, staged: Dict[Any, TypeDescriptor]) -> TypeDescriptor:
		# Caller holds the writer lock.
		if isinstance(tp, TypeDescriptor):
			return tp
		try:
			found = staged.get(tp) or self._snapshot.get(tp)
		except TypeError:
			return self._build(tp, staged)
		if found is not None:
			return found
		return self._build(tp, staged)

	def _canonical(self, td: TypeDescriptor, staged: Dict[Any, TypeDescriptor]) -> TypeDescriptor:
		found = staged.get(td) or self._snapshot.get(td)
		if found is not None:
			return found
		staged[td] = td
		return td

	def _build(self, tp: Any, staged: Dict[Any, TypeDescriptor]) -> TypeDescriptor:
		td = self._build_uncached(tp, staged)
		td = self._canonical(td, staged) if td.kind is not Kind.STRUCT else td
		try:
			staged[tp] = td
		except TypeError:
			pass
		return td

	def _build_uncached(self, tp: Any, staged: Dict[Any, TypeDescriptor]) -> TypeDescriptor:
		if tp is bool:
			return BOOL
		if tp is int:
			return INT64
		if tp is float:
			return FLOAT64
		if tp is str:
			return STRING
		if tp is Any or tp is object:
			return ANY
		origin = typing.get_origin(tp)
		args = typing.get_args(tp)
		if origin is Annotated:
			for meta in tp.__metadata__:
				if isinstance(meta, Kind) and meta in SCALAR_KINDS:
					return _SCALARS[meta]
			return self._resolve(args[0], staged)
		if tp is list or origin is list:
			elem = self._resolve(args[0], staged) if args else ANY
			return slice_of(elem)
		if tp is dict or origin is dict:
			if len(args) == 2:
				return map_of(self._resolve(args[0], staged), self._resolve(args[1], staged))
			return map_of(ANY, ANY)
		kind_marker = getattr(origin if origin is not None else tp, "__bind_kind__", None)
		if kind_marker is Kind.POINTER:
			return pointer_to(self._resolve(args[0], staged) if args else ANY)
		if tp is collections.abc.Callable or origin is collections.abc.Callable:
			return self._build_callable_type(args, staged)
		if isinstance(tp, type) and dataclasses.is_dataclass(tp):
			return self._build_struct(tp, staged)
		if _is_protocol(tp):
			return interface_of(_protocol_methods(tp))
		# Unions, tuples, plain classes and unresolved forward references.
		return ANY

	def _build_callable_type(self, args: Tuple[Any, ...], staged: Dict[Any, TypeDescriptor]) -> TypeDescriptor:
		if not args:
			return func_of((slice_of(ANY),), (ANY,), variadic=True)
		param_spec, ret = args[0], args[-1]
		if param_spec is Ellipsis:
			params: Tuple[TypeDescriptor, ...] = (self._canonical(slice_of(ANY), staged),)
			variadic = True
		else:
			params = tuple(self._resolve(a, staged) for a in param_spec)
			variadic = False
		results: Tuple[TypeDescriptor, ...]
		if ret is None or ret is type(None):
			results = ()
		elif typing.get_origin(ret) is tuple and typing.get_args(ret) and typing.get_args(ret)[-1] is not Ellipsis:
			results = tuple(self._resolve(a, staged) for a in typing.get_args(ret))
		else:
			results = (self._resolve(ret, staged),)
		return func_of(params, results, variadic=variadic)

	def _build_struct(self, cls: type, staged: Dict[Any, TypeDescriptor]) -> TypeDescriptor:
		td = TypeDescriptor(kind=Kind.STRUCT, name=cls.__qualname__, host=cls)
		# Register before visiting fields so self-references resolve to `td`.
		staged[cls] = td
		hints = _type_hints(cls, {cls.__name__: cls})
		out: list[FieldDescriptor] = []
		for index, dc_field in enumerate(dataclasses.fields(cls)):
			ann = hints.get(dc_field.name, dc_field.type)
			ftype = ANY if isinstance(ann, str) else self._resolve(ann, staged)
			out.append(
				FieldDescriptor(
					name=dc_field.name,
					index=index,
					type=ftype,
					tags=tags_from_metadata(dc_field.metadata),
					exported=is_exported(dc_field.name),
				)
			)
		_finalize_struct(td, out)
		return td


def is_exported(name: str) -> bool:
	"""Exported names start with an upper-case letter."""
	return bool(name) and name[0].isupper()


def is_numeric(td: TypeDescriptor) -> bool:
	return td.kind in NUMERIC_KINDS


DEFAULT_TABLE = TypeTable()


def describe(value: Any) -> TypeDescriptor:
	"""Describe a runtime value using the shared table."""
	return DEFAULT_TABLE.describe(value)


def describe_type(tp: Any) -> TypeDescriptor:
	"""Describe a static annotation using the shared table."""
	return DEFAULT_TABLE.describe_type(tp)


__all__ = [
	"FieldDescriptor",
	"TypeDescriptor",
	"TypeTable",
	"DEFAULT_TABLE",
	"ANY",
	"BOOL",
	"INT64",
	"FLOAT64",
	"STRING",
	"scalar",
	"slice_of",
	"pointer_to",
	"map_of",
	"interface_of",
	"func_of",
	"is_exported",
	"is_numeric",
	"describe",
	"describe_type",
]
