# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Path-based access over located values.

A path is a sequence of steps, or a dotted string (`"Items.0.Name"`). Each
step is resolved against the kind of the Value reached so far:

- struct: field name (or integer field index)
- slice: integer index
- map: key, converted to the map's key type
- pointer / interface: dereferenced transparently before the step applies

Reads never require settability. Writes go through `Value.set`, so a path
that crosses a non-addressable hop (a map element, a value passed by copy) or
an unexported field raises NOT_SETTABLE instead of dropping the write.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Union

from bindkit.convert import KindLike, can_convert
from bindkit.core.errors import BindError, ErrorCode
from bindkit.core.kinds import Kind
from bindkit.value import Value, value_of

Step = Union[str, int]
Path = Union[str, Sequence[Step]]


def split_path(path: Path) -> List[Step]:
	"""Normalize a dotted path or step sequence into a list of steps."""
	if isinstance(path, str):
		if not path:
			return []
		return [int(part) if _is_int(part) else part for part in path.split(".")]
	return list(path)


def _is_int(text: str) -> bool:
	return text.lstrip("-").isdigit()


def dereference(value: Value) -> Value:
	"""Return the addressable Value a pointer Value refers to (NIL_DEREFERENCE when nil)."""
	if value.kind is not Kind.POINTER:
		raise BindError(ErrorCode.NON_POINTER, f"cannot dereference {value.type.display()}")
	return value.elem()


def can_assign(source: KindLike, target: KindLike) -> bool:
	"""
	Report whether a value of `source` may be stored in a `target` slot.

	True for identical kinds (equal shapes for composites), any source into an
	`interface{}` target, and the declared numeric conversions.
	"""
	return can_convert(source, target)


class ValueAccessor:
	"""Navigate and mutate storage reachable from a root Value."""

	def __init__(self, root: Any) -> None:
		self.root = value_of(root)

	def get(self, path: Path) -> Value:
		"""Return the Value at `path` (the root for an empty path)."""
		current = self.root
		steps = split_path(path)
		for depth, step in enumerate(steps):
			current = self._step(current, step, steps[: depth + 1])
		return current

	def set(self, path: Path, obj: Any) -> None:
		"""Store `obj` at `path`; map entries are written with `set_map_index`."""
		steps = split_path(path)
		if not steps:
			self.root.set(obj)
			return
		parent = _through_indirections(self.get(steps[:-1]), steps[:-1])
		last = steps[-1]
		try:
			if parent.kind is Kind.MAP:
				parent.set_map_index(last, obj)
				return
			target = self._step(parent, last, steps)
			target.set(obj)
		except BindError as err:
			if err.path is None:
				err.path = _render(steps)
			raise

	def dereference(self, path: Path = ()) -> Value:
		return dereference(self.get(path))

	def _step(self, current: Value, step: Step, walked: Sequence[Step]) -> Value:
		current = _through_indirections(current, walked)
		try:
			if current.kind is Kind.STRUCT:
				if isinstance(step, int):
					return current.field_by_index(step)
				return current.field(step)
			if current.kind is Kind.SLICE:
				if not isinstance(step, int):
					raise BindError(ErrorCode.TYPE_MISMATCH, f"slice index must be an integer, got {step!r}")
				return current.index(step)
			if current.kind is Kind.MAP:
				found = current.map_index(step)
				if found is None:
					raise BindError(ErrorCode.UNKNOWN_FIELD, f"map has no key {step!r}")
				return found
		except BindError as err:
			if err.path is None:
				err.path = _render(walked)
			raise
		raise BindError(
			ErrorCode.TYPE_MISMATCH,
			f"cannot step into {current.type.display()} with {step!r}",
			path=_render(walked),
		)


def _through_indirections(value: Value, walked: Sequence[Step]) -> Value:
	while value.kind in (Kind.POINTER, Kind.INTERFACE):
		if value.kind is Kind.INTERFACE:
			inner = value.elem()
			if inner.kind is Kind.INTERFACE:
				return inner
			value = inner
			continue
		try:
			value = value.elem()
		except BindError as err:
			err.path = _render(walked)
			raise
	return value


def _render(steps: Sequence[Step]) -> str:
	return ".".join(str(s) for s in steps)


__all__ = ["ValueAccessor", "dereference", "can_assign", "split_path"]
