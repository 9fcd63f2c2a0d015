# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Uniform invocation over native and synthesized callables.

Both flavours expose a FUNC descriptor and go through the same `call`
protocol: arity check (with variadic expansion), per-argument kind check and
numeric conversion, dispatch, result packaging. `make_func` builds a callable
from a descriptor plus a generic `handler(list[Value]) -> Sequence[Value]`;
once built it cannot be told apart from a bound Python function.
"""

from __future__ import annotations

import logging
from typing import Any, Callable as PyCallable, List, Optional, Sequence

from bindkit.convert import can_convert, convert, fits
from bindkit.core.errors import BindError, ErrorCode
from bindkit.core.kinds import Kind
from bindkit.core.types_core import DEFAULT_TABLE, TypeDescriptor, describe_type
from bindkit.value import Value, value_of

logger = logging.getLogger(__name__)

Handler = PyCallable[[List[Value]], Sequence[Value]]


class Callable:
	"""Base class for invocable functions with a FUNC descriptor."""

	def __init__(self, func_type: TypeDescriptor, name: str = "") -> None:
		if func_type.kind is not Kind.FUNC:
			raise BindError(ErrorCode.TYPE_MISMATCH, f"callable needs a func type, got {func_type.display()}")
		self.type = func_type
		self.name = name or "<func>"

	@property
	def __bind_type__(self) -> TypeDescriptor:
		return self.type

	@property
	def variadic(self) -> bool:
		return self.type.variadic

	@property
	def num_in(self) -> int:
		return len(self.type.params)

	@property
	def num_out(self) -> int:
		return len(self.type.results)

	def call(self, args: Sequence[Any]) -> List[Value]:
		return call(self, args)

	def __call__(self, *args: Any) -> Any:
		"""Call with plain Python objects; returns None, one object or a tuple."""
		results = [r.interface() for r in call(self, args)]
		if not results:
			return None
		if len(results) == 1:
			return results[0]
		return tuple(results)

	def _dispatch(self, args: List[Value]) -> List[Value]:
		raise NotImplementedError

	def __repr__(self) -> str:
		return f"<{type(self).__name__} {self.name} {self.type.display()}>"


class NativeCallable(Callable):
	"""A Python function bound behind the uniform calling convention."""

	def __init__(self, fn: PyCallable[..., Any], func_type: TypeDescriptor, name: str = "") -> None:
		super().__init__(func_type, name or getattr(fn, "__name__", ""))
		self.fn = fn

	def _dispatch(self, args: List[Value]) -> List[Value]:
		n_fixed = self.num_in - 1 if self.variadic else self.num_in
		fixed = [a.interface() for a in args[:n_fixed]]
		rest = [a.interface() for a in args[n_fixed:]]
		raw = self.fn(*fixed, *rest)
		return _package_results(self, raw)


class SynthesizedCallable(Callable):
	"""A callable whose body is a generic handler over Values."""

	def __init__(self, func_type: TypeDescriptor, handler: Handler, name: str = "") -> None:
		super().__init__(func_type, name or getattr(handler, "__name__", ""))
		self.handler = handler

	def _dispatch(self, args: List[Value]) -> List[Value]:
		if self.variadic:
			# Trailing arguments reach the handler packed into the final slice parameter.
			n_fixed = self.num_in - 1
			rest = [a.interface() for a in args[n_fixed:]]
			args = list(args[:n_fixed]) + [value_of(rest, self.type.params[-1])]
		results = list(self.handler(list(args)))
		if len(results) != self.num_out:
			raise BindError(
				ErrorCode.INVALID_RESULT_SHAPE,
				f"{self.name}: handler returned {len(results)} results, {self.type.display()} declares {self.num_out}",
			)
		return [value_of(r) for r in results]


def _package_results(fn: Callable, raw: Any) -> List[Value]:
	declared = fn.type.results
	if not declared:
		return []
	if len(declared) == 1:
		objs = [raw]
	elif not isinstance(raw, tuple) or len(raw) != len(declared):
		raise BindError(
			ErrorCode.INVALID_RESULT_SHAPE,
			f"{fn.name}: expected {len(declared)} results from {fn.type.display()}",
		)
	else:
		objs = list(raw)
	for index, (obj, td) in enumerate(zip(objs, declared)):
		if not fits(obj, td):
			raise BindError(
				ErrorCode.INVALID_RESULT_SHAPE,
				f"{fn.name}: result {index} is {type(obj).__name__}, declared {td.display()}",
				index=index,
			)
	return [value_of(obj, td) for obj, td in zip(objs, declared)]


def bind(fn: PyCallable[..., Any], func_type: Any = None, name: str = "") -> Callable:
	"""
	Wrap a Python function as a Callable.

	Without `func_type` the descriptor comes from the signature annotations:
	unannotated parameters are `interface{}`, `*args` makes the function
	variadic, a `None` return declares no results and `tuple[A, B]` two.
	"""
	if isinstance(fn, Callable):
		return fn
	if func_type is None:
		td = DEFAULT_TABLE.intern(DEFAULT_TABLE.describe_callable(fn))
	else:
		td = describe_type(func_type)
	return NativeCallable(fn, td, name)


def make_func(func_type: Any, handler: Handler, name: str = "") -> Callable:
	"""
	Synthesize a Callable of `func_type` whose body is `handler`.

	The handler receives one Value per declared parameter. For a variadic type
	the last one is a slice Value holding the trailing call arguments, so
	`len(args) == num_in` always holds.
	"""
	return SynthesizedCallable(describe_type(func_type), handler, name)


def _check_args(fn: Callable, args: Sequence[Value]) -> List[Value]:
	params = fn.type.params
	if fn.variadic:
		if len(args) < len(params) - 1:
			raise BindError(
				ErrorCode.ARITY_MISMATCH,
				f"{fn.name}: expected at least {len(params) - 1} arguments, got {len(args)}",
			)
		repeated = fn.type.variadic_elem
		expected = list(params[:-1]) + [repeated] * (len(args) - len(params) + 1)
	else:
		if len(args) != len(params):
			raise BindError(
				ErrorCode.ARITY_MISMATCH,
				f"{fn.name}: expected {len(params)} arguments, got {len(args)}",
			)
		expected = list(params)
	checked: List[Value] = []
	for index, (arg, param) in enumerate(zip(args, expected)):
		if not can_convert(arg.type, param):
			raise BindError(
				ErrorCode.TYPE_MISMATCH,
				f"{fn.name}: argument {index} is {arg.type.display()}, want {param.display()}",
				index=index,
			)
		try:
			obj = convert(arg.interface(), param, arg.type)
		except BindError as err:
			err.index = index
			raise
		checked.append(arg if obj is arg.interface() and arg.type == param else value_of(obj, param))
	return checked


def call(fn: Any, args: Sequence[Any]) -> List[Value]:
	"""
	Invoke `fn` with `args` (Values or plain objects) and return result Values.

	The caller checks `len(results)` against `fn.num_out` before indexing.
	"""
	callable_ = bind(fn)
	values = [value_of(a) for a in args]
	checked = _check_args(callable_, values)
	logger.debug("call %s with %d args", callable_.name, len(checked))
	return callable_._dispatch(checked)


__all__ = ["Callable", "NativeCallable", "SynthesizedCallable", "Handler", "bind", "make_func", "call"]
