# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Name -> Callable registry for dynamic dispatch.

Entries are either bound Python functions or synthesized callables; the
registry stores both as `Callable` so lookups hand back one uniform type.
Registering a name twice is a programming error and raises ValueError.
"""

from __future__ import annotations

import logging
from typing import Any, Callable as PyCallable, Dict, Iterator, List, Optional

from bindkit.core.errors import BindError, ErrorCode
from bindkit.invoke import Callable, bind

logger = logging.getLogger(__name__)


class FunctionRegistry:
	"""Store callables by name and resolve them for the expression evaluator."""

	def __init__(self, functions: Optional[Dict[str, Any]] = None) -> None:
		self._by_name: Dict[str, Callable] = {}
		for name, fn in (functions or {}).items():
			self.register(name, fn)

	def register(self, name: str, fn: Any, func_type: Any = None) -> Callable:
		if not name:
			raise ValueError("function name must be non-empty")
		if name in self._by_name:
			raise ValueError(f"duplicate function name {name!r}")
		callable_ = fn if isinstance(fn, Callable) else bind(fn, func_type, name=name)
		self._by_name[name] = callable_
		logger.debug("registered %s as %s", name, callable_.type.display())
		return callable_

	def function(self, name: Optional[str] = None) -> PyCallable[[PyCallable[..., Any]], PyCallable[..., Any]]:
		"""Decorator form of `register`; the decorated function is returned unchanged."""

		def deco(fn: PyCallable[..., Any]) -> PyCallable[..., Any]:
			self.register(name or fn.__name__, fn)
			return fn

		return deco

	def lookup(self, name: str) -> Callable:
		try:
			return self._by_name[name]
		except KeyError:
			raise BindError(ErrorCode.UNKNOWN_FUNCTION, f"no function named {name!r}") from None

	def get(self, name: str) -> Optional[Callable]:
		return self._by_name.get(name)

	def names(self) -> List[str]:
		return sorted(self._by_name)

	def __contains__(self, name: object) -> bool:
		return name in self._by_name

	def __iter__(self) -> Iterator[str]:
		return iter(self.names())

	def __len__(self) -> int:
		return len(self._by_name)


def _repeat(s: str, n: int) -> str:
	return s * n


def _upper(s: str) -> str:
	return s.upper()


def _lower(s: str) -> str:
	return s.lower()


def _concat(a: str, b: str) -> str:
	return a + b


def builtin_registry() -> FunctionRegistry:
	"""Return a fresh registry holding the string helpers exposed by the CLI."""
	return FunctionRegistry(
		{
			"repeat": _repeat,
			"upper": _upper,
			"lower": _lower,
			"concat": _concat,
		}
	)


__all__ = ["FunctionRegistry", "builtin_registry"]
