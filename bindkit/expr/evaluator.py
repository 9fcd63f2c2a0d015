# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Evaluate inline call expressions against a function registry.

Unlike `invoke.call`, this path has no variadic expansion: the literal count
must equal the callable's declared parameter count, and the call must yield
exactly one string.
"""

from __future__ import annotations

import logging
from typing import List, Union

from bindkit.convert import can_convert
from bindkit.core.errors import BindError, ErrorCode
from bindkit.core.kinds import Kind
from bindkit.core.types_core import INT64, STRING, describe
from bindkit.invoke import call
from bindkit.registry import FunctionRegistry
from bindkit.value import Value, value_of

from .ast import CallExpr, LiteralKind
from .parser import parse_expression

logger = logging.getLogger(__name__)


def _literal_values(expr: CallExpr) -> List[Value]:
	out: List[Value] = []
	for lit in expr.args:
		td = STRING if lit.kind is LiteralKind.STRING else INT64
		out.append(value_of(lit.value, td))
	return out


def _result_kind(result: Value) -> Kind:
	# interface{} results are judged by what they hold.
	if result.kind is Kind.INTERFACE:
		return describe(result.interface()).kind
	return result.kind


def evaluate_expression(expr: CallExpr, registry: FunctionRegistry) -> str:
	fn = registry.lookup(expr.func)
	args = _literal_values(expr)
	params = fn.type.params
	if len(args) != len(params):
		raise BindError(
			ErrorCode.ARITY_MISMATCH,
			f"{expr.func}: expected {len(params)} arguments, got {len(args)}",
		)
	for index, (arg, param) in enumerate(zip(args, params)):
		if not can_convert(arg.type, param):
			raise BindError(
				ErrorCode.TYPE_MISMATCH,
				f"{expr.func}: argument {index} is {arg.type.display()}, want {param.display()}",
				index=index,
			)
	logger.debug("evaluate %s(%s)", expr.func, ", ".join(lit.text for lit in expr.args))
	results = call(fn, args)
	if len(results) != 1 or _result_kind(results[0]) is not Kind.STRING:
		shape = ", ".join(r.type.display() for r in results) or "nothing"
		raise BindError(
			ErrorCode.INVALID_RESULT_SHAPE,
			f"{expr.func}: expected a single string result, got {shape}",
		)
	return results[0].interface()


def evaluate(source: Union[str, CallExpr], registry: FunctionRegistry) -> str:
	"""Parse (if needed) and evaluate one `{{ ... | func }}` expression."""
	expr = parse_expression(source) if isinstance(source, str) else source
	return evaluate_expression(expr, registry)


__all__ = ["evaluate", "evaluate_expression"]
