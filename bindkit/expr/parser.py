# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lark front end for inline call expressions.

The grammar lives next to this module in `grammar.lark`. Parse failures from
lark are reported as PARSE_ERROR with the offending column when lark knows it.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from lark import Lark, Token, Tree
from lark.exceptions import LarkError, UnexpectedInput

from bindkit.core.errors import BindError, ErrorCode

from .ast import CallExpr, Literal, LiteralKind

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)


def parse_expression(source: str) -> CallExpr:
	"""Parse `{{ arg ... | name }}` into a CallExpr."""
	try:
		tree = _PARSER.parse(source)
	except UnexpectedInput as exc:
		raise BindError(
			ErrorCode.PARSE_ERROR,
			f"malformed expression {source!r} at column {exc.column}",
			index=exc.column,
		) from exc
	except LarkError as exc:
		raise BindError(ErrorCode.PARSE_ERROR, f"malformed expression {source!r}: {exc}") from exc
	return _build_call(tree)


def _build_call(tree: Tree) -> CallExpr:
	args: List[Literal] = []
	func = ""
	prev_end = None
	for child in tree.children:
		if isinstance(child, Tree):
			tok = next(c for c in child.children if isinstance(c, Token))
			# The grammar ignores whitespace; adjacent arguments still need some.
			if prev_end is not None and tok.start_pos == prev_end:
				raise BindError(
					ErrorCode.PARSE_ERROR,
					f"arguments must be separated by whitespace at column {tok.column}",
					index=tok.column,
				)
			prev_end = tok.end_pos
			args.append(_build_literal(child, tok))
		elif isinstance(child, Token) and child.type == "NAME":
			func = child.value
	return CallExpr(func=func, args=args)


def _build_literal(node: Tree, tok: Token) -> Literal:
	if node.data == "string_arg":
		return Literal(kind=LiteralKind.STRING, value=tok.value[1:-1], text=tok.value, column=tok.column)
	return Literal(kind=LiteralKind.INT, value=int(tok.value), text=tok.value, column=tok.column)


__all__ = ["parse_expression"]
