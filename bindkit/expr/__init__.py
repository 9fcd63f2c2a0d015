# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
bindkit.expr: inline call expressions.

  - ast: parsed expression shapes
  - parser: lark grammar front end
  - evaluator: registry-backed evaluation
"""

from .ast import CallExpr, Literal, LiteralKind
from .evaluator import evaluate, evaluate_expression
from .parser import parse_expression

__all__ = ["CallExpr", "Literal", "LiteralKind", "evaluate", "evaluate_expression", "parse_expression"]
