# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
bindkit: reflective data binding.

Describe arbitrary values (`describe`), read and write through located
`Value`s and `ValueAccessor` paths, invoke native or synthesized callables
through one calling convention (`call`, `make_func`), evaluate inline
`{{ args | func }}` expressions, and decode `k=v` text into maps, structs,
slices and scalars.
"""

from bindkit.access import ValueAccessor, can_assign, dereference
from bindkit.core.errors import BindError, ErrorCode
from bindkit.core.kinds import (
	Float32,
	Float64,
	Int8,
	Int16,
	Int32,
	Int64,
	Kind,
	Uint8,
	Uint16,
	Uint32,
	Uint64,
)
from bindkit.core.types_core import (
	FieldDescriptor,
	TypeDescriptor,
	TypeTable,
	describe,
	describe_type,
	func_of,
	interface_of,
	map_of,
	pointer_to,
	scalar,
	slice_of,
)
from bindkit.decode import DecodeOptions, decode_map, decode_struct, fill_scalar, fill_slice
from bindkit.expr import evaluate, parse_expression
from bindkit.invoke import Callable, bind, call, make_func
from bindkit.registry import FunctionRegistry, builtin_registry
from bindkit.value import Pointer, Value, indirect, new, value_of

__all__ = [
	"BindError",
	"Callable",
	"DecodeOptions",
	"ErrorCode",
	"FieldDescriptor",
	"Float32",
	"Float64",
	"FunctionRegistry",
	"Int8",
	"Int16",
	"Int32",
	"Int64",
	"Kind",
	"Pointer",
	"TypeDescriptor",
	"TypeTable",
	"Uint8",
	"Uint16",
	"Uint32",
	"Uint64",
	"Value",
	"ValueAccessor",
	"bind",
	"builtin_registry",
	"call",
	"can_assign",
	"decode_map",
	"decode_struct",
	"dereference",
	"describe",
	"describe_type",
	"evaluate",
	"fill_scalar",
	"fill_slice",
	"func_of",
	"indirect",
	"interface_of",
	"make_func",
	"map_of",
	"new",
	"parse_expression",
	"pointer_to",
	"scalar",
	"slice_of",
	"value_of",
]
