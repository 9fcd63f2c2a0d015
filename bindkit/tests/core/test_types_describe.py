#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Descriptor building: scalars, composites, structs, callables and the cache."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

import pytest

from bindkit.convert import can_convert
from bindkit.core.kinds import Float32, Int8, Kind, Uint16
from bindkit.core.types_core import (
	ANY,
	INT64,
	STRING,
	TypeTable,
	describe,
	describe_type,
	func_of,
	map_of,
	pointer_to,
	slice_of,
)
from bindkit.value import Pointer


@dataclass
class User:
	Name: str = field(default="", metadata={"tag": 'json:"name" db:"user_name"'})
	Github: str = ""
	Age: Int8 = 0
	password: str = ""


@dataclass
class Node:
	Value: int = 0
	Next: Optional[Pointer[Node]] = None
	Children: list[Node] = field(default_factory=list)


class Named(Protocol):
	def name(self) -> str:
		...


@dataclass
class Greeter:
	Label: str = ""

	def name(self) -> str:
		return self.Label


def join(sep: str, *parts: str) -> str:
	return sep.join(parts)


def divmod_(a: int, b: int) -> tuple[int, int]:
	return divmod(a, b)


def untyped(a, b):
	return a


def notify(msg: str) -> None:
	pass


def test_scalars_and_aliases():
	assert describe_type(int) is INT64
	assert describe_type(str) is STRING
	assert describe_type(Int8).kind is Kind.INT8
	assert describe_type(Uint16).kind is Kind.UINT16
	assert describe_type(Float32).kind is Kind.FLOAT32
	assert describe_type(float).kind is Kind.FLOAT64
	assert describe_type(bool).kind is Kind.BOOL


def test_composite_display():
	assert describe_type(dict[int, str]).display() == "map[int64]string"
	assert describe_type(list[Int8]).display() == "[]int8"
	assert describe_type(Pointer[int]).display() == "*int64"
	assert describe_type(list[Any]).display() == "[]interface{}"


def test_unknown_shapes_are_interface():
	assert describe_type(Optional[int]) == ANY
	assert describe_type(tuple[int, str]) == ANY
	assert describe_type(object) == ANY


def test_struct_fields_in_declaration_order():
	td = describe_type(User)
	assert td.kind is Kind.STRUCT
	assert td.display() == "User"
	assert [f.name for f in td.fields] == ["Name", "Github", "Age", "password"]
	assert [f.index for f in td.fields] == [0, 1, 2, 3]
	assert td.fields[2].type.kind is Kind.INT8
	assert all(f.owner is td for f in td.fields)


def test_field_tags_and_exported():
	td = describe_type(User)
	name = td.field_by_name("Name")
	assert name.tag("json") == "name"
	assert name.tag("db") == "user_name"
	assert name.tag("xml") is None
	assert td.field_by_name("Github").tag("json") is None
	assert name.exported
	assert not td.field_by_name("password").exported
	assert td.field_by_name("missing") is None


def test_recursive_struct():
	td = describe_type(Node)
	nxt = td.field_by_name("Next").type
	# Optional[...] is a union, so it is opaque.
	assert nxt == ANY
	children = td.field_by_name("Children").type
	assert children.kind is Kind.SLICE
	assert children.elem is td


@dataclass
class Link:
	Label: str = ""
	Next: Pointer[Link] = field(default=None)


def test_self_reference_through_pointer():
	td = describe_type(Link)
	nxt = td.field_by_name("Next").type
	assert nxt.kind is Kind.POINTER
	assert nxt.elem is td
	assert nxt.display() == "*Link"


def test_describe_runtime_values():
	assert describe(None) == ANY
	assert describe(True).kind is Kind.BOOL
	assert describe(3) is INT64
	assert describe(1.5).kind is Kind.FLOAT64
	assert describe([1, 2]) == slice_of(INT64)
	assert describe([1, "a"]) == slice_of(ANY)
	assert describe([]) == slice_of(ANY)
	assert describe({"a": 1}) == map_of(STRING, INT64)
	assert describe(User()) is describe_type(User)
	assert describe(object()) == ANY


def test_describe_callables():
	assert describe(join).display() == "func(string, ...string) string"
	assert describe(join).variadic
	assert describe(join).variadic_elem is STRING
	assert describe(divmod_).results == (INT64, INT64)
	assert describe(untyped) == func_of([ANY, ANY], [ANY])
	assert describe(notify).results == ()
	assert describe_type(Callable[[int], str]) == func_of([INT64], [STRING])


def test_func_of_requires_trailing_slice_when_variadic():
	with pytest.raises(ValueError):
		func_of([INT64], [], variadic=True)


def test_protocol_is_interface_with_methods():
	named = describe_type(Named)
	assert named.kind is Kind.INTERFACE
	assert named.methods == ("name",)
	assert can_convert(describe_type(Greeter), named)
	assert not can_convert(describe_type(User), named)


def test_interning_returns_canonical_instance():
	table = TypeTable()
	a = table.describe_type(list[int])
	assert table.describe_type(list[int]) is a
	assert table.intern(slice_of(INT64)) is a
	built = pointer_to(map_of(STRING, INT64))
	assert table.intern(built) is built
	assert table.intern(pointer_to(map_of(STRING, INT64))) is built


def test_concurrent_describe_is_consistent():
	table = TypeTable()
	shapes = [list[int], dict[str, Int8], User, Node, Pointer[User]]

	def work(i):
		return [table.describe_type(tp) for tp in shapes[i % len(shapes):] + shapes[: i % len(shapes)]]

	with ThreadPoolExecutor(max_workers=8) as pool:
		runs = list(pool.map(work, range(64)))

	for tp in shapes:
		expected = table.describe_type(tp)
		for i, run in enumerate(runs):
			got = run[(shapes.index(tp) - i % len(shapes)) % len(shapes)]
			assert got is expected


def test_local_self_referencing_struct():
	@dataclass
	class Chain:
		Name: str = ""
		Next: Pointer[Chain] = None

	td = describe_type(Chain)
	assert td.field_by_name("Name").type is STRING
	nxt = td.field_by_name("Next").type
	assert nxt.kind is Kind.POINTER
	assert nxt.elem is td


def test_unresolvable_annotation_only_affects_its_field():
	@dataclass
	class Partial:
		Name: str = ""
		Count: Int8 = 0
		Extra: MissingType = None  # noqa: F821

	td = describe_type(Partial)
	assert td.field_by_name("Name").type is STRING
	assert td.field_by_name("Count").type.kind is Kind.INT8
	assert td.field_by_name("Extra").type == ANY


def test_self_containing_containers():
	loop = []
	loop.append(loop)
	assert describe(loop) == slice_of(ANY)
	ring = {}
	ring["self"] = ring
	assert describe(ring) == map_of(STRING, ANY)
	shared = [1]
	assert describe([shared, shared]) == slice_of(slice_of(INT64))
