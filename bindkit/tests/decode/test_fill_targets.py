#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Scalar width checks and slice filling."""

from __future__ import annotations

import math
from typing import Any

import pytest

from bindkit.convert import to_float32
from bindkit.core.errors import BindError, ErrorCode
from bindkit.core.kinds import Float32, Int8, Int16, Kind, Uint8, Uint64
from bindkit.decode import fill_scalar, fill_slice, parse_number
from bindkit.value import Pointer


def test_int8_overflow():
	target = Pointer(Int8)
	with pytest.raises(BindError) as ei:
		fill_scalar(target, 255)
	assert ei.value.code is ErrorCode.OVERFLOW
	assert ei.value.kind is Kind.INT8
	assert target.load() == 0


def test_uint8_accepts_full_range():
	target = Pointer(Uint8)
	fill_scalar(target, 255)
	assert target.load() == 255
	with pytest.raises(BindError) as ei:
		fill_scalar(target, -1)
	assert ei.value.code is ErrorCode.OVERFLOW
	assert target.load() == 255


@pytest.mark.parametrize(
	"tp, ok, bad",
	[
		(Int8, -128, -129),
		(Int16, 32767, 32768),
		(int, 2**63 - 1, 2**63),
		(Uint64, 2**64 - 1, 2**64),
	],
)
def test_integer_bounds(tp, ok, bad):
	target = Pointer(tp)
	fill_scalar(target, ok)
	assert target.load() == ok
	with pytest.raises(BindError) as ei:
		fill_scalar(target, bad)
	assert ei.value.code is ErrorCode.OVERFLOW


def test_string_literals_are_parsed():
	target = Pointer(Int16)
	fill_scalar(target, "-42")
	assert target.load() == -42
	with pytest.raises(BindError) as ei:
		fill_scalar(target, "forty")
	assert ei.value.code is ErrorCode.PARSE_ERROR
	assert parse_number("1.5") == 1.5


def test_float32_rounds_and_overflows():
	target = Pointer(Float32)
	fill_scalar(target, 0.1)
	assert target.load() == to_float32(0.1)
	assert target.load() != 0.1
	with pytest.raises(BindError) as ei:
		fill_scalar(target, 1e39)
	assert ei.value.code is ErrorCode.OVERFLOW
	assert ei.value.kind is Kind.FLOAT32


def test_huge_float_literal_overflows():
	target = Pointer(float, 1.0)
	with pytest.raises(BindError) as ei:
		fill_scalar(target, "1e400")
	assert ei.value.code is ErrorCode.OVERFLOW
	assert ei.value.kind is Kind.FLOAT64
	assert target.load() == 1.0
	with pytest.raises(BindError) as ei:
		fill_scalar(Pointer(Float32), "-1e400")
	assert ei.value.code is ErrorCode.OVERFLOW
	assert ei.value.kind is Kind.FLOAT32


def test_spelled_out_infinity_is_accepted():
	target = Pointer(float)
	fill_scalar(target, "-inf")
	assert math.isinf(target.load())
	assert parse_number("Infinity") == math.inf


def test_float64_from_int():
	target = Pointer(float)
	fill_scalar(target, 3)
	assert target.load() == 3.0


def test_fractional_into_integer():
	with pytest.raises(BindError) as ei:
		fill_scalar(Pointer(int), 1.5)
	assert ei.value.code is ErrorCode.TYPE_MISMATCH


def test_non_numeric_target():
	with pytest.raises(BindError) as ei:
		fill_scalar(Pointer(str), 1)
	assert ei.value.code is ErrorCode.UNSUPPORTED_KIND
	with pytest.raises(BindError) as ei:
		fill_scalar(Pointer(bool), 1)
	assert ei.value.code is ErrorCode.UNSUPPORTED_KIND


def test_scalar_target_must_be_pointer():
	with pytest.raises(BindError) as ei:
		fill_scalar(5, 1)
	assert ei.value.code is ErrorCode.NON_POINTER
	with pytest.raises(BindError) as ei:
		fill_scalar(Pointer.nil(int), 1)
	assert ei.value.code is ErrorCode.NIL_POINTER


def test_fill_string_slice():
	target = Pointer(list[str], ["old"])
	before = target.load()
	fill_slice(target, ["a", "b"])
	assert target.load() == ["a", "b"]
	assert before == ["old"]


def test_fill_interface_slice():
	target = Pointer(list[Any])
	fill_slice(target, ["a", 1, None])
	assert target.load() == ["a", 1, None]


def test_fill_slice_rejects_bad_element_type():
	with pytest.raises(BindError) as ei:
		fill_slice(Pointer(list[int]), [1])
	assert ei.value.code is ErrorCode.ELEMENT_TYPE_MISMATCH


def test_fill_slice_rejects_bad_literal():
	target = Pointer(list[str], [])
	with pytest.raises(BindError) as ei:
		fill_slice(target, ["a", 2])
	assert ei.value.code is ErrorCode.ELEMENT_TYPE_MISMATCH
	assert ei.value.index == 1
	assert target.load() == []


def test_fill_slice_target_checks():
	with pytest.raises(BindError) as ei:
		fill_slice(Pointer(dict[int, str]), ["a"])
	assert ei.value.code is ErrorCode.NON_SLICE
	with pytest.raises(BindError) as ei:
		fill_slice(["a"], ["b"])
	assert ei.value.code is ErrorCode.NON_POINTER
