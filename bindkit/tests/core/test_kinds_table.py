#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Kind universe: conversion table totality and numeric ranges."""

import pytest

from bindkit.core.kinds import (
	COMPOSITE_KINDS,
	CONVERSIONS,
	Conversion,
	Kind,
	NUMERIC_KINDS,
	conversion,
	float_max,
	int_range,
)


def test_table_covers_every_pair():
	assert len(CONVERSIONS) == len(Kind) ** 2
	for src in Kind:
		for dst in Kind:
			assert isinstance(conversion(src, dst), Conversion)


def test_anything_boxes_into_interface():
	for src in Kind:
		assert conversion(src, Kind.INTERFACE) is Conversion.INTERFACE


def test_same_kind_is_identical_or_shape():
	for k in Kind:
		if k is Kind.INTERFACE:
			continue
		expected = Conversion.SHAPE if k in COMPOSITE_KINDS else Conversion.IDENTICAL
		assert conversion(k, k) is expected


def test_numeric_kinds_convert_among_themselves():
	for src in NUMERIC_KINDS:
		for dst in NUMERIC_KINDS:
			if src is not dst:
				assert conversion(src, dst) is Conversion.NUMERIC


def test_bool_and_string_never_become_numbers():
	for k in NUMERIC_KINDS:
		assert conversion(Kind.STRING, k) is Conversion.NONE
		assert conversion(k, Kind.STRING) is Conversion.NONE
		assert conversion(Kind.BOOL, k) is Conversion.NONE
	assert conversion(Kind.SLICE, Kind.MAP) is Conversion.NONE


def test_int_ranges():
	assert int_range(Kind.INT8) == (-128, 127)
	assert int_range(Kind.UINT8) == (0, 255)
	assert int_range(Kind.INT64) == (-(2**63), 2**63 - 1)
	assert int_range(Kind.UINT64) == (0, 2**64 - 1)
	with pytest.raises(ValueError):
		int_range(Kind.STRING)


def test_float_max_and_display():
	assert float_max(Kind.FLOAT32) < float_max(Kind.FLOAT64)
	with pytest.raises(ValueError):
		float_max(Kind.INT32)
	assert Kind.UINT16.display() == "uint16"
	assert Kind.POINTER.display() == "ptr"
