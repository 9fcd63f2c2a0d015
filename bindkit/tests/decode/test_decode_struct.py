#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""`Field=value,...` decoding into struct targets."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from bindkit.core.errors import BindError, ErrorCode
from bindkit.decode import DecodeOptions, decode_struct
from bindkit.value import Pointer, new

STRICT = DecodeOptions(strict_fields=True)


@dataclass
class User:
	Name: str = ""
	Github: str = ""
	Age: int = 0
	password: str = ""


def test_exported_string_fields_are_written():
	u = User()
	decode_struct("Name=ada,Github=ada-l", Pointer.to(u))
	assert u == User(Name="ada", Github="ada-l")


def test_skips_in_permissive_mode():
	u = User(password="keep")
	decode_struct("Name=ada,password=x,Age=3,Nick=y", Pointer.to(u))
	assert u.Name == "ada"
	assert u.password == "keep"
	assert u.Age == 0


def test_new_struct_target():
	p = new(User)
	decode_struct("Github=gh", p)
	assert p.load().Github == "gh"


@pytest.mark.parametrize(
	"text, code, index",
	[
		("Name=a,Nick=y", ErrorCode.UNKNOWN_FIELD, 1),
		("password=x", ErrorCode.NOT_SETTABLE, 0),
		("Name=a,Github=b,Age=3", ErrorCode.VALUE_TYPE_MISMATCH, 2),
	],
)
def test_strict_mode_reports_skips(text, code, index):
	u = User()
	with pytest.raises(BindError) as ei:
		decode_struct(text, Pointer.to(u), STRICT)
	assert ei.value.code is code
	assert ei.value.index == index
	assert ei.value.path == text.split(",")[index].split("=")[0]


def test_strict_mode_keeps_earlier_entries():
	u = User()
	with pytest.raises(BindError):
		decode_struct("Name=a,Nick=y", Pointer.to(u), STRICT)
	assert u.Name == "a"


def test_target_checks():
	with pytest.raises(BindError) as ei:
		decode_struct("Name=a", User())
	assert ei.value.code is ErrorCode.NON_POINTER
	with pytest.raises(BindError) as ei:
		decode_struct("Name=a", Pointer.nil(User))
	assert ei.value.code is ErrorCode.NIL_POINTER
	with pytest.raises(BindError) as ei:
		decode_struct("Name=a", Pointer(dict[int, str], {}))
	assert ei.value.code is ErrorCode.NON_STRUCT


def test_malformed_entry_is_an_error_even_when_permissive():
	with pytest.raises(BindError) as ei:
		decode_struct("Name", Pointer.to(User()))
	assert ei.value.code is ErrorCode.PARSE_ERROR


def test_locally_defined_struct():
	@dataclass
	class Entry:
		Name: str = ""
		Next: Pointer[Entry] = None

	e = Entry()
	decode_struct("Name=head", Pointer.to(e), STRICT)
	assert e.Name == "head"
