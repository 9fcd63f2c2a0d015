#!/usr/bin/env python3
# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Command-line front end: exit codes and human/JSON output."""

import json

import pytest

from bindkit.cli import main


def test_eval_prints_result(capsys):
	assert main(["eval", '{{ "hi" 3 | repeat }}']) == 0
	assert capsys.readouterr().out == "hihihi\n"


def test_eval_error_goes_to_stderr(capsys):
	assert main(["eval", '{{ "a" | nope }}']) == 1
	captured = capsys.readouterr()
	assert captured.out == ""
	assert captured.err.startswith("[unknown-function]")


def test_decode_map_default_types(capsys):
	assert main(["decode-map", "1=a,2=b"]) == 0
	assert json.loads(capsys.readouterr().out) == {"1": "a", "2": "b"}


def test_decode_map_custom_key_json(capsys):
	assert main(["--json", "decode-map", "3=x", "--key", "uint8"]) == 0
	assert json.loads(capsys.readouterr().out) == {"ok": True, "result": {"3": "x"}}


def test_decode_map_key_overflow_json(capsys):
	assert main(["--json", "decode-map", "300=x", "--key", "int8"]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["ok"] is False
	assert payload["error"]["code"] == "overflow"
	assert payload["error"]["kind"] == "INT8"
	assert payload["error"]["index"] == 0


def test_fill_scalar(capsys):
	assert main(["fill-scalar", "255", "--kind", "uint8"]) == 0
	assert capsys.readouterr().out == "255\n"


def test_fill_scalar_overflow(capsys):
	assert main(["fill-scalar", "255", "--kind", "int8"]) == 1
	err = capsys.readouterr().err
	assert err.startswith("[overflow]")
	assert "kind=int8" in err


def test_unknown_type_name_is_usage_error(capsys):
	with pytest.raises(SystemExit) as ei:
		main(["fill-scalar", "1", "--kind", "complex"])
	assert ei.value.code == 2
	assert "unknown type" in capsys.readouterr().err


def test_subcommand_required():
	with pytest.raises(SystemExit):
		main([])
