# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict

from bindkit.core.errors import BindError
from bindkit.core.kinds import SCALAR_KINDS
from bindkit.core.types_core import ANY, FLOAT64, INT64, TypeDescriptor, map_of, scalar
from bindkit.decode import DecodeOptions, decode_map, fill_scalar
from bindkit.expr import evaluate
from bindkit.registry import builtin_registry
from bindkit.value import Pointer

_TYPE_NAMES: Dict[str, TypeDescriptor] = {k.display(): scalar(k) for k in SCALAR_KINDS}
_TYPE_NAMES.update({"int": INT64, "float": FLOAT64, "any": ANY, "interface{}": ANY})


def _type_name(text: str) -> TypeDescriptor:
	try:
		return _TYPE_NAMES[text]
	except KeyError:
		raise argparse.ArgumentTypeError(f"unknown type {text!r} (choose from {', '.join(sorted(_TYPE_NAMES))})") from None


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="bindkit", description="Reflective binding helpers (expressions, k=v decoding)")
	p.add_argument("-v", "--verbose", action="store_true", help="Log decoder/invoker activity to stderr")
	p.add_argument("--json", action="store_true", help="Emit machine-readable JSON (results and errors)")
	sub = p.add_subparsers(dest="cmd", required=True)

	ev = sub.add_parser("eval", help='Evaluate an inline call expression, e.g. {{ "hi" 3 | repeat }}')
	ev.add_argument("expression", help="Expression text")

	dm = sub.add_parser("decode-map", help="Decode int=value,... text into a map")
	dm.add_argument("text", help="Entries, e.g. 1=foo,2=bar")
	dm.add_argument("--key", type=_type_name, default=INT64, help="Map key type (default: int64)")
	dm.add_argument("--elem", type=_type_name, default=_TYPE_NAMES["string"], help="Map element type (default: string)")
	dm.add_argument("--entry-separator", default=",", help="Separator between entries (default: ,)")
	dm.add_argument("--pair-separator", default="=", help="Separator between key and value (default: =)")

	fs = sub.add_parser("fill-scalar", help="Store a numeric literal into a scalar of the given width")
	fs.add_argument("literal", help="Numeric literal")
	fs.add_argument("--kind", type=_type_name, required=True, help="Target type, e.g. int8, uint16, float32")
	return p


def _emit(args: argparse.Namespace, obj: Any) -> None:
	if args.json:
		print(json.dumps({"ok": True, "result": obj}, sort_keys=True, separators=(",", ":")))
	elif isinstance(obj, dict):
		print(json.dumps(obj, indent=2, sort_keys=True))
	else:
		print(obj)


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	if args.verbose:
		logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

	try:
		if args.cmd == "eval":
			_emit(args, evaluate(args.expression, builtin_registry()))
			return 0

		if args.cmd == "decode-map":
			target = Pointer(map_of(args.key, args.elem))
			opts = DecodeOptions(entry_separator=args.entry_separator, pair_separator=args.pair_separator)
			decode_map(args.text, target, opts)
			decoded = target.load() or {}
			_emit(args, {str(k): v for k, v in decoded.items()})
			return 0

		if args.cmd == "fill-scalar":
			target = Pointer(args.kind)
			fill_scalar(target, args.literal)
			_emit(args, target.load())
			return 0
	except BindError as err:
		if args.json:
			print(json.dumps({"ok": False, "error": err.to_dict()}, sort_keys=True, separators=(",", ":")))
		else:
			print(err.format_human(), file=sys.stderr)
		return 1

	raise AssertionError("unreachable")


__all__ = ["main"]
