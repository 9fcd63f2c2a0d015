# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Struct tag parsing.

A tag string is a space-separated list of `key:"value"` pairs, e.g.

	json:"name,omitempty" xml:"n"

Keys are runs of printable characters other than space, quote and colon;
values are double-quoted with backslash escapes. Parsing stops quietly at the
first malformed pair: everything before it is kept, nothing after it is
reported. Lookups never raise; a missing key is simply absent.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

TagItems = Tuple[Tuple[str, str], ...]

_SIMPLE_ESCAPES = {
	"a": "\a",
	"b": "\b",
	"f": "\f",
	"n": "\n",
	"r": "\r",
	"t": "\t",
	"v": "\v",
	"\\": "\\",
	'"': '"',
	"'": "'",
}
_HEX_WIDTH = {"x": 2, "u": 4, "U": 8}


def _unescape(raw: str) -> Optional[str]:
	"""Decode backslash escapes in a quoted tag value; None when an escape is malformed."""
	out: List[str] = []
	i = 0
	n = len(raw)
	while i < n:
		ch = raw[i]
		if ch != "\\":
			out.append(ch)
			i += 1
			continue
		if i + 1 >= n:
			return None
		esc = raw[i + 1]
		if esc in _SIMPLE_ESCAPES:
			out.append(_SIMPLE_ESCAPES[esc])
			i += 2
			continue
		width = _HEX_WIDTH.get(esc)
		digits = raw[i + 2 : i + 2 + width] if width else ""
		if not width or len(digits) != width or not all(c in "0123456789abcdefABCDEF" for c in digits):
			return None
		code = int(digits, 16)
		if code > 0x10FFFF:
			return None
		out.append(chr(code))
		i += 2 + width
	return "".join(out)


def parse_tag(tag: str) -> Dict[str, str]:
	"""Parse a Go-style tag string into a key -> value mapping."""
	out: Dict[str, str] = {}
	i = 0
	n = len(tag)
	while i < n:
		while i < n and tag[i] == " ":
			i += 1
		if i >= n:
			break
		start = i
		while i < n and tag[i] > " " and tag[i] not in ':"' and tag[i] != "\x7f":
			i += 1
		if i == start or i + 1 >= n or tag[i] != ":" or tag[i + 1] != '"':
			break
		key = tag[start:i]
		i += 1  # ':'
		qstart = i
		i += 1  # opening quote
		while i < n and tag[i] != '"':
			if tag[i] == "\\":
				i += 1
			i += 1
		if i >= n:
			break
		raw = tag[qstart + 1 : i]
		i += 1  # closing quote
		value = _unescape(raw)
		if value is None:
			break
		# First occurrence wins, matching lookup order in the tag string.
		out.setdefault(key, value)
	return out


def tags_from_metadata(metadata: Mapping[str, Any]) -> TagItems:
	"""
	Extract tag items from dataclass field metadata.

	Accepts a tag string under `"tag"` and/or an explicit mapping under
	`"tags"`; explicit entries win over parsed ones. The result is a sorted
	tuple so descriptors holding it stay hashable.
	"""
	merged: Dict[str, str] = {}
	raw = metadata.get("tag")
	if isinstance(raw, str):
		merged.update(parse_tag(raw))
	explicit = metadata.get("tags")
	if isinstance(explicit, Mapping):
		merged.update({str(k): str(v) for k, v in explicit.items()})
	return tuple(sorted(merged.items()))


__all__ = ["TagItems", "parse_tag", "tags_from_metadata"]
