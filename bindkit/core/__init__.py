# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
bindkit.core: kinds, descriptors and errors shared by every component.

Modules:
  - kinds: closed Kind enum, numeric widths, kind-level conversion table
  - types_core: TypeDescriptor/FieldDescriptor and the TypeTable cache
  - tags: struct tag parsing
  - errors: BindError and ErrorCode
"""

__all__ = [
	"kinds",
	"types_core",
	"tags",
	"errors",
]
