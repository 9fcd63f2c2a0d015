# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from bindkit.cli import main

if __name__ == "__main__":
	raise SystemExit(main())
