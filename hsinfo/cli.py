# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Command line front end.

  hsinfo info FILE IDENTIFIER
  hsinfo type FILE LINE COL

`info` prints the identifier's description. `type` prints one line per
fragment, innermost first: `line col end_line end_col "type"`. With --json
both print a JSON object instead (`{"exit_code": ..., "result"|"error": ...}`).
Errors go to stderr and exit with status 1.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from hsinfo.info import QueryError, get_identifier_info, get_type
from hsinfo.session import Session, SessionConfig


def _build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog="hsinfo", description="Identifier info and types at a point")
	parser.add_argument(
		"-i",
		"--import-path",
		dest="import_paths",
		action="append",
		type=Path,
		default=[],
		help="Directory searched for imported modules (repeatable)",
	)
	parser.add_argument(
		"--no-implicit-prelude",
		dest="implicit_prelude",
		action="store_false",
		help="Do not import Prelude implicitly",
	)
	parser.add_argument("--tab-width", type=int, default=8, help="Tab stop used for layout (default: 8)")
	parser.add_argument("--json", action="store_true", help="Print the result as JSON")
	commands = parser.add_subparsers(dest="command", required=True)

	info = commands.add_parser("info", help="Describe an identifier")
	info.add_argument("file", type=Path)
	info.add_argument("identifier")

	typ = commands.add_parser("type", help="Types of the fragments around a point")
	typ.add_argument("file", type=Path)
	typ.add_argument("line", type=int)
	typ.add_argument("col", type=int)
	return parser


def main(argv: list[str] | None = None) -> int:
	args = _build_parser().parse_args(argv)
	config = SessionConfig(
		import_paths=list(args.import_paths),
		implicit_prelude=args.implicit_prelude,
		tab_width=args.tab_width,
	)
	session = Session(config)
	if args.command == "info":
		result = get_identifier_info(session, args.file, args.identifier)
	else:
		result = get_type(session, args.file, (args.line, args.col))

	if isinstance(result, QueryError):
		if args.json:
			print(json.dumps({"exit_code": 1, "error": result.message}))
		else:
			print(result.message, file=sys.stderr)
		return 1

	if args.json:
		if args.command == "info":
			payload = result.value
		else:
			payload = [{"span": list(span), "type": ty} for span, ty in result.value]
		print(json.dumps({"exit_code": 0, "result": payload}))
	elif args.command == "info":
		print(result.value)
	else:
		for (line, col, end_line, end_col), ty in result.value:
			print(f"{line} {col} {end_line} {end_col} {json.dumps(ty)}")
	return 0


__all__ = ["main"]
