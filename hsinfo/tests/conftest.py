# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared fixtures: the typechecked prelude, a checker front-end for source
snippets and a helper that writes modules to disk.
"""

from __future__ import annotations

from pathlib import Path

import pytest

import hsinfo
from hsinfo.checker import TcResult, typecheck
from hsinfo.parser import parse_module_file, parse_module_text

PRELUDE_PATH = Path(hsinfo.__file__).parent / "prelude" / "Prelude.hs"


@pytest.fixture(scope="session")
def prelude_result() -> TcResult:
	return typecheck(parse_module_file(PRELUDE_PATH))


@pytest.fixture
def check_source(prelude_result: TcResult):
	"""Typecheck a source snippet against the prelude."""

	def _check(source: str, path: str = "M.hs") -> TcResult:
		return typecheck(parse_module_text(source, path), [prelude_result.env.details])

	return _check


@pytest.fixture
def write_module(tmp_path: Path):
	"""Write `source` to `tmp_path / name` and return the path."""

	def _write(name: str, source: str) -> Path:
		path = tmp_path / name
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(source)
		return path

	return _write
