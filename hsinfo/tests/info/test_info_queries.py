# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import io
from pathlib import Path

from hsinfo.info import LOAD_ERROR, MODULE_NOT_FOUND, QueryError, QueryOk, get_identifier_info, get_type
from hsinfo.session import Session, SessionConfig


def _session(**kwargs) -> Session:
	return Session(SessionConfig(error_stream=io.StringIO(), **kwargs))


def _types(path: Path, line: int, col: int):
	result = get_type(_session(), path, (line, col))
	assert isinstance(result, QueryOk), result
	return result.value


def _info(path: Path, identifier: str) -> str:
	result = get_identifier_info(_session(), path, identifier)
	assert isinstance(result, QueryOk), result
	return result.value


def test_types_around_a_variable(write_module) -> None:
	path = write_module("M.hs", "f x = x + 1\n")
	assert _types(path, 1, 7) == [
		((1, 7, 1, 8), "Int"),
		((1, 7, 1, 12), "Int"),
		((1, 1, 1, 12), "Int -> Int"),
	]


def test_polymorphic_binding_type(write_module) -> None:
	path = write_module("M.hs", "module M\n\npair x = [x, x]\n")
	assert _types(path, 3, 11) == [
		((3, 11, 3, 12), "a"),
		((3, 10, 3, 16), "[a]"),
		((3, 1, 3, 16), "a -> [a]"),
	]


def test_ambiguous_expression_has_no_type(write_module) -> None:
	path = write_module("M.hs", "g = show undefined\n")
	assert _types(path, 1, 5) == [((1, 1, 1, 19), "String")]


def test_types_of_patterns(write_module) -> None:
	path = write_module("M.hs", "Just z = Just 1\n")
	assert _types(path, 1, 6) == [((1, 6, 1, 7), "Int"), ((1, 1, 1, 7), "Maybe Int")]


def test_instantiated_occurrence(write_module) -> None:
	path = write_module("M.hs", "n = length [True]\n")
	assert _types(path, 1, 6) == [
		((1, 5, 1, 11), "[Bool] -> Int"),
		((1, 5, 1, 18), "Int"),
		((1, 1, 1, 18), "Int"),
	]


def test_point_between_declarations(write_module) -> None:
	path = write_module("M.hs", "a = 1\n\nb = 2\n")
	assert _types(path, 2, 1) == []


def test_info_for_constructor(write_module) -> None:
	path = write_module("M.hs", "x = 1\n")
	assert _info(path, "Just") == "Just :: a -> Maybe a\t-- Defined in 'Prelude'"


def test_info_for_operator(write_module) -> None:
	path = write_module("M.hs", "x = 1\n")
	assert _info(path, "+") == "(+) :: Int -> Int -> Int\t-- Defined in 'Prelude'\ninfixl 6 +"


def test_info_for_list_describes_the_type_once(write_module) -> None:
	path = write_module("M.hs", "x = 1\n")
	assert _info(path, "[]") == "\n".join(
		[
			"data [] a = [] | a : [a]\t-- Defined in 'Prelude'",
			"instance Eq a => Eq [a]\t-- Defined in 'Prelude'",
			"instance Show a => Show [a]\t-- Defined in 'Prelude'",
		]
	)


def test_info_for_class(write_module) -> None:
	path = write_module("M.hs", "x = 1\n")
	assert _info(path, "Show").splitlines() == [
		"class Show a where",
		"  show :: a -> String\t-- Defined in 'Prelude'",
		"instance Show Int\t-- Defined in 'Prelude'",
		"instance Show String\t-- Defined in 'Prelude'",
		"instance Show Bool\t-- Defined in 'Prelude'",
		"instance Show a => Show [a]\t-- Defined in 'Prelude'",
		"instance Show a => Show (Maybe a)\t-- Defined in 'Prelude'",
	]


def test_info_for_home_binding(write_module) -> None:
	path = write_module("M.hs", "module M\n\ndouble :: Int -> Int\ndouble n = n + n\n")
	assert _info(path, "double") == f"double :: Int -> Int\t-- Defined at {path}:4:1"


def test_info_for_name_from_imported_module(write_module) -> None:
	path = write_module("A.hs", "module A\nimport B\nx = helper\n")
	b = write_module("B.hs", "module B\n\nhelper :: Int\nhelper = 1\n")
	assert _info(path, "helper") == f"helper :: Int\t-- Defined at {b}:4:1"


def test_unknown_identifier(write_module) -> None:
	path = write_module("M.hs", "x = 1\n")
	result = get_identifier_info(_session(), path, "nope")
	assert isinstance(result, QueryError)
	assert result.message == "<interactive>:1:1: error: Not in scope: 'nope'"


def test_file_that_fails_to_load(write_module) -> None:
	path = write_module("M.hs", "x = y\n")
	assert get_type(_session(), path, (1, 1)) == QueryError(LOAD_ERROR)
	assert get_identifier_info(_session(), path, "x") == QueryError(LOAD_ERROR)


def test_missing_file(tmp_path: Path) -> None:
	assert get_type(_session(), tmp_path / "Nope.hs", (1, 1)) == QueryError(LOAD_ERROR)


def test_file_that_is_not_utf8_fails_to_load(tmp_path: Path) -> None:
	path = tmp_path / "M.hs"
	path.write_bytes(b'x = "\xff\xfe"\n')
	assert get_type(_session(), path, (1, 1)) == QueryError(LOAD_ERROR)
	assert get_identifier_info(_session(), path, "x") == QueryError(LOAD_ERROR)


def test_module_name_is_not_a_file(tmp_path: Path, write_module) -> None:
	write_module("lib/B.hs", "module B\nx = 1\n")
	session = _session(import_paths=[tmp_path / "lib"])
	assert get_type(session, "B", (1, 1)) == QueryError(MODULE_NOT_FOUND)


def test_repeated_query_on_one_session(write_module) -> None:
	path = write_module("M.hs", "n = length [True]\n")
	session = _session()
	first = get_type(session, path, (1, 6))
	second = get_type(session, path, (1, 6))
	assert isinstance(first, QueryOk)
	assert first == second


def _within(inner, outer) -> bool:
	return (inner[0], inner[1]) >= (outer[0], outer[1]) and (inner[2], inner[3]) <= (outer[2], outer[3])


def test_every_column_is_innermost_first(write_module) -> None:
	line = 'h x = show (x + 1) ++ "!"'
	path = write_module("M.hs", line + "\n")
	for col in range(1, len(line) + 2):
		spans = [span for span, _ in _types(path, 1, col)]
		for span in spans:
			assert (span[0], span[1]) <= (1, col) <= (span[2], span[3]), (col, span)
		for i, earlier in enumerate(spans):
			for later in spans[i + 1:]:
				assert later == earlier or not _within(later, earlier), (col, spans)
