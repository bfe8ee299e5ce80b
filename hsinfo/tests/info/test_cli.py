# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json

from hsinfo.cli import main


def test_type_command(write_module, capsys) -> None:
	path = write_module("M.hs", "f x = x + 1\n")
	assert main(["type", str(path), "1", "7"]) == 0
	out = capsys.readouterr().out
	assert out.splitlines() == ['1 7 1 8 "Int"', '1 7 1 12 "Int"', '1 1 1 12 "Int -> Int"']


def test_info_command(write_module, capsys) -> None:
	path = write_module("M.hs", "x = 1\n")
	assert main(["info", str(path), "Just"]) == 0
	assert capsys.readouterr().out == "Just :: a -> Maybe a\t-- Defined in 'Prelude'\n"


def test_json_output(write_module, capsys) -> None:
	path = write_module("M.hs", "Just z = Just 1\n")
	assert main(["--json", "type", str(path), "1", "6"]) == 0
	payload = json.loads(capsys.readouterr().out)
	assert payload == {
		"exit_code": 0,
		"result": [
			{"span": [1, 6, 1, 7], "type": "Int"},
			{"span": [1, 1, 1, 7], "type": "Maybe Int"},
		],
	}


def test_import_path_option(tmp_path, write_module, capsys) -> None:
	path = write_module("src/A.hs", "module A\nimport Lib\nx = helper\n")
	write_module("lib/Lib.hs", "module Lib\nhelper = 1\n")
	assert main(["-i", str(tmp_path / "lib"), "type", str(path), "3", "5"]) == 0
	assert capsys.readouterr().out.splitlines() == ['3 5 3 11 "Int"', '3 1 3 11 "Int"']


def test_load_failure(write_module, capsys) -> None:
	path = write_module("M.hs", "x = y\n")
	assert main(["type", str(path), "1", "1"]) == 1
	err = capsys.readouterr().err
	assert "Not in scope: variable 'y'" in err
	assert err.splitlines()[-1] == "Error loading targets"


def test_json_error(write_module, capsys) -> None:
	path = write_module("M.hs", "x = 1\n")
	assert main(["--json", "info", str(path), "nope"]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	assert payload["error"].endswith("Not in scope: 'nope'")
