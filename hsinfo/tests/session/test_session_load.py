# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import io
from pathlib import Path

from hsinfo.session import LoadHowMuch, Session, SessionConfig, SuccessFlag, Target


def _session(**kwargs) -> tuple[Session, io.StringIO]:
	stream = io.StringIO()
	return Session(SessionConfig(error_stream=stream, **kwargs)), stream


def _load(session: Session, *targets: Target) -> SuccessFlag:
	session.set_targets(list(targets))
	return session.load(LoadHowMuch.LOAD_ALL_TARGETS)


def test_imports_are_loaded_first(write_module) -> None:
	a = write_module("A.hs", "module A\nimport B\nfoo = bar + 1\n")
	write_module("B.hs", "module B\nbar = 2\n")
	session, stream = _session()
	assert _load(session, Target(path=a)) is SuccessFlag.SUCCEEDED
	graph = session.get_module_graph()
	assert [s.module for s in graph] == ["B", "A"]
	assert graph[1].imports == ["B"]
	assert graph[1].location.hs_file == str(a)
	assert stream.getvalue() == ""


def test_module_targets_use_import_paths(tmp_path: Path, write_module) -> None:
	write_module("lib/Util.hs", "module Util\nhelper = 1\n")
	session, _ = _session(import_paths=[tmp_path / "lib"])
	target = session.guess_target("Util")
	assert target == Target(module="Util")
	assert _load(session, target) is SuccessFlag.SUCCEEDED
	assert [s.module for s in session.get_module_graph()] == ["Util"]


def test_guess_target_for_files(tmp_path: Path, write_module) -> None:
	session, _ = _session()
	assert session.guess_target("Missing.hs") == Target(path=Path("Missing.hs"))
	existing = write_module("Script", "x = 1\n")
	assert session.guess_target(str(existing)) == Target(path=existing)


def test_missing_import_fails_with_location(write_module) -> None:
	a = write_module("A.hs", "module A\nimport Nope\n")
	session, stream = _session()
	assert _load(session, Target(path=a)) is SuccessFlag.FAILED
	assert f"{a}:2:1: error: Could not find module 'Nope'" in stream.getvalue()
	assert session.get_module_graph() == []


def test_missing_file(tmp_path: Path) -> None:
	session, stream = _session()
	assert _load(session, Target(path=tmp_path / "Gone.hs")) is SuccessFlag.FAILED
	assert "can't find file" in stream.getvalue()


def test_import_cycle(write_module) -> None:
	a = write_module("A.hs", "module A\nimport B\n")
	write_module("B.hs", "module B\nimport A\n")
	session, stream = _session()
	assert _load(session, Target(path=a)) is SuccessFlag.FAILED
	out = stream.getvalue()
	assert "import cycle detected: A -> B -> A" in out
	assert "A imports B" in out


def test_module_name_must_match_file(tmp_path: Path, write_module) -> None:
	write_module("B.hs", "module C\nx = 1\n")
	session, stream = _session(import_paths=[tmp_path])
	assert _load(session, Target(module="B")) is SuccessFlag.FAILED
	assert "file name does not match module name 'C'" in stream.getvalue()


def test_type_errors_fail_the_load(write_module) -> None:
	a = write_module("A.hs", 'module A\nf = 1 + "x"\n')
	session, stream = _session()
	assert _load(session, Target(path=a)) is SuccessFlag.FAILED
	assert "Couldn't match expected type 'Int' with actual type 'String'" in stream.getvalue()


def test_reload_replaces_previous_graph(write_module) -> None:
	a = write_module("A.hs", "module A\nx = 1\n")
	session, _ = _session()
	assert _load(session, Target(path=a)) is SuccessFlag.SUCCEEDED
	a.write_text("module A\nx = y\n")
	assert session.load() is SuccessFlag.FAILED
	assert session.get_module_graph() == []


def test_typecheck_module_reports_warnings(write_module) -> None:
	a = write_module("A.hs", "module A\ng = show undefined\n")
	session, _ = _session()
	assert _load(session, Target(path=a)) is SuccessFlag.SUCCEEDED
	[summary] = session.get_module_graph()
	checked = session.typecheck_module(session.parse_module(summary))
	assert [w.code for w in checked.warnings] == ["W-AMBIGUOUS"]
	assert checked.internals.module == "A"
	assert len(checked.typechecked_source) == 1
