# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
hsinfo.core: shared spans, diagnostics, types and names used across stages.

Modules:
  - span: Span / SourcePoint and the containment relations
  - diagnostics: Diagnostic and SourceError
  - types_core: Type, Scheme and substitution helpers
  - names: Name, TyThing variants, Fixity, Instance
  - builtins: wired-in prelude names and type helpers
"""

__all__ = [
	"span",
	"diagnostics",
	"types_core",
	"names",
	"builtins",
]
