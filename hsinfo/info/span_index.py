# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Point search over a typechecked tree.

`search(tree, point)` walks every node reachable from the root once and
collects, by the node's `kind` tag, the bindings, expressions and patterns
whose span is good and contains the point. Hits come out in depth-first
pre-order; callers that care about order sort them afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from hsinfo.checker.tc_nodes import NodeKind, TBind, TExpr, TNode, TPat, child_nodes
from hsinfo.core.span import SourcePoint


@dataclass
class SpanHits:
	bindings: List[TBind] = field(default_factory=list)
	expressions: List[TExpr] = field(default_factory=list)
	patterns: List[TPat] = field(default_factory=list)


def search(tree: object, point: SourcePoint) -> SpanHits:
	"""Every binding, expression and pattern whose span contains `point`."""
	hits = SpanHits()
	buckets: Dict[NodeKind, list] = {
		NodeKind.BINDING: hits.bindings,
		NodeKind.EXPRESSION: hits.expressions,
		NodeKind.PATTERN: hits.patterns,
	}
	roots = list(tree) if isinstance(tree, (list, tuple)) else [tree]
	stack: List[object] = list(reversed(roots))
	seen: set[int] = set()
	while stack:
		node = stack.pop()
		if id(node) in seen:
			continue
		seen.add(id(node))
		if isinstance(node, TNode):
			bucket = buckets.get(node.kind)
			loc = getattr(node, "loc", None)
			if bucket is not None and loc is not None and loc.is_good() and loc.contains(point):
				bucket.append(node)
		stack.extend(reversed(list(child_nodes(node))))
	return hits


__all__ = ["SpanHits", "search"]
