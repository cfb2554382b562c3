"""
Kind-level dependency graph.

Edges are between resource kinds, not instances: every descriptor of a
prerequisite kind is applied before any descriptor of a dependent kind.
The graph is checked for cycles when it is built, so a bad edge set fails at
import time rather than halfway through a run.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.schema_engine.errors import ConfigError
from src.schema_engine.models import ResourceKind

KindEdge = tuple[ResourceKind, ResourceKind]

# (prerequisite, dependent). Type precedes Table only; it has no direct edge to Index or Permission.
KIND_DEPENDENCIES: tuple[KindEdge, ...] = (
    (ResourceKind.KEYSPACE, ResourceKind.TYPE),
    (ResourceKind.KEYSPACE, ResourceKind.TABLE),
    (ResourceKind.KEYSPACE, ResourceKind.PERMISSION),
    (ResourceKind.TYPE, ResourceKind.TABLE),
    (ResourceKind.TABLE, ResourceKind.INDEX),
    (ResourceKind.TABLE, ResourceKind.PERMISSION),
    (ResourceKind.INDEX, ResourceKind.USER),
    (ResourceKind.USER, ResourceKind.PERMISSION),
)


class DependencyGraph:
    """Static precedence between kinds with a deterministic topological order."""

    def __init__(
        self,
        edges: Iterable[KindEdge] = KIND_DEPENDENCIES,
        kinds: Iterable[ResourceKind] = tuple(ResourceKind),
    ) -> None:
        self._kinds: tuple[ResourceKind, ...] = tuple(kinds)
        self._edges: tuple[KindEdge, ...] = tuple(edges)
        self._prerequisites: dict[ResourceKind, set[ResourceKind]] = {k: set() for k in self._kinds}
        for before, after in self._edges:
            if before not in self._prerequisites or after not in self._prerequisites:
                raise ConfigError(f"Dependency edge {before}→{after} references an unknown kind.")
            if before == after:
                raise ConfigError(f"Kind {before} cannot depend on itself.")
            self._prerequisites[after].add(before)
        self._order = self._sort()

    @property
    def edges(self) -> tuple[KindEdge, ...]:
        return self._edges

    def ordered_kinds(self) -> tuple[ResourceKind, ...]:
        """Kinds in an order consistent with every edge, visited in declaration order."""
        return self._order

    def prerequisites(self, kind: ResourceKind) -> frozenset[ResourceKind]:
        """Direct prerequisites of `kind`."""
        return frozenset(self._prerequisites[kind])

    # ---------- helpers ----------

    def _sort(self) -> tuple[ResourceKind, ...]:
        """Depth-first topological sort; raises ConfigError on a cycle."""
        order: list[ResourceKind] = []
        visited: set[ResourceKind] = set()
        visiting: list[ResourceKind] = []

        def visit(kind: ResourceKind) -> None:
            if kind in visited:
                return
            if kind in visiting:
                cycle = visiting[visiting.index(kind):] + [kind]
                raise ConfigError("Dependency cycle between kinds: " + " → ".join(cycle))
            visiting.append(kind)
            for prerequisite in sorted(self._prerequisites[kind], key=self._kinds.index):
                visit(prerequisite)
            visiting.pop()
            visited.add(kind)
            order.append(kind)

        for kind in self._kinds:
            visit(kind)
        return tuple(order)


DEFAULT_GRAPH = DependencyGraph()
