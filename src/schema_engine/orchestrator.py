"""
End-to-end orchestration for one schema convergence run.

Flow (one pass):
  1) Validate descriptors (ConfigError, before anything touches the store).
  2) Probe connectivity (ConnectivityError, before any schema command).
  3) Group descriptors by kind; apply kinds in dependency order.

Every descriptor of a kind reaches a terminal state before the next kind
starts. Within a kind, descriptors run in declaration order.
"""

from __future__ import annotations

from collections.abc import Sequence

from src.logger import LOGGER
from src.schema_engine.errors import CommandError
from src.schema_engine.execute.executor import ConvergenceExecutor
from src.schema_engine.execute.ports import Action, ActionResult, ExecutionPolicy, RunReport
from src.schema_engine.graph import DependencyGraph
from src.schema_engine.models import ResourceDescriptor, ResourceKind
from src.schema_engine.probe import ConnectivityProber
from src.schema_engine.validation.validator import Validator


class Orchestrator:
    """
    Glue for validate → probe → apply-by-kind.

    This class runs no commands itself; it delegates to injected components.
    """

    def __init__(
        self,
        validator: Validator,
        prober: ConnectivityProber,
        executor: ConvergenceExecutor,
        graph: DependencyGraph,
    ) -> None:
        self._validator = validator
        self._prober = prober
        self._executor = executor
        self._graph = graph

    # ---------- public API ----------

    def run(
        self,
        descriptors: Sequence[ResourceDescriptor],
        policy: ExecutionPolicy = ExecutionPolicy(),
    ) -> RunReport:
        """Converge every descriptor; raises the first CommandError (after the run unless fail-fast)."""
        LOGGER.info("Starting schema convergence for %d descriptor(s).", len(descriptors))
        self._validator.validate(descriptors)
        self._prober.probe()

        results: list[ActionResult] = []
        grouped = group_by_kind(descriptors)
        for kind in self._graph.ordered_kinds():
            batch = grouped.get(kind, ())
            if not batch:
                continue
            LOGGER.info("Applying %d %s descriptor(s).", len(batch), kind)
            for descriptor in batch:
                results.append(self._apply(descriptor, policy))

        report = RunReport(results=tuple(results))
        self._log_summary(report)
        first_error = report.first_error()
        if first_error is not None:
            raise first_error
        return report

    # ---------- steps ----------

    def _apply(self, descriptor: ResourceDescriptor, policy: ExecutionPolicy) -> ActionResult:
        try:
            return self._executor.apply(descriptor, policy=policy)
        except CommandError as error:
            LOGGER.error("%s", error)
            if policy.stop_on_first_error:
                raise
            return ActionResult(descriptor=descriptor, action=Action.FAILED, error=error)

    @staticmethod
    def _log_summary(report: RunReport) -> None:
        counts = report.counts()
        LOGGER.info(
            "Convergence finished: created=%d, dropped=%d, skipped=%d, failed=%d",
            counts.get(Action.CREATED, 0),
            counts.get(Action.DROPPED, 0),
            counts.get(Action.SKIPPED, 0),
            counts.get(Action.FAILED, 0),
        )


# ---------- tiny helpers ----------


def group_by_kind(
    descriptors: Sequence[ResourceDescriptor],
) -> dict[ResourceKind, tuple[ResourceDescriptor, ...]]:
    """Bucket descriptors by kind, keeping declaration order inside each bucket."""
    grouped: dict[ResourceKind, list[ResourceDescriptor]] = {}
    for descriptor in descriptors:
        grouped.setdefault(descriptor.kind, []).append(descriptor)
    return {kind: tuple(items) for kind, items in grouped.items()}
