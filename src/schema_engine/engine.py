"""
Engine: high-level entry point for the schema engine.

Responsibilities
----------------
- Wire default components (runner, prober, builder, reader, executor, validator, graph).
- Expose a single entry point to run the full orchestration:
    - run(descriptors, policy)

Notes:
-----
- No CQL here; work is delegated to injected components.
- Defaults are provided, but everything can be overridden for testing or custom behaviour.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence

from src.schema_engine.commands import CommandBuilder
from src.schema_engine.config import ConnectionConfig
from src.schema_engine.execute.executor import ConvergenceExecutor
from src.schema_engine.execute.ports import CommandRunner, ExecutionPolicy, RunReport
from src.schema_engine.execute.runner import CqlshRunner
from src.schema_engine.graph import DEFAULT_GRAPH, DependencyGraph
from src.schema_engine.models import ResourceDescriptor
from src.schema_engine.orchestrator import Orchestrator
from src.schema_engine.probe import ConnectivityProber
from src.schema_engine.state.reader import StateReader
from src.schema_engine.validation.validator import Validator


class Engine:
    """
    High-level entry point for the schema engine.

    You can:
      - pass your own components (for custom behaviour), or
      - rely on defaults (cqlsh runner built from the connection config).

    Method:
      - run(descriptors, policy)
    """

    def __init__(
        self,
        config: ConnectionConfig,
        runner: CommandRunner | None = None,
        builder: CommandBuilder | None = None,
        validator: Validator | None = None,
        graph: DependencyGraph | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config

        # Wire defaults if not supplied
        self.runner = runner or CqlshRunner(config)
        self.builder = builder or CommandBuilder()
        self.validator = validator or Validator()
        self.graph = graph or DEFAULT_GRAPH

        self.prober = ConnectivityProber(self.runner, config.retry, sleep=sleep)
        self.reader = StateReader(self.runner, self.builder)
        self.executor = ConvergenceExecutor(self.reader, self.builder, self.runner)

        # Orchestrator (glue)
        self.orchestrator = Orchestrator(
            validator=self.validator,
            prober=self.prober,
            executor=self.executor,
            graph=self.graph,
        )

    def run(
        self,
        descriptors: Sequence[ResourceDescriptor],
        policy: ExecutionPolicy = ExecutionPolicy(),
    ) -> RunReport:
        """Validate, probe, then converge every descriptor in dependency order."""
        return self.orchestrator.run(descriptors, policy)
