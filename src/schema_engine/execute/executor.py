"""
ConvergenceExecutor

Brings one descriptor in line with its desired existence using at most one
write:

  1) observe existence via StateReader
  2) PRESENT and exists / ABSENT and missing → SKIPPED, no write
  3) otherwise run the create (→ CREATED) or drop (→ DROPPED) statement

A non-zero write raises CommandError. Nothing guards the gap between the read
and the write; the engine assumes it is the only writer during a run.

Respects ExecutionPolicy:
- dry_run=True → the write is rendered but not run; result carries dry_run=True
"""

from __future__ import annotations

from src.enums import Ensure
from src.logger import LOGGER
from src.schema_engine.commands import CommandBuilder
from src.schema_engine.errors import CommandError
from src.schema_engine.execute.ports import (
    Action,
    ActionResult,
    CommandRunner,
    ExecutionPolicy,
)
from src.schema_engine.models import ResourceDescriptor
from src.schema_engine.state.reader import StateReader
from src.schema_engine.utils import redact_secrets


class ConvergenceExecutor:
    """Idempotent apply for a single descriptor (check, then act)."""

    def __init__(self, reader: StateReader, builder: CommandBuilder, runner: CommandRunner) -> None:
        self._reader = reader
        self._builder = builder
        self._runner = runner

    def apply(
        self, descriptor: ResourceDescriptor, *, policy: ExecutionPolicy = ExecutionPolicy()
    ) -> ActionResult:
        LOGGER.debug("Checking %s (ensure=%s)", descriptor.key, descriptor.ensure)
        observed = self._reader.exists(descriptor)
        wanted = descriptor.ensure is Ensure.PRESENT

        if observed == wanted:
            LOGGER.info("%s: already %s, skipped", descriptor.key, descriptor.ensure)
            return ActionResult(descriptor=descriptor, action=Action.SKIPPED)

        action = Action.CREATED if wanted else Action.DROPPED
        statement = self._builder.build_write(descriptor)
        shown = redact_secrets(statement)

        if policy.dry_run:
            LOGGER.info("(dry-run) %s: would run %s", descriptor.key, shown)
            return ActionResult(
                descriptor=descriptor, action=action, statement=shown, dry_run=True
            )

        LOGGER.info("%s: applying %s", descriptor.key, shown)
        result = self._runner.run(statement)
        if not result.ok:
            raise CommandError(
                resource=descriptor.key,
                command=result.command,
                exit_code=result.exit_code,
                stderr=result.stderr,
            )

        LOGGER.info("%s: %s", descriptor.key, action)
        return ActionResult(descriptor=descriptor, action=action, statement=shown)
