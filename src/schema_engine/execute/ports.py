"""
Execution ports and result types.

- CommandRunner: protocol for anything that can run a CQL script (cqlsh, fakes, etc.)
- CommandResult: exit status and captured output of one invocation
- ExecutionPolicy: toggles for dry-run and error handling
- ActionResult / RunReport: structured outcomes to log or surface upstream
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from src.schema_engine.errors import CommandError
from src.schema_engine.models import ResourceDescriptor


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single client invocation."""

    command: str  # display form, secrets masked
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandRunner(Protocol):
    """Runs one CQL script against the store and reports how it exited."""

    def run(self, script: str) -> CommandResult: ...


class Action(StrEnum):
    SKIPPED = "skipped"  # observed state already matches
    CREATED = "created"
    DROPPED = "dropped"
    FAILED = "failed"  # only recorded when stop_on_first_error is off


@dataclass(frozen=True)
class ExecutionPolicy:
    """Controls how the executor behaves."""

    dry_run: bool = False
    stop_on_first_error: bool = True


@dataclass(frozen=True)
class ActionResult:
    """Outcome for a single descriptor."""

    descriptor: ResourceDescriptor
    action: Action
    statement: str | None = None  # write script that ran (or would run in dry-run)
    dry_run: bool = False
    error: CommandError | None = None


@dataclass(frozen=True)
class RunReport:
    """Outcome for applying a whole set of descriptors."""

    results: tuple[ActionResult, ...]

    @property
    def ok(self) -> bool:
        return all(result.action != Action.FAILED for result in self.results)

    @property
    def changed(self) -> bool:
        return any(r.action in (Action.CREATED, Action.DROPPED) for r in self.results)

    def counts(self) -> dict[Action, int]:
        """Number of results per action (actions with no results are omitted)."""
        return dict(Counter(result.action for result in self.results))

    def first_error(self) -> CommandError | None:
        for result in self.results:
            if result.error is not None:
                return result.error
        return None
