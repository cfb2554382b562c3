"""
State reader: does a schema object exist in the store right now?

Runs the descriptor's introspection script and maps the outcome to a boolean.
A non-zero exit is "not found", never an error. Only existence is observed;
declared attributes are not compared with live ones.
"""

from __future__ import annotations

from src.logger import LOGGER
from src.schema_engine.commands import CommandBuilder, ReadCommand
from src.schema_engine.execute.ports import CommandResult, CommandRunner
from src.schema_engine.models import ResourceDescriptor
from src.schema_engine.utils import iter_rows, iter_table_rows


class StateReader:
    """Existence checks for descriptors."""

    def __init__(self, runner: CommandRunner, builder: CommandBuilder) -> None:
        self._runner = runner
        self._builder = builder

    def exists(self, descriptor: ResourceDescriptor) -> bool:
        """True iff the introspection output shows the object is present."""
        read = self._builder.build_read(descriptor)
        result = self._runner.run(read.script)
        found = _interpret(read, result)
        LOGGER.debug("Observed %s: %s", descriptor.key, "exists" if found else "absent")
        return found


def _interpret(read: ReadCommand, result: CommandResult) -> bool:
    if not result.ok:
        return False
    if read.expect is None:
        return True
    if read.columns is None:
        wanted = set(read.expect)
        return any(wanted <= row for row in iter_rows(result.stdout))
    return any(_row_matches(row, read) for row in iter_table_rows(result.stdout))


def _row_matches(row: tuple[str, ...], read: ReadCommand) -> bool:
    return all(
        cell < len(row) and row[cell] == value for cell, value in zip(read.columns, read.expect)
    )
