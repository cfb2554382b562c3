"""
Exception hierarchy for the schema engine.

Each error names the stage that failed so callers can report it without
re-running at a higher verbosity:

- ConfigError        → "configuration" (validation before any command runs)
- ConnectivityError  → "connectivity"  (probe exhausted its attempts)
- CommandError       → "<kind> <identity>" (a create/drop exited non-zero)
"""

from __future__ import annotations


class SchemaEngineError(Exception):
    """Base class for all schema engine failures."""

    stage: str = "engine"


class ConfigError(SchemaEngineError):
    """Desired state or connection settings are malformed."""

    stage = "configuration"


class ConnectivityError(SchemaEngineError):
    """The store could not be reached after every configured attempt."""

    stage = "connectivity"

    def __init__(self, command: str, exit_code: int, stderr: str, attempts: int) -> None:
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        self.attempts = attempts
        super().__init__(
            f"Store unreachable after {attempts} attempt(s): `{command}` "
            f"exited with status {exit_code}" + (f": {stderr.strip()}" if stderr.strip() else "")
        )


class CommandError(SchemaEngineError):
    """A create or drop statement exited non-zero."""

    def __init__(self, resource: str, command: str, exit_code: int, stderr: str) -> None:
        self.resource = resource
        self.stage = resource
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(
            f"Failed to converge {resource}: `{command}` exited with status {exit_code}"
            + (f": {stderr.strip()}" if stderr.strip() else "")
        )
