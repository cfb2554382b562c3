"""
Command Runner

Runs one CQL script through the cqlsh client and reports its exit status.

Design
------
- Blocking: each call waits for the client process to exit.
- No retries and no interpretation of the output; callers decide what an
  exit status means (absence for reads, failure for writes).
- A timeout (ConnectionConfig.command_timeout) is reported as exit status -1.
"""

from __future__ import annotations

import subprocess

from src.logger import LOGGER
from src.schema_engine.config import ConnectionConfig
from src.schema_engine.execute.ports import CommandResult

TIMEOUT_EXIT_CODE = -1
NOT_FOUND_EXIT_CODE = 127


class CqlshRunner:
    """Execute scripts with the configured cqlsh binary."""

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config

    def run(self, script: str) -> CommandResult:
        """Run `script` and capture exit status, stdout and stderr."""
        display = self.config.display_command(script)
        LOGGER.debug("Running: %s", display)
        try:
            completed = subprocess.run(
                self.config.argv_for(script),
                capture_output=True,
                text=True,
                timeout=self.config.command_timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            LOGGER.warning(
                "Command timed out after %ss: %s", self.config.command_timeout, display
            )
            return CommandResult(
                command=display,
                exit_code=TIMEOUT_EXIT_CODE,
                stderr=f"timed out after {self.config.command_timeout}s",
            )
        except FileNotFoundError as error:
            return CommandResult(command=display, exit_code=NOT_FOUND_EXIT_CODE, stderr=str(error))

        LOGGER.debug("Exit status %d: %s", completed.returncode, display)
        return CommandResult(
            command=display,
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
