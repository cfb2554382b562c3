"""
Connectivity probe that gates every run.

Runs a fixed introspection script until it exits zero, sleeping a fixed delay
between attempts. This is the only component that retries: once all attempts
fail a `ConnectivityError` aborts the run before any schema command is issued.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from src.constants import PROBE_SCRIPT
from src.logger import LOGGER
from src.schema_engine.config import RetryPolicy
from src.schema_engine.errors import ConnectivityError
from src.schema_engine.execute.ports import CommandRunner


class ConnectivityProber:
    """Verify the store is reachable and the credentials are accepted."""

    def __init__(
        self,
        runner: CommandRunner,
        retry: RetryPolicy,
        sleep: Callable[[float], None] = time.sleep,
        script: str = PROBE_SCRIPT,
    ) -> None:
        self._runner = runner
        self._retry = retry
        self._sleep = sleep
        self._script = script

    def probe(self) -> None:
        """
        Attempt the probe up to `retry.tries` times.

        Sleeps `retry.sleep` seconds between consecutive attempts (never after
        the last one). Raises ConnectivityError when every attempt exits non-zero.
        """
        tries = self._retry.tries
        for attempt in range(1, tries + 1):
            result = self._runner.run(self._script)
            if result.ok:
                LOGGER.info("Store reachable (attempt %d/%d).", attempt, tries)
                return

            LOGGER.warning(
                "Connectivity probe failed (attempt %d/%d, exit status %d).",
                attempt,
                tries,
                result.exit_code,
            )
            if attempt == tries:
                raise ConnectivityError(
                    command=result.command,
                    exit_code=result.exit_code,
                    stderr=result.stderr,
                    attempts=tries,
                )
            self._sleep(self._retry.sleep)
