"""
Connection settings for one engine run.

`ConnectionConfig` is immutable and built once per run. It owns the command
prefix: every script reaches the store as

    <command> <auth-options> <additional-options> -e <script> <host> <port>

The script is a single argv element, so no shell quoting is involved.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field

from src import settings
from src.constants import REDACTED
from src.schema_engine.errors import ConfigError
from src.schema_engine.utils import redact_secrets


@dataclass(frozen=True)
class RetryPolicy:
    """How often the connectivity probe is attempted, and how long to wait in between."""

    tries: int = settings.CONNECTION_TRIES
    sleep: float = settings.CONNECTION_TRY_SLEEP

    def __post_init__(self) -> None:
        if isinstance(self.tries, bool) or not isinstance(self.tries, int) or self.tries < 1:
            raise ConfigError(f"connection_tries must be an integer >= 1, got {self.tries!r}")
        if self.sleep < 0:
            raise ConfigError(f"connection_try_sleep must be >= 0, got {self.sleep!r}")


@dataclass(frozen=True)
class InlineCredentials:
    """User and password passed on the command line."""

    user: str
    password: str = field(repr=False)

    def options(self) -> list[str]:
        return ["-u", self.user, "-p", self.password]

    def redacted_options(self) -> list[str]:
        return ["-u", self.user, "-p", REDACTED]


@dataclass(frozen=True)
class CredentialFile:
    """Client configuration file holding the credentials (produced outside the engine)."""

    path: str

    def options(self) -> list[str]:
        return ["--cqlshrc", self.path]

    def redacted_options(self) -> list[str]:
        return self.options()


Credentials = InlineCredentials | CredentialFile


@dataclass(frozen=True)
class ConnectionConfig:
    """Everything needed to run a script against the store."""

    command: str = settings.CQLSH_COMMAND
    host: str = settings.CQLSH_HOST
    port: int = settings.CQLSH_PORT
    credentials: Credentials | None = None
    additional_options: str = ""
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    command_timeout: float | None = None

    def __post_init__(self) -> None:
        if not self.command:
            raise ConfigError("cqlsh_command must not be empty")
        if not 0 < int(self.port) < 65536:
            raise ConfigError(f"cqlsh_port must be a valid TCP port, got {self.port!r}")
        if self.command_timeout is not None and self.command_timeout <= 0:
            raise ConfigError(f"command_timeout must be > 0, got {self.command_timeout!r}")

    # ---------- argv rendering ----------

    def argv_for(self, script: str) -> list[str]:
        """Full argument vector to run `script`."""
        auth = self.credentials.options() if self.credentials else []
        return self._assemble(auth, script)

    def redacted_argv_for(self, script: str) -> list[str]:
        """Same as `argv_for`, with the password masked (safe for logs and errors)."""
        auth = self.credentials.redacted_options() if self.credentials else []
        return self._assemble(auth, script)

    def display_command(self, script: str) -> str:
        """Shell-quoted, password-masked command line for messages."""
        return shlex.join(self.redacted_argv_for(redact_secrets(script)))

    def _assemble(self, auth: list[str], script: str) -> list[str]:
        return [
            self.command,
            *auth,
            *shlex.split(self.additional_options),
            "-e",
            script,
            self.host,
            str(self.port),
        ]
